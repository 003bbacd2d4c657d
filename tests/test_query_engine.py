# tests/test_query_engine.py

from __future__ import annotations

import math
from datetime import datetime, timezone

import pytest

from taskboard.core.query_engine import ListOptions, build_pagination


# ---- option parsing ----


def test_defaults_when_params_missing() -> None:
    options = ListOptions.from_params({})
    assert options == ListOptions(page=1, limit=10, sort_by="createdAt", sort_order="desc")
    assert options.skip == 0


@pytest.mark.parametrize(
    ("raw_page", "raw_limit", "page", "limit"),
    [
        ("3", "5", 3, 5),
        ("abc", "xyz", 1, 10),
        ("0", "0", 1, 10),
        ("-2", "-7", 1, 10),
        ("2.5", "", 1, 10),
        (4, 20, 4, 20),
    ],
)
def test_page_and_limit_fall_back_to_defaults(raw_page, raw_limit, page, limit) -> None:
    options = ListOptions.from_params({"page": raw_page, "limit": raw_limit})
    assert (options.page, options.limit) == (page, limit)


def test_limit_is_capped() -> None:
    options = ListOptions.from_params({"limit": "5000"}, max_limit=100)
    assert options.limit == 100


def test_unknown_filters_mean_no_filter() -> None:
    options = ListOptions.from_params({
        "status": "archived",
        "priority": "urgent",
        "search": "   ",
        "sortBy": "password",
        "sortOrder": "sideways",
    })
    assert options.status is None
    assert options.priority is None
    assert options.search is None
    assert options.sort_by == "createdAt"
    assert options.sort_order == "desc"


def test_all_means_no_filter() -> None:
    options = ListOptions.from_params({"status": "all", "priority": "all"})
    assert options.status is None
    assert options.priority is None


def test_skip() -> None:
    assert ListOptions(page=3, limit=7).skip == 14


# ---- pagination math ----


@pytest.mark.parametrize("total", [0, 1, 9, 10, 11, 25])
@pytest.mark.parametrize("page", [1, 2, 3])
def test_pagination_formulae(total: int, page: int) -> None:
    limit = 10
    meta = build_pagination(page, limit, total)
    assert meta.current_page == page
    assert meta.total_pages == math.ceil(total / limit)
    assert meta.total_tasks == total
    assert meta.has_next_page == (page * limit < total)
    assert meta.has_prev_page == (page > 1)


# ---- queries against the store ----


@pytest.mark.asyncio
async def test_list_is_scoped_to_owner(engine, add_task) -> None:
    await add_task("owner-a", title="Mine")
    await add_task("owner-b", title="Theirs")

    page = await engine.list_tasks("owner-a", ListOptions())

    assert [t.title for t in page.tasks] == ["Mine"]
    assert page.pagination.total_tasks == 1


@pytest.mark.asyncio
async def test_pages_skip_and_limit(engine, add_task) -> None:
    for i in range(7):
        await add_task(minutes=i, title=f"T{i}")

    first = await engine.list_tasks("owner-a", ListOptions(page=1, limit=3))
    third = await engine.list_tasks("owner-a", ListOptions(page=3, limit=3))
    beyond = await engine.list_tasks("owner-a", ListOptions(page=4, limit=3))

    # default sort: createdAt desc
    assert [t.title for t in first.tasks] == ["T6", "T5", "T4"]
    assert [t.title for t in third.tasks] == ["T0"]
    assert beyond.tasks == []

    assert first.pagination.total_pages == 3
    assert first.pagination.has_next_page is True
    assert first.pagination.has_prev_page is False
    assert third.pagination.has_next_page is False
    assert third.pagination.has_prev_page is True
    assert beyond.pagination.total_tasks == 7


@pytest.mark.asyncio
async def test_status_filter_partitions_the_set(engine, add_task) -> None:
    statuses = ["pending", "in-progress", "completed", "completed", "pending"]
    for i, status in enumerate(statuses):
        await add_task(minutes=i, status=status)

    everything = await engine.list_tasks("owner-a", ListOptions(limit=100))
    seen = set()
    for status in ("pending", "in-progress", "completed"):
        page = await engine.list_tasks("owner-a", ListOptions(limit=100, status=status))
        assert all(t.status.value == status for t in page.tasks)
        seen.update(t.id for t in page.tasks)

    assert seen == {t.id for t in everything.tasks}


@pytest.mark.asyncio
async def test_priority_filter(engine, add_task) -> None:
    await add_task(priority="high", title="H")
    await add_task(priority="low", title="L")

    page = await engine.list_tasks("owner-a", ListOptions(priority="high"))
    assert [t.title for t in page.tasks] == ["H"]


@pytest.mark.asyncio
async def test_search_matches_title_or_description_case_insensitively(engine, add_task) -> None:
    await add_task(minutes=0, title="Quarterly Report")
    await add_task(minutes=1, title="Email", description="send the REPORT to Bob")
    await add_task(minutes=2, title="Groceries", description="milk")

    page = await engine.list_tasks("owner-a", ListOptions(search="report"))

    assert sorted(t.title for t in page.tasks) == ["Email", "Quarterly Report"]
    assert page.pagination.total_tasks == 2


@pytest.mark.asyncio
async def test_search_is_literal_substring(engine, add_task) -> None:
    await add_task(title="100% done")
    await add_task(title="1000 lines")

    page = await engine.list_tasks("owner-a", ListOptions(search="0%"))
    assert [t.title for t in page.tasks] == ["100% done"]


@pytest.mark.asyncio
async def test_search_folds_case_beyond_ascii(engine, add_task) -> None:
    await add_task(minutes=0, title="Отчёт за квартал")
    await add_task(minutes=1, title="Почта", description="отправить ОТЧЁТ Борису")
    await add_task(minutes=2, title="Straße", description="")
    await add_task(minutes=3, title="Покупки", description="молоко")

    cyrillic = await engine.list_tasks("owner-a", ListOptions(search="отчёт"))
    upper = await engine.list_tasks("owner-a", ListOptions(search="ОТЧЁТ"))
    german = await engine.list_tasks("owner-a", ListOptions(search="STRASSE"))

    assert sorted(t.title for t in cyrillic.tasks) == ["Отчёт за квартал", "Почта"]
    assert cyrillic.pagination.total_tasks == 2
    assert {t.id for t in upper.tasks} == {t.id for t in cyrillic.tasks}
    assert [t.title for t in german.tasks] == ["Straße"]


@pytest.mark.asyncio
async def test_page_far_past_the_end_is_empty(engine, add_task) -> None:
    await add_task(title="Only")

    page = await engine.list_tasks("owner-a", ListOptions(page=10 ** 20, limit=10))

    assert page.tasks == []
    assert page.pagination.current_page == 10 ** 20
    assert page.pagination.total_tasks == 1
    assert page.pagination.total_pages == 1
    assert page.pagination.has_next_page is False
    assert page.pagination.has_prev_page is True


@pytest.mark.asyncio
async def test_filters_are_and_combined(engine, add_task) -> None:
    await add_task(title="report a", status="completed", priority="high")
    await add_task(title="report b", status="completed", priority="low")
    await add_task(title="report c", status="pending", priority="high")
    await add_task(title="other", status="completed", priority="high")

    page = await engine.list_tasks(
        "owner-a",
        ListOptions(status="completed", priority="high", search="report"),
    )
    assert [t.title for t in page.tasks] == ["report a"]


@pytest.mark.asyncio
async def test_sort_by_title_ascending(engine, add_task) -> None:
    for i, title in enumerate(["banana", "apple", "cherry"]):
        await add_task(minutes=i, title=title)

    page = await engine.list_tasks("owner-a", ListOptions(sort_by="title", sort_order="asc"))
    assert [t.title for t in page.tasks] == ["apple", "banana", "cherry"]


@pytest.mark.asyncio
async def test_sort_by_priority_uses_rank(engine, add_task) -> None:
    for i, priority in enumerate(["medium", "high", "low"]):
        await add_task(minutes=i, priority=priority)

    asc = await engine.list_tasks("owner-a", ListOptions(sort_by="priority", sort_order="asc"))
    desc = await engine.list_tasks("owner-a", ListOptions(sort_by="priority", sort_order="desc"))

    assert [t.priority.value for t in asc.tasks] == ["low", "medium", "high"]
    assert [t.priority.value for t in desc.tasks] == ["high", "medium", "low"]


@pytest.mark.asyncio
async def test_sort_by_due_date(engine, add_task) -> None:
    await add_task(title="later", due_date=datetime(2025, 6, 1, tzinfo=timezone.utc))
    await add_task(title="sooner", due_date=datetime(2025, 2, 1, tzinfo=timezone.utc))

    page = await engine.list_tasks("owner-a", ListOptions(sort_by="dueDate", sort_order="asc"))
    assert [t.title for t in page.tasks] == ["sooner", "later"]


@pytest.mark.asyncio
async def test_ties_are_ordered_deterministically(engine, add_task) -> None:
    for _ in range(5):
        await add_task(minutes=0)

    first = await engine.list_tasks("owner-a", ListOptions())
    second = await engine.list_tasks("owner-a", ListOptions())

    ids = [t.id for t in first.tasks]
    assert ids == [t.id for t in second.tasks]
    assert ids == sorted(ids)


# ---- statistics ----


@pytest.mark.asyncio
async def test_stats_for_owner_without_tasks(engine) -> None:
    stats = await engine.compute_stats("nobody")
    assert stats.to_response() == {"total": 0, "pending": 0, "in-progress": 0, "completed": 0}


@pytest.mark.asyncio
async def test_stats_counts_by_status(engine, add_task) -> None:
    for status in ["pending", "pending", "in-progress", "completed", "completed", "completed"]:
        await add_task(status=status)
    await add_task("owner-b", status="pending")

    stats = (await engine.compute_stats("owner-a")).to_response()
    page = await engine.list_tasks("owner-a", ListOptions(limit=1000))

    assert stats == {"total": 6, "pending": 2, "in-progress": 1, "completed": 3}
    assert stats["total"] == stats["pending"] + stats["in-progress"] + stats["completed"]
    assert stats["total"] == page.pagination.total_tasks
