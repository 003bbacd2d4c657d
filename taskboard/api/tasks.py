from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from taskboard.core.models import TaskCreate, TaskUpdate
from taskboard.core.query_engine import ListOptions, TaskQueryEngine
from taskboard.core.service import TaskService
from taskboard.dependencies import (
    get_current_user_id,
    get_list_options,
    get_query_engine,
    get_task_service,
)

router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
    dependencies=[Depends(get_current_user_id)],
)


@router.get("/stats", response_model=Dict[str, Any])
async def get_task_stats(
    user_id: str = Depends(get_current_user_id),
    engine: TaskQueryEngine = Depends(get_query_engine),
):
    """
    Количество задач пользователя по статусам
    """
    stats = await engine.compute_stats(user_id)
    return {"success": True, "data": {"stats": stats.to_response()}}


@router.get("", response_model=Dict[str, Any])
async def get_tasks(
    user_id: str = Depends(get_current_user_id),
    options: ListOptions = Depends(get_list_options),
    engine: TaskQueryEngine = Depends(get_query_engine),
):
    """
    Список задач с фильтрацией, поиском, сортировкой и пагинацией

    Query: page, limit, status, priority, search, sortBy, sortOrder
    """
    page = await engine.list_tasks(user_id, options)
    return {"success": True, "data": page.to_response()}


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create(user_id, payload.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Task created successfully",
        "data": {"task": task.to_response()},
    }


@router.get("/{task_id}", response_model=Dict[str, Any])
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    task = await service.get_one(task_id, user_id)
    return {"success": True, "data": {"task": task.to_response()}}


@router.put("/{task_id}", response_model=Dict[str, Any])
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    """
    Частичное обновление: меняются только переданные поля
    """
    task = await service.update(task_id, user_id, payload.changes())
    return {
        "success": True,
        "message": "Task updated successfully",
        "data": {"task": task.to_response()},
    }


@router.delete("/{task_id}", response_model=Dict[str, Any])
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TaskService = Depends(get_task_service),
):
    await service.delete(task_id, user_id)
    return {"success": True, "message": "Task deleted successfully", "data": {}}
