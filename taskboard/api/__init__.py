from taskboard.api import tasks

__all__ = ["tasks"]
