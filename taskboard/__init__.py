"""Taskboard - REST API для управления личными задачами"""

__version__ = "1.0.0"
