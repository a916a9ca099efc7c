"""Manager modules for TaskFlow.

Managers hold state (the task collection, the clock) and coordinate the
pure engines.
"""

from .task_manager import TaskManager

__all__ = [
    "TaskManager",
]
