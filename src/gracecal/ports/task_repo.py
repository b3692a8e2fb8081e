"""Task repository interface."""

from typing import Protocol

from gracecal.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for reading and writing tasks."""

    def list_tasks(self) -> list[Task]:
        """Fetch all tasks."""
        ...

    def get_task(self, task_id: str) -> Task:
        """One task. Raises NotFoundError if unknown."""
        ...

    def add_task(self, task: Task) -> None:
        """Insert a new task."""
        ...

    def mark_completed(self, task_id: str) -> None:
        """Set the completed flag. Nothing else on the task changes."""
        ...
