"""Pure task domain logic - recurring follow-up tasks and their chains."""

from dataclasses import dataclass, field, replace
from datetime import date

from .dates import parse_calendar_date
from .errors import InvalidDateError, InvalidRecordError
from .recurrence import Frequency, advance


@dataclass(frozen=True)
class Task:
    """A follow-up task, optionally repeating."""

    id: str
    title: str
    due_date: date
    priority: str = "medium"
    category: str = "follow-up"
    description: str = ""
    person_id: str | None = None
    assigned_to: str | None = None
    completed: bool = False
    recurrence: Frequency = Frequency.NONE
    original_task_id: str | None = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not Frequency.NONE

    @property
    def root_id(self) -> str:
        """Id of the first instance in this task's chain."""
        return self.original_task_id or self.id

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """Create Task from a stored row (snake_case columns)."""
        task_id = data.get("id")
        if not task_id or not data.get("title"):
            raise InvalidRecordError(f"Task record missing id or title: {data!r}")
        try:
            due = parse_calendar_date(data.get("due_date"), "due_date")
        except InvalidDateError as e:
            raise InvalidRecordError(f"Task {task_id}: {e}") from e
        return cls(
            id=str(task_id),
            title=data["title"],
            due_date=due,
            priority=data.get("priority") or "medium",
            category=data.get("category") or "follow-up",
            description=data.get("description") or "",
            person_id=data.get("person_id"),
            assigned_to=data.get("assigned_to"),
            completed=bool(data.get("completed", False)),
            recurrence=Frequency.parse(data.get("recurrence")),
            original_task_id=data.get("original_task_id"),
        )

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "due_date": self.due_date.isoformat(),
            "priority": self.priority,
            "category": self.category,
            "description": self.description or None,
            "person_id": self.person_id,
            "assigned_to": self.assigned_to,
            "completed": self.completed,
            "recurrence": self.recurrence.value,
            "original_task_id": self.original_task_id,
        }


def next_instance(task: Task, new_id: str) -> Task | None:
    """
    Build the next instance of a repeating task.

    The due date advances from the task's own due date, not from today.
    Every instance points at the chain's first instance.
    Returns None for non-repeating tasks.
    """
    if not task.is_recurring:
        return None
    return replace(
        task,
        id=new_id,
        due_date=advance(task.due_date, task.recurrence),
        completed=False,
        original_task_id=task.root_id,
    )


def complete_task(task: Task, new_id: str) -> tuple[Task, Task | None]:
    """
    Mark a task completed.

    Returns (completed copy, next instance or None). Nothing else on the
    completed instance changes.
    """
    return replace(task, completed=True), next_instance(task, new_id)


@dataclass
class TaskChain:
    """All instances of one recurring task, keyed by the first instance's id."""

    root_id: str
    instances: list[Task] = field(default_factory=list)

    def append(self, task: Task) -> None:
        """Add an instance. Chains only grow."""
        if task.root_id != self.root_id:
            raise ValueError(f"Task {task.id} belongs to chain {task.root_id}, not {self.root_id}")
        if any(t.id == task.id for t in self.instances):
            raise ValueError(f"Task {task.id} is already in chain {self.root_id}")
        self.instances.append(task)
        self.instances.sort(key=lambda t: (t.due_date, t.id != self.root_id))

    @property
    def latest(self) -> Task | None:
        return self.instances[-1] if self.instances else None

    @property
    def open_instances(self) -> list[Task]:
        return [t for t in self.instances if not t.completed]

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.instances if t.completed)

    def __len__(self) -> int:
        return len(self.instances)


def chains_from_tasks(tasks: list[Task]) -> dict[str, TaskChain]:
    """Group tasks into chains by root id. Single tasks form one-item chains."""
    chains: dict[str, TaskChain] = {}
    for task in tasks:
        chain = chains.setdefault(task.root_id, TaskChain(task.root_id))
        chain.append(task)
    return chains


def chain_for(tasks: list[Task], task_id: str) -> TaskChain | None:
    """Chain containing the given task, or None if the id is unknown."""
    by_id = {t.id: t for t in tasks}
    task = by_id.get(task_id)
    if task is None:
        return None
    return chains_from_tasks(tasks).get(task.root_id)

