# File: quest_calendar/models/snapshot.py

from dataclasses import dataclass, field
from typing import Optional, Tuple

from .tasks import Task, task_from_dict
from .progression import ProgressionState, progression_from_dict

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class PlannerSnapshot:
    """Immutable planner state: the task catalog and the progression ledger."""
    tasks: Tuple[Task, ...] = ()
    progression: ProgressionState = field(default_factory=ProgressionState)

    def __post_init__(self):
        object.__setattr__(self, 'tasks', tuple(self.tasks))

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def to_dict(self) -> dict:
        return {
            'version': SNAPSHOT_VERSION,
            'tasks': [t.to_dict() for t in self.tasks],
            'progression': self.progression.to_dict(),
        }


def snapshot_from_dict(data: dict) -> PlannerSnapshot:
    """Create PlannerSnapshot from dictionary; malformed tasks raise ValueError."""
    tasks = tuple(task_from_dict(raw) for raw in data.get('tasks') or [])
    return PlannerSnapshot(
        tasks=tasks,
        progression=progression_from_dict(data.get('progression') or {}),
    )
