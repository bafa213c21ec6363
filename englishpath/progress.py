# englishpath/progress.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .content import Lesson

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    next_index: int
    completed: tuple[bool, ...]
    # the stored id was set but no longer names a lesson
    unrecognized: bool = False

    @property
    def total(self) -> int:
        return len(self.completed)

    @property
    def finished(self) -> bool:
        """Every lesson is done; callers show the completion message."""
        return self.next_index >= self.total

    def next_lesson(self, lessons: Sequence[Lesson]) -> Lesson | None:
        if self.finished:
            return None
        return lessons[self.next_index]

    def to_dict(self) -> dict:
        return {
            "next_index": self.next_index,
            "completed": list(self.completed),
            "finished": self.finished,
            "unrecognized": self.unrecognized,
        }


def derive_progress(lessons: Sequence[Lesson], last_completed_id: str | None) -> Progress:
    """
    Next lesson index is one past the last completed lesson.

    No record and an id missing from ``lessons`` both start over at 0; the
    second case is flagged on the result and logged so a reshuffled lesson
    list is visible instead of silently resetting the learner.
    """
    found = -1
    if last_completed_id is not None:
        for i, lesson in enumerate(lessons):
            if lesson.id == last_completed_id:
                found = i
                break

    unrecognized = last_completed_id is not None and found < 0
    if unrecognized:
        log.warning("Stored lesson id %r not in lesson list; starting from the first lesson", last_completed_id)

    next_index = found + 1
    return Progress(
        next_index=next_index,
        completed=tuple(i < next_index for i in range(len(lessons))),
        unrecognized=unrecognized,
    )
