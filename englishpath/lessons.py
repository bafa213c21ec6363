# englishpath/lessons.py
from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from .content import LESSONS, Lesson
from .feeds import Subscription
from .panel import Panel
from .progress import Progress, derive_progress
from .store import DocumentStore, StoreError, PROGRESS, PROGRESS_DOC, server_timestamp

log = logging.getLogger(__name__)


class LessonsPanel(Panel):
    """
    Lesson list with completion state.

    ``mount()`` opens a live subscription to the progress record and every
    emission replaces ``progress`` wholesale; ``unmount()``/``close()`` cancels
    it. ``on_change`` (optional) is called with the new ``Progress``.
    """

    name = "lessons"

    def __init__(self, store: DocumentStore, uid: str, display_name: str = "",
                 lessons: Sequence[Lesson] = LESSONS,
                 on_change: Callable[[Progress], None] | None = None):
        super().__init__(store, uid, display_name)
        self.lessons = list(lessons)
        self.on_change = on_change
        self.record: dict | None = None
        self.progress: Progress = derive_progress(self.lessons, None)
        self._sub: Subscription | None = None
        self._lock = threading.Lock()

    @property
    def mounted(self) -> bool:
        return self._sub is not None and self._sub.active

    def mount(self) -> "LessonsPanel":
        if self.closed:
            raise RuntimeError("panel is closed")
        if not self.mounted:
            self._sub = self.store.subscribe(self.uid, PROGRESS, PROGRESS_DOC, self._on_record)
        return self

    def unmount(self) -> None:
        if self._sub is not None:
            self._sub.cancel()
            self._sub = None

    def close(self) -> None:
        self.unmount()
        super().close()

    def __enter__(self):
        return self.mount()

    def _on_record(self, record: dict | None) -> None:
        if self.closed:
            return
        last_id = (record or {}).get("lastCompletedLessonId")
        progress = derive_progress(self.lessons, last_id)
        with self._lock:
            self.record = record
            self.progress = progress
        if self.on_change is not None:
            self.on_change(progress)

    def complete(self, lesson_id: str) -> bool:
        """
        Mark ``lesson_id`` as the last completed lesson (merge write).

        Returns False when the write failed; the failure is only logged.
        """
        if lesson_id not in {lesson.id for lesson in self.lessons}:
            raise KeyError(lesson_id)
        data = {
            "lastCompletedLessonId": lesson_id,
            "displayName": self.display_name,
            "completedAt": server_timestamp(),
        }
        try:
            self.store.set(self.uid, PROGRESS, PROGRESS_DOC, data, merge=True)
        except StoreError:
            log.exception("Could not save progress for %s", self.uid)
            return False
        log.info("%s completed %s", self.uid, lesson_id)
        return True

    def snapshot(self) -> dict:
        with self._lock:
            progress = self.progress
        nxt = progress.next_lesson(self.lessons)
        return {
            "lessons": [
                {**lesson.to_dict(), "completed": done, "current": i == progress.next_index}
                for i, (lesson, done) in enumerate(zip(self.lessons, progress.completed))
            ],
            "progress": progress.to_dict(),
            "next_lesson": nxt.to_dict() if nxt else None,
            "message": "You've completed all lessons. Great job!" if progress.finished else None,
        }
