"""Batch reads of ContentProgress rows.

The store has no NOT_STARTED rows: a missing (student, content) pair means the
student never touched the item. `ProgressIndex.status` is the one place that
turns absence into ProgressStatus.NOT_STARTED.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy.orm import Session

from app.models.content_progress import ContentProgress, ProgressStatus
from app.services.batching import chunked
from app.services.errors import store_errors
from app.services.overdue import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressRow:
    student_id: int
    content_id: int
    module_id: int
    status: ProgressStatus
    completed_at: datetime | None = None
    last_accessed_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED


def _to_row(p: ContentProgress) -> ProgressRow:
    return ProgressRow(
        student_id=p.student_id,
        content_id=p.module_content_id,
        module_id=p.module_id,
        status=ProgressStatus(p.status),
        completed_at=as_utc(p.completed_at),
        last_accessed_at=as_utc(p.last_accessed_at),
    )


def batch_load(
    db: Session,
    content_ids: Iterable[int],
    student_ids: Iterable[int],
) -> list[ProgressRow]:
    content_ids = list(content_ids)
    student_ids = list(student_ids)
    if not content_ids or not student_ids:
        return []

    rows: list[ProgressRow] = []
    queries = 0
    with store_errors("progress"):
        for content_batch in chunked(content_ids):
            for student_batch in chunked(student_ids):
                queries += 1
                rows.extend(
                    _to_row(p)
                    for p in db.query(ContentProgress)
                    .filter(
                        ContentProgress.module_content_id.in_(content_batch),
                        ContentProgress.student_id.in_(student_batch),
                    )
                    .all()
                )

    logger.debug(
        "Read %d progress rows for %d contents x %d students in %d queries",
        len(rows),
        len(content_ids),
        len(student_ids),
        queries,
    )
    return rows


def load_by_modules(
    db: Session,
    module_ids: Iterable[int],
    student_ids: Iterable[int],
) -> list[ProgressRow]:
    """Rows for whole modules via the denormalized module_id column."""
    module_ids = list(module_ids)
    student_ids = list(student_ids)
    if not module_ids or not student_ids:
        return []

    rows: list[ProgressRow] = []
    with store_errors("progress"):
        for module_batch in chunked(module_ids):
            for student_batch in chunked(student_ids):
                rows.extend(
                    _to_row(p)
                    for p in db.query(ContentProgress)
                    .filter(
                        ContentProgress.module_id.in_(module_batch),
                        ContentProgress.student_id.in_(student_batch),
                    )
                    .all()
                )
    return rows


class ProgressIndex:
    """student_id -> content_id -> row, built once per rollup."""

    def __init__(
        self,
        rows: Iterable[ProgressRow],
        students: Iterable[int] | None = None,
        content_ids: Iterable[int] | None = None,
    ):
        allowed_students = set(students) if students is not None else None
        allowed_contents = set(content_ids) if content_ids is not None else None

        self._rows: dict[int, dict[int, ProgressRow]] = {}
        for row in rows:
            if allowed_students is not None and row.student_id not in allowed_students:
                continue
            if allowed_contents is not None and row.content_id not in allowed_contents:
                continue
            self._rows.setdefault(row.student_id, {})[row.content_id] = row

    def row(self, student_id: int, content_id: int) -> ProgressRow | None:
        return self._rows.get(student_id, {}).get(content_id)

    def status(self, student_id: int, content_id: int) -> ProgressStatus:
        row = self.row(student_id, content_id)
        if row is None:
            return ProgressStatus.NOT_STARTED
        return row.status

    def rows_for(self, student_id: int) -> list[ProgressRow]:
        return list(self._rows.get(student_id, {}).values())

    def completed_ids(self, student_id: int) -> set[int]:
        return {
            content_id
            for content_id, row in self._rows.get(student_id, {}).items()
            if row.is_completed
        }

    def pair_count(self) -> int:
        return sum(len(by_content) for by_content in self._rows.values())

    def last_accessed(self, student_id: int | None = None) -> datetime | None:
        if student_id is None:
            rows = [r for by_content in self._rows.values() for r in by_content.values()]
        else:
            rows = self.rows_for(student_id)
        stamps = [r.last_accessed_at for r in rows if r.last_accessed_at is not None]
        return max(stamps) if stamps else None
