"""Content -> section -> module rollups.

`rollup` is a pure function of (tree, progress rows, cohort, now). Two
independent notions of completion are reported side by side:

- viewer axis: how many items the viewing student completed. With a cohort of
  one this is that student; for larger cohorts an item only counts once every
  member has completed it.
- cohort axis: how many students completed the container, all-or-nothing over
  its published items.
"""

from datetime import datetime
from typing import Iterable

from app.models.content_progress import ProgressStatus
from app.schemas.progress import (
    ContentItemProgress,
    ModuleOverallProgress,
    ModuleProgressDetail,
    SectionProgress,
)
from app.services.hierarchy import ContentNode, ModuleTree, SectionNode
from app.services.overdue import is_overdue, overdue_contributions
from app.services.progress_reader import ProgressIndex, ProgressRow
from app.services.stats import container_status, percentage


def _latest(stamps: Iterable[datetime | None]) -> datetime | None:
    present = [s for s in stamps if s is not None]
    return max(present) if present else None


def students_completing(
    completed_by: dict[int, set[int]],
    item_ids: list[int],
) -> int:
    """Students whose completed set covers every id in `item_ids`."""
    if not item_ids:
        return 0
    required = set(item_ids)
    return sum(1 for done in completed_by.values() if len(done & required) == len(required))


class _Rollup:
    def __init__(
        self,
        tree: ModuleTree,
        rows: Iterable[ProgressRow],
        cohort: Iterable[int],
        now: datetime,
    ):
        self.tree = tree
        self.cohort = sorted(set(cohort))
        self.now = now
        self.index = ProgressIndex(rows, students=self.cohort, content_ids=tree.item_ids)
        self.completed_by = {sid: self.index.completed_ids(sid) for sid in self.cohort}
        self.viewer = self.cohort[0] if len(self.cohort) == 1 else None

    @property
    def cohort_size(self) -> int:
        return len(self.cohort)

    def item(self, item: ContentNode) -> ContentItemProgress:
        completed_students = sum(
            1 for sid in self.cohort if item.id in self.completed_by[sid]
        )

        if self.viewer is not None:
            row = self.index.row(self.viewer, item.id)
            status = self.index.status(self.viewer, item.id)
            completed_at = row.completed_at if row else None
            last_accessed_at = row.last_accessed_at if row else None
        else:
            rows = [
                r for r in (self.index.row(sid, item.id) for sid in self.cohort) if r
            ]
            if self.cohort and completed_students == self.cohort_size:
                status = ProgressStatus.COMPLETED
            elif rows:
                status = ProgressStatus.IN_PROGRESS
            else:
                status = ProgressStatus.NOT_STARTED
            completed_at = (
                _latest(r.completed_at for r in rows)
                if status == ProgressStatus.COMPLETED
                else None
            )
            last_accessed_at = _latest(r.last_accessed_at for r in rows)

        return ContentItemProgress(
            id=item.id,
            title=item.title,
            subtitle=item.subtitle,
            content_type=item.content_type,
            order=item.order,
            status=status,
            completed_at=completed_at,
            last_accessed_at=last_accessed_at,
            due_date=item.due_date,
            is_overdue=(
                bool(self.cohort)
                and status != ProgressStatus.COMPLETED
                and is_overdue(item, self.now)
            ),
            completed_students_count=completed_students,
            total_students_count=self.cohort_size,
            completion_percentage=percentage(completed_students, self.cohort_size),
        )

    def section(self, section: SectionNode) -> SectionProgress:
        items = [self.item(i) for i in section.items]
        total = len(items)
        completed = sum(1 for i in items if i.status == ProgressStatus.COMPLETED)
        completed_students = students_completing(self.completed_by, section.item_ids)

        return SectionProgress(
            id=section.id,
            title=section.title,
            order=section.order,
            content_items=items,
            completed_content_items=completed,
            total_content_items=total,
            progress_percentage=percentage(completed, total),
            status=container_status(completed, total),
            completed_students_count=completed_students,
            total_students_count=self.cohort_size,
            completion_percentage=percentage(completed_students, self.cohort_size),
        )

    def module(self) -> ModuleProgressDetail:
        sections = [self.section(s) for s in self.tree.sections]
        total = sum(s.total_content_items for s in sections)
        completed = sum(s.completed_content_items for s in sections)
        completed_students = students_completing(self.completed_by, self.tree.item_ids)

        overall = ModuleOverallProgress(
            completed_content_items=completed,
            total_content_items=total,
            # (student, item) pairs without any progress row
            not_started_content_items=total * self.cohort_size - self.index.pair_count(),
            overdue_assignments_count=sum(
                overdue_contributions(item, self.cohort, self.index, self.now)
                for item in self.tree.items
            ),
            progress_percentage=percentage(completed, total),
            status=container_status(completed, total),
            last_accessed_at=self.index.last_accessed(),
            completed_students_count=completed_students,
            total_students_count=self.cohort_size,
            module_completion_percentage=percentage(
                completed_students, self.cohort_size
            ),
        )

        return ModuleProgressDetail(
            module_id=self.tree.id,
            module_title=self.tree.title,
            course_offering_id=self.tree.course_offering_id,
            sections=sections,
            overall_progress=overall,
        )


def rollup(
    tree: ModuleTree,
    rows: Iterable[ProgressRow],
    cohort: Iterable[int],
    now: datetime,
) -> ModuleProgressDetail:
    """Full module rollup. Rows outside the cohort or the published tree are ignored."""
    return _Rollup(tree, rows, cohort, now).module()
