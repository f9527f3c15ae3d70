"""Multi-module dashboard.

Per-module rollups are independent, so they are fanned out across a bounded
thread pool (one SQLAlchemy session per worker) and joined before the
cross-module stats are computed. Any failure cancels the remaining work and
propagates; a dashboard is never assembled from partial results.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import Callable, TypeVar

from sqlalchemy.orm import Session, sessionmaker

from app.core.config import (
    ACTIVE_ENROLLMENT_STATUSES,
    ROLLUP_MAX_WORKERS,
    ROLLUP_MIN_MODULES_FOR_FANOUT,
)
from app.models.course_section import CourseSection
from app.models.enrollment import Enrollment
from app.models.module import Module
from app.models.user import Role, User
from app.schemas.progress import (
    DashboardProgress,
    ModuleProgressDetail,
    OverallProgressStats,
    ProgressScope,
    StudentProgressStats,
)
from app.services.batching import chunked
from app.services.cohort import resolve_cohort
from app.services.errors import RollupCancelledError, store_errors
from app.services.hierarchy import ModuleTree, load_published
from app.services.progress_reader import ProgressIndex, ProgressRow, load_by_modules
from app.services.rollup import rollup
from app.services.stats import average, exact_percentage

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class ModuleResult:
    tree: ModuleTree
    rows: list[ProgressRow]
    detail: ModuleProgressDetail


def _check_cancelled(cancel_event: threading.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise RollupCancelledError()


def worker_count(module_count: int, cohort_size: int) -> int:
    if module_count < ROLLUP_MIN_MODULES_FOR_FANOUT:
        return 1
    # tiny cohorts make each rollup cheap; fewer threads is enough
    wanted = module_count if cohort_size > 1 else max(1, module_count // 2)
    return max(1, min(ROLLUP_MAX_WORKERS, wanted))


def fan_out(
    db: Session,
    keys: list[int],
    work: Callable[[Session, int], T],
    workers: int,
    cancel_event: threading.Event | None = None,
) -> list[T]:
    """Run `work(session, key)` for every key; results keep the order of `keys`."""
    if workers <= 1 or len(keys) <= 1:
        results = []
        for key in keys:
            _check_cancelled(cancel_event)
            results.append(work(db, key))
        return results

    session_factory = sessionmaker(bind=db.get_bind(), autoflush=False)

    def run(key: int) -> T:
        _check_cancelled(cancel_event)
        with session_factory() as worker_db:
            return work(worker_db, key)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rollup") as pool:
        futures = [pool.submit(run, key) for key in keys]
        try:
            results = [f.result() for f in futures]
        except BaseException:
            for f in futures:
                f.cancel()
            raise

    _check_cancelled(cancel_event)
    return results


def relevant_module_ids(
    db: Session,
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
) -> list[int]:
    """Published modules a caller's dashboard covers, ordered by title then id."""
    scope = scope or ProgressScope()
    q = db.query(Module.id).filter(Module.published_at.is_not(None))

    if caller_role == Role.STUDENT:
        offerings = db.query(Enrollment.course_offering_id).filter(
            Enrollment.student_id == caller_id,
            Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES),
        )
        q = q.filter(Module.course_offering_id.in_(offerings))
    elif caller_role == Role.MENTOR:
        offerings = db.query(CourseSection.course_offering_id).filter(
            CourseSection.mentor_id == caller_id
        )
        q = q.filter(Module.course_offering_id.in_(offerings))
    elif caller_role != Role.ADMIN:
        return []

    if caller_role != Role.STUDENT and scope.course_offering_id is not None:
        q = q.filter(Module.course_offering_id == scope.course_offering_id)

    with store_errors("content hierarchy"):
        return [row.id for row in q.order_by(Module.title.asc(), Module.id.asc())]


def overall_stats(cohort_size: int, details: list[ModuleProgressDetail]) -> OverallProgressStats:
    if cohort_size == 0:
        return OverallProgressStats()

    # classify and average on exact counts; the rounded percentage can read 0 or 100
    counts = [
        (d.overall_progress.completed_students_count, d.overall_progress.total_students_count)
        for d in details
    ]
    return OverallProgressStats(
        total_students=cohort_size,
        average_progress=average([exact_percentage(c, t) for c, t in counts]),
        completed_modules=sum(1 for c, t in counts if t > 0 and c == t),
        in_progress_modules=sum(1 for c, t in counts if 0 < c < t),
        not_started_modules=sum(1 for c, t in counts if c == 0),
    )


def _student_names(db: Session, student_ids: list[int]) -> dict[int, str | None]:
    names: dict[int, str | None] = {}
    with store_errors("user"):
        for batch in chunked(student_ids):
            for user in db.query(User).filter(User.id.in_(batch)).all():
                names[user.id] = user.full_name
    return names


def student_stats(
    db: Session,
    cohort: set[int],
    results: list[ModuleResult],
) -> list[StudentProgressStats]:
    students = sorted(cohort)
    if not students:
        return []

    names = _student_names(db, students)
    all_rows = [row for r in results for row in r.rows]
    # every row of the selected modules counts as activity, published or not
    activity = ProgressIndex(all_rows, students=students)
    completion = ProgressIndex(
        all_rows,
        students=students,
        content_ids=[cid for r in results for cid in r.tree.item_ids],
    )

    stats: list[StudentProgressStats] = []
    for sid in students:
        done = completion.completed_ids(sid)
        completed_modules = 0
        module_pcts: list[Fraction] = []
        for r in results:
            item_ids = set(r.tree.item_ids)
            total = len(item_ids)
            completed = len(done & item_ids)
            if total > 0 and completed == total:
                completed_modules += 1
            module_pcts.append(exact_percentage(completed, total))

        stats.append(
            StudentProgressStats(
                student_id=sid,
                student_name=names.get(sid),
                completed_modules=completed_modules,
                total_modules=len(results),
                average_progress=average(module_pcts),
                last_activity=activity.last_accessed(sid),
            )
        )
    return stats


def compose(
    db: Session,
    module_ids: list[int],
    caller_id: int,
    caller_role,
    scope: ProgressScope | None,
    now: datetime,
    cancel_event: threading.Event | None = None,
) -> DashboardProgress:
    cohort = resolve_cohort(db, caller_id, caller_role, scope)

    def module_work(session: Session, module_id: int) -> ModuleResult:
        tree = load_published(session, module_id)
        rows = load_by_modules(session, [module_id], cohort)
        return ModuleResult(tree=tree, rows=rows, detail=rollup(tree, rows, cohort, now))

    workers = worker_count(len(module_ids), len(cohort))
    logger.info(
        "Composing dashboard for %s %s: %d modules, %d students, %d workers",
        caller_role,
        caller_id,
        len(module_ids),
        len(cohort),
        workers,
    )
    results = fan_out(db, module_ids, module_work, workers, cancel_event)

    dashboard = DashboardProgress(
        student_progress=[r.detail.to_overview() for r in results]
    )
    if caller_role != Role.STUDENT:
        dashboard.overall_stats = overall_stats(len(cohort), [r.detail for r in results])
        dashboard.student_stats = student_stats(db, cohort, results)
    return dashboard
