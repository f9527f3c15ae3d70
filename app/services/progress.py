"""Query operations of the progress engine, called by the HTTP layer."""

import logging
import threading
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.schemas.my_modules import MyModulesFilters, MyModulesResponse
from app.schemas.progress import (
    DashboardProgress,
    ModuleProgressDetail,
    ModuleProgressOverview,
    ProgressScope,
)
from app.schemas.todo import TodosPage
from app.services import dashboard, module_filter, todos
from app.services.cohort import resolve_cohort
from app.services.course_lookup import lookup_courses
from app.services.hierarchy import load_published
from app.services.progress_reader import batch_load
from app.services.rollup import rollup

logger = logging.getLogger(__name__)


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def get_module_detail(
    db: Session,
    module_id: int,
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
    now: datetime | None = None,
) -> ModuleProgressDetail:
    # module must exist before anything else is read
    tree = load_published(db, module_id)
    cohort = resolve_cohort(db, caller_id, caller_role, scope)
    rows = batch_load(db, tree.item_ids, cohort)

    logger.info(
        "Rollup module %s for %s %s: %d items, %d students",
        module_id,
        caller_role,
        caller_id,
        len(tree.item_ids),
        len(cohort),
    )
    return rollup(tree, rows, cohort, _now(now))


def get_module_overview(
    db: Session,
    module_id: int,
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
    now: datetime | None = None,
) -> ModuleProgressOverview:
    detail = get_module_detail(db, module_id, caller_id, caller_role, scope, now)
    return detail.to_overview()


def get_dashboard(
    db: Session,
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
    now: datetime | None = None,
    cancel_event: threading.Event | None = None,
) -> DashboardProgress:
    module_ids = dashboard.relevant_module_ids(db, caller_id, caller_role, scope)
    return dashboard.compose(
        db, module_ids, caller_id, caller_role, scope, _now(now), cancel_event
    )


def get_my_modules(
    db: Session,
    caller_id: int,
    caller_role,
    filters: MyModulesFilters | None = None,
    now: datetime | None = None,
    cancel_event: threading.Event | None = None,
) -> MyModulesResponse:
    filters = filters or MyModulesFilters()
    scope = ProgressScope(
        course_offering_id=filters.course_offering_id,
        student_id=filters.student_id,
    )
    result = get_dashboard(db, caller_id, caller_role, scope, now, cancel_event)
    courses = lookup_courses(db, [m.module_id for m in result.student_progress])
    return module_filter.present(result, filters, courses)


def get_todos(
    db: Session,
    student_id: int,
    now: datetime | None = None,
    page: int = 1,
    limit: int = 10,
) -> TodosPage:
    return todos.get_todos(db, student_id, _now(now), page=page, limit=limit)
