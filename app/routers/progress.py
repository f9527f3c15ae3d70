import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from app.core.cancellation import run_until_disconnect
from app.core.config import TODOS_DEFAULT_LIMIT, TODOS_MAX_LIMIT
from app.core.current_user import get_current_user
from app.core.deps import get_db, get_now
from app.core.permissions import require_student
from app.models.content_progress import ProgressStatus
from app.models.user import User
from app.schemas.my_modules import MyModulesFilters, MyModulesResponse
from app.schemas.progress import (
    DashboardProgress,
    ModuleProgressDetail,
    ModuleProgressOverview,
    ProgressScope,
)
from app.schemas.todo import TodosPage
from app.services import progress as progress_service
from app.services.errors import ProgressError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/modules", tags=["progress"])


# anything else (store down, cancelled) is reported as unavailable
_STATUS_BY_CODE = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "invalid_scope": status.HTTP_400_BAD_REQUEST,
}


def _http_error(e: ProgressError) -> HTTPException:
    code = _STATUS_BY_CODE.get(e.code, status.HTTP_503_SERVICE_UNAVAILABLE)
    logger.warning("Progress query failed (%s): %s", e.code, e.message)
    return HTTPException(status_code=code, detail=e.message)


def _scope(
    course_offering_id: Optional[int] = Query(None),
    student_id: Optional[int] = Query(None),
) -> ProgressScope:
    return ProgressScope(course_offering_id=course_offering_id, student_id=student_id)


@router.get("/progress/dashboard", response_model=DashboardProgress)
async def dashboard_progress(
    request: Request,
    scope: ProgressScope = Depends(_scope),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return await run_until_disconnect(
            request, progress_service.get_dashboard, db, me.id, me.role, scope, now
        )
    except ProgressError as e:
        raise _http_error(e)


@router.get("/me", response_model=MyModulesResponse)
async def my_modules(
    request: Request,
    status_filter: Optional[ProgressStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=255),
    scope: ProgressScope = Depends(_scope),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    filters = MyModulesFilters(
        status=status_filter,
        search=search,
        course_offering_id=scope.course_offering_id,
        student_id=scope.student_id,
    )
    try:
        return await run_until_disconnect(
            request, progress_service.get_my_modules, db, me.id, me.role, filters, now
        )
    except ProgressError as e:
        raise _http_error(e)


@router.get("/todos", response_model=TodosPage)
def my_todos(
    page: int = Query(1, ge=1),
    limit: int = Query(TODOS_DEFAULT_LIMIT, ge=1, le=TODOS_MAX_LIMIT),
    db: Session = Depends(get_db),
    me: User = Depends(require_student),
    now: datetime = Depends(get_now),
):
    try:
        return progress_service.get_todos(db, me.id, now, page=page, limit=limit)
    except ProgressError as e:
        raise _http_error(e)


@router.get("/{module_id}/progress/overview", response_model=ModuleProgressOverview)
def module_progress_overview(
    module_id: int,
    scope: ProgressScope = Depends(_scope),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return progress_service.get_module_overview(
            db, module_id, me.id, me.role, scope, now
        )
    except ProgressError as e:
        raise _http_error(e)


@router.get("/{module_id}/progress/detail", response_model=ModuleProgressDetail)
def module_progress_detail(
    module_id: int,
    scope: ProgressScope = Depends(_scope),
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
    now: datetime = Depends(get_now),
):
    try:
        return progress_service.get_module_detail(
            db, module_id, me.id, me.role, scope, now
        )
    except ProgressError as e:
        raise _http_error(e)
