import math
from datetime import datetime

from sqlalchemy import and_, exists, or_
from sqlalchemy.orm import Session

from app.models.assignment import Assignment
from app.models.content_progress import ContentProgress, ProgressStatus
from app.models.enrollment import Enrollment
from app.models.module import ContentType, Module, ModuleContent, ModuleSection
from app.schemas.todo import PageMeta, TodoItem, TodosPage
from app.services.errors import store_errors
from app.services.overdue import as_utc


def _todo_order_by():
    """
    Todo ordering:
    - due_date NULLs last (SQLite-safe)
    - due_date ascending
    - content id ascending (stable tie-break)
    """
    return (
        Assignment.due_date.is_(None),
        Assignment.due_date.asc(),
        ModuleContent.id.asc(),
    )


def get_todos(
    db: Session,
    student_id: int,
    now: datetime,
    page: int = 1,
    limit: int = 10,
) -> TodosPage:
    """Assignments the student still has to do: not completed, not yet past due."""
    page = max(page, 1)
    limit = max(limit, 1)

    completed = exists().where(
        and_(
            ContentProgress.student_id == student_id,
            ContentProgress.module_content_id == ModuleContent.id,
            ContentProgress.status == ProgressStatus.COMPLETED.value,
        )
    )

    with store_errors("content hierarchy"):
        offering_ids = [
            row.course_offering_id
            for row in db.query(Enrollment.course_offering_id).filter(
                Enrollment.student_id == student_id,
                Enrollment.status == "enrolled",
            )
        ]

        query = (
            db.query(
                ModuleContent.id,
                ModuleContent.title,
                ModuleContent.content_type,
                Assignment.due_date,
                Module.id.label("module_id"),
                Module.title.label("module_name"),
            )
            .select_from(ModuleContent)
            .join(Assignment, Assignment.module_content_id == ModuleContent.id)
            .join(ModuleSection, ModuleSection.id == ModuleContent.module_section_id)
            .join(Module, Module.id == ModuleSection.module_id)
            .filter(
                Module.course_offering_id.in_(offering_ids),
                ModuleSection.published_at.is_not(None),
                ModuleContent.published_at.is_not(None),
                ModuleContent.published_at <= now,
                ModuleContent.content_type == ContentType.ASSIGNMENT.value,
                or_(Assignment.due_date.is_(None), Assignment.due_date >= now),
                ~completed,
            )
        )

        total = query.count()
        rows = (
            query.order_by(*_todo_order_by())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

    page_count = max(1, math.ceil(total / limit))
    todos = [
        TodoItem(
            id=r.id,
            type=r.content_type,
            title=r.title,
            due_date=as_utc(r.due_date),
            module_id=r.module_id,
            module_name=r.module_name,
        )
        for r in rows
    ]

    return TodosPage(
        todos=todos,
        meta=PageMeta(
            current_page=page,
            page_count=page_count,
            total_count=total,
            is_first_page=page == 1,
            is_last_page=page >= page_count,
            previous_page=page - 1 if page > 1 else None,
            next_page=page + 1 if page < page_count else None,
        ),
    )
