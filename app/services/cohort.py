"""Cohort resolution: which students' progress a caller may see.

Each role maps to one strategy. A student's strategy only knows the student id,
so a scope filter can never widen it.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.config import ACTIVE_ENROLLMENT_STATUSES, REQUIRE_STAFF_SCOPE
from app.models.course_section import CourseSection
from app.models.enrollment import Enrollment
from app.models.user import Role
from app.schemas.progress import ProgressScope
from app.services.errors import InvalidScopeError, store_errors

logger = logging.getLogger(__name__)


class CohortStrategy:
    def resolve(self, db: Session) -> set[int]:
        raise NotImplementedError


@dataclass(frozen=True)
class SelfCohort(CohortStrategy):
    student_id: int

    def resolve(self, db: Session) -> set[int]:
        return {self.student_id}


@dataclass(frozen=True)
class EmptyCohort(CohortStrategy):
    def resolve(self, db: Session) -> set[int]:
        return set()


@dataclass(frozen=True)
class _StaffCohort(CohortStrategy):
    course_offering_id: int | None = None
    student_id: int | None = None

    def _query(self, db: Session):
        raise NotImplementedError

    def resolve(self, db: Session) -> set[int]:
        with store_errors("enrollment"):
            cohort = {row.student_id for row in self._query(db).distinct()}

        if self.student_id is None:
            return cohort
        if self.student_id not in cohort:
            raise InvalidScopeError(
                f"Student {self.student_id} is not in the caller's cohort"
            )
        return {self.student_id}


@dataclass(frozen=True, kw_only=True)
class MentorScopedCohort(_StaffCohort):
    mentor_id: int

    def _query(self, db: Session):
        q = (
            db.query(Enrollment.student_id)
            .join(CourseSection, CourseSection.id == Enrollment.course_section_id)
            .filter(
                CourseSection.mentor_id == self.mentor_id,
                Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES),
            )
        )
        if self.course_offering_id is not None:
            q = q.filter(CourseSection.course_offering_id == self.course_offering_id)
        return q


@dataclass(frozen=True)
class AdminScopedCohort(_StaffCohort):
    def _query(self, db: Session):
        q = db.query(Enrollment.student_id).filter(
            Enrollment.status.in_(ACTIVE_ENROLLMENT_STATUSES)
        )
        if self.course_offering_id is not None:
            q = q.filter(Enrollment.course_offering_id == self.course_offering_id)
        return q


def _parse_role(caller_role) -> Role | None:
    try:
        return Role(caller_role)
    except ValueError:
        return None


def cohort_strategy_for(
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
) -> CohortStrategy:
    role = _parse_role(caller_role)

    if role == Role.STUDENT:
        # scope deliberately dropped
        return SelfCohort(student_id=caller_id)

    if role not in (Role.MENTOR, Role.ADMIN):
        return EmptyCohort()

    scope = scope or ProgressScope()
    if REQUIRE_STAFF_SCOPE and scope.course_offering_id is None:
        raise InvalidScopeError("course_offering_id is required for staff callers")

    if role == Role.MENTOR:
        return MentorScopedCohort(
            mentor_id=caller_id,
            course_offering_id=scope.course_offering_id,
            student_id=scope.student_id,
        )
    return AdminScopedCohort(
        course_offering_id=scope.course_offering_id,
        student_id=scope.student_id,
    )


def resolve_cohort(
    db: Session,
    caller_id: int,
    caller_role,
    scope: ProgressScope | None = None,
) -> set[int]:
    strategy = cohort_strategy_for(caller_id, caller_role, scope)
    cohort = strategy.resolve(db)
    logger.debug(
        "Resolved %s for user %s -> %d students",
        type(strategy).__name__,
        caller_id,
        len(cohort),
    )
    return cohort
