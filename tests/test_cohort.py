import pytest

from app.schemas.progress import ProgressScope
from app.services import cohort as cohort_module
from app.services.cohort import (
    AdminScopedCohort,
    EmptyCohort,
    MentorScopedCohort,
    SelfCohort,
    cohort_strategy_for,
    resolve_cohort,
)
from app.services.errors import InvalidScopeError


def test_student_sees_only_self_even_with_scope(db, seed):
    scope = ProgressScope(course_offering_id=seed.offering1, student_id=seed.s2)

    assert cohort_strategy_for(seed.s1, "student", scope) == SelfCohort(student_id=seed.s1)
    assert resolve_cohort(db, seed.s1, "student", scope) == {seed.s1}


def test_mentor_cohort_is_own_sections_active_enrollments(db, seed):
    assert resolve_cohort(db, seed.mentor1, "mentor") == {seed.s1, seed.s2}
    # s3 dropped out of section B
    assert resolve_cohort(db, seed.mentor2, "mentor") == {seed.s4}


def test_mentor_cohort_narrowed_by_offering(db, seed):
    scope = ProgressScope(course_offering_id=seed.offering2)

    assert resolve_cohort(db, seed.mentor1, "mentor", scope) == {seed.s1}
    assert resolve_cohort(db, seed.mentor2, "mentor", scope) == set()


def test_admin_cohort(db, seed):
    assert resolve_cohort(db, seed.admin, "admin") == {seed.s1, seed.s2, seed.s4}
    scope = ProgressScope(course_offering_id=seed.offering2)
    assert resolve_cohort(db, seed.admin, "admin", scope) == {seed.s1}


def test_strategy_per_role(seed):
    assert isinstance(cohort_strategy_for(seed.mentor1, "mentor"), MentorScopedCohort)
    assert isinstance(cohort_strategy_for(seed.admin, "admin"), AdminScopedCohort)
    assert isinstance(cohort_strategy_for(seed.admin, "guest"), EmptyCohort)


def test_unknown_role_gets_empty_cohort(db, seed):
    assert resolve_cohort(db, seed.admin, "guest") == set()


def test_student_id_scope_narrows_staff_cohort(db, seed):
    scope = ProgressScope(student_id=seed.s2)

    assert resolve_cohort(db, seed.mentor1, "mentor", scope) == {seed.s2}
    assert resolve_cohort(db, seed.admin, "admin", scope) == {seed.s2}


def test_student_id_outside_cohort_is_rejected(db, seed):
    with pytest.raises(InvalidScopeError):
        resolve_cohort(db, seed.mentor2, "mentor", ProgressScope(student_id=seed.s1))

    with pytest.raises(InvalidScopeError):
        resolve_cohort(db, seed.admin, "admin", ProgressScope(student_id=seed.s3))


def test_required_staff_scope(db, seed, monkeypatch):
    monkeypatch.setattr(cohort_module, "REQUIRE_STAFF_SCOPE", True)

    with pytest.raises(InvalidScopeError):
        resolve_cohort(db, seed.mentor1, "mentor")
    with pytest.raises(InvalidScopeError):
        resolve_cohort(db, seed.admin, "admin", ProgressScope(student_id=seed.s1))

    scope = ProgressScope(course_offering_id=seed.offering1)
    assert resolve_cohort(db, seed.mentor1, "mentor", scope) == {seed.s1, seed.s2}
    # students never need a scope
    assert resolve_cohort(db, seed.s4, "student") == {seed.s4}
