from sqlalchemy.orm import Session

from app.models.course import Course, CourseOffering
from app.models.module import Module
from app.schemas.my_modules import CourseInfo
from app.services.batching import chunked
from app.services.errors import store_errors


def lookup_courses(db: Session, module_ids: list[int]) -> dict[int, CourseInfo]:
    """module_id -> course name/code/offering. Template modules get empty info."""
    found: dict[int, CourseInfo] = {}
    with store_errors("course"):
        for batch in chunked(module_ids):
            rows = (
                db.query(
                    Module.id.label("module_id"),
                    CourseOffering.id.label("course_offering_id"),
                    Course.name.label("course_name"),
                    Course.course_code.label("course_code"),
                )
                .select_from(Module)
                .outerjoin(CourseOffering, CourseOffering.id == Module.course_offering_id)
                .outerjoin(Course, Course.id == CourseOffering.course_id)
                .filter(Module.id.in_(batch))
                .all()
            )
            for r in rows:
                found[r.module_id] = CourseInfo(
                    course_offering_id=r.course_offering_id,
                    course_name=r.course_name,
                    course_code=r.course_code,
                )

    return {mid: found.get(mid, CourseInfo()) for mid in module_ids}
