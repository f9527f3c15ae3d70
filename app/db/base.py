from app.db.base_class import Base  # noqa: F401

# import models so Base.metadata knows every table
from app.models import (  # noqa: F401
    assignment,
    content_progress,
    course,
    course_section,
    enrollment,
    module,
    user,
)
