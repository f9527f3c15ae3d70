from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Enrollment(Base):
    __tablename__ = "course_enrollments"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_offering_id = Column(
        Integer,
        ForeignKey("course_offerings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_section_id = Column(
        Integer,
        ForeignKey("course_sections.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # enrolled | completed | dropped | ... (only enrolled/completed are active)
    status = Column(String(20), nullable=False, default="enrolled")
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "course_offering_id",
            name="uq_course_enrollments_student_offering",
        ),
    )

    student = relationship("User", back_populates="enrollments")
    course_offering = relationship("CourseOffering", back_populates="enrollments")
    course_section = relationship("CourseSection", back_populates="enrollments")
