from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    course_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    offerings = relationship(
        "CourseOffering", back_populates="course", cascade="all, delete-orphan"
    )


class CourseOffering(Base):
    """One run of a course (a term). Modules and enrollments hang off it."""

    __tablename__ = "course_offerings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )

    course = relationship("Course", back_populates="offerings")
    sections = relationship(
        "CourseSection", back_populates="course_offering", cascade="all, delete-orphan"
    )
    enrollments = relationship(
        "Enrollment", back_populates="course_offering", cascade="all, delete-orphan"
    )
    modules = relationship("Module", back_populates="course_offering")
