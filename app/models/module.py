from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base


class ContentType(str, Enum):
    LESSON = "LESSON"
    ASSIGNMENT = "ASSIGNMENT"
    QUIZ = "QUIZ"
    DISCUSSION = "DISCUSSION"
    FILE = "FILE"
    URL = "URL"
    VIDEO = "VIDEO"


class Module(Base):
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # NULL = template module not tied to a live offering
    course_offering_id: Mapped[int | None] = mapped_column(
        ForeignKey("course_offerings.id", ondelete="SET NULL"), index=True
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    course_offering = relationship("CourseOffering", back_populates="modules")
    sections = relationship(
        "ModuleSection", back_populates="module", cascade="all, delete-orphan"
    )


class ModuleSection(Base):
    __tablename__ = "module_sections"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    module_id: Mapped[int] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    module = relationship("Module", back_populates="sections")
    contents = relationship(
        "ModuleContent", back_populates="section", cascade="all, delete-orphan"
    )


class ModuleContent(Base):
    __tablename__ = "module_contents"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    module_section_id: Mapped[int] = mapped_column(
        ForeignKey("module_sections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    subtitle: Mapped[str | None] = mapped_column(Text)
    content_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ContentType.LESSON.value
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    section = relationship("ModuleSection", back_populates="contents")
    assignment = relationship(
        "Assignment",
        back_populates="content",
        uselist=False,
        cascade="all, delete-orphan",
    )
