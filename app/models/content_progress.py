from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base


class ProgressStatus(str, Enum):
    """Three-state progress. NOT_STARTED is never stored: a missing row means it."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class ContentProgress(Base):
    __tablename__ = "content_progress"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    module_content_id: Mapped[int] = mapped_column(
        ForeignKey("module_contents.id", ondelete="CASCADE"), primary_key=True
    )
    # denormalized for module-scoped queries
    module_id: Mapped[int] = mapped_column(
        ForeignKey("modules.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProgressStatus.IN_PROGRESS.value
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_accessed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        Index("ix_content_progress_module_student", "module_id", "student_id"),
    )
