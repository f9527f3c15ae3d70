from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from app.db.base_class import Base


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    module_content_id = Column(
        Integer,
        ForeignKey("module_contents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    due_date = Column(DateTime(timezone=True), nullable=True)
    grace_period_minutes = Column(Integer, nullable=False, default=0)
    allow_late_submission = Column(Boolean, nullable=False, default=False)

    content = relationship("ModuleContent", back_populates="assignment")
