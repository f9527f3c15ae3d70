from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.content_progress import ProgressStatus


class ProgressScope(BaseModel):
    """Optional narrowing for mentor/admin callers. Ignored for students."""

    course_offering_id: Optional[int] = None
    student_id: Optional[int] = None


class ContentItemProgress(BaseModel):
    id: int
    title: str
    subtitle: Optional[str] = None
    content_type: str
    order: int

    # viewer axis
    status: ProgressStatus
    completed_at: Optional[datetime] = None
    last_accessed_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    is_overdue: bool = False

    # cohort axis
    completed_students_count: int
    total_students_count: int
    completion_percentage: int


class SectionProgress(BaseModel):
    id: int
    title: str
    order: int
    content_items: list[ContentItemProgress] = Field(default_factory=list)

    completed_content_items: int
    total_content_items: int
    progress_percentage: int
    status: ProgressStatus

    # students who completed every item in the section
    completed_students_count: int
    total_students_count: int
    completion_percentage: int


class ModuleOverallProgress(BaseModel):
    completed_content_items: int
    total_content_items: int
    not_started_content_items: int
    overdue_assignments_count: int
    progress_percentage: int
    status: ProgressStatus
    last_accessed_at: Optional[datetime] = None

    # students who completed every item in the module
    completed_students_count: int
    total_students_count: int
    module_completion_percentage: int


class ModuleProgressOverview(ModuleOverallProgress):
    module_id: int
    module_title: str
    course_offering_id: Optional[int] = None


class ModuleProgressDetail(BaseModel):
    module_id: int
    module_title: str
    course_offering_id: Optional[int] = None
    sections: list[SectionProgress] = Field(default_factory=list)
    overall_progress: ModuleOverallProgress

    def to_overview(self) -> ModuleProgressOverview:
        return ModuleProgressOverview(
            module_id=self.module_id,
            module_title=self.module_title,
            course_offering_id=self.course_offering_id,
            **self.overall_progress.model_dump(),
        )


class StudentProgressStats(BaseModel):
    student_id: int
    student_name: Optional[str] = None
    completed_modules: int
    total_modules: int
    average_progress: int
    last_activity: Optional[datetime] = None


class OverallProgressStats(BaseModel):
    total_students: int = 0
    average_progress: int = 0
    completed_modules: int = 0
    in_progress_modules: int = 0
    not_started_modules: int = 0


class DashboardProgress(BaseModel):
    student_progress: list[ModuleProgressOverview] = Field(default_factory=list)
    # only filled for mentors/admins
    overall_stats: Optional[OverallProgressStats] = None
    student_stats: Optional[list[StudentProgressStats]] = None
