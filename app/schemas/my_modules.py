from typing import Optional

from pydantic import BaseModel, Field

from app.models.content_progress import ProgressStatus
from app.schemas.progress import ModuleProgressOverview, ProgressScope


class CourseInfo(BaseModel):
    course_offering_id: Optional[int] = None
    course_name: Optional[str] = None
    course_code: Optional[str] = None


class MyModulesFilters(ProgressScope):
    status: Optional[ProgressStatus] = None
    search: Optional[str] = None


class MyModuleRow(ModuleProgressOverview):
    course_name: Optional[str] = None
    course_code: Optional[str] = None


class MyModulesSummary(BaseModel):
    total_modules: int = 0
    completed_modules: int = 0
    in_progress_modules: int = 0
    not_started_modules: int = 0
    total_overdue_assignments: int = 0
    completed_content_items: int = 0
    total_content_items: int = 0
    average_progress: int = 0


class MyModulesResponse(BaseModel):
    modules: list[MyModuleRow] = Field(default_factory=list)
    summary: MyModulesSummary = Field(default_factory=MyModulesSummary)
