from app.models.content_progress import ProgressStatus
from app.schemas.my_modules import (
    CourseInfo,
    MyModuleRow,
    MyModulesFilters,
    MyModulesResponse,
    MyModulesSummary,
)
from app.schemas.progress import DashboardProgress, ModuleProgressOverview
from app.services.stats import average, exact_percentage


def _matches(module: ModuleProgressOverview, filters: MyModulesFilters) -> bool:
    if filters.status is not None and module.status != filters.status:
        return False

    needle = (filters.search or "").strip().lower()
    if needle and needle not in module.module_title.lower():
        return False

    return True


def summarize(modules: list[ModuleProgressOverview]) -> MyModulesSummary:
    by_status = {status: 0 for status in ProgressStatus}
    for m in modules:
        by_status[m.status] += 1

    return MyModulesSummary(
        total_modules=len(modules),
        completed_modules=by_status[ProgressStatus.COMPLETED],
        in_progress_modules=by_status[ProgressStatus.IN_PROGRESS],
        not_started_modules=by_status[ProgressStatus.NOT_STARTED],
        total_overdue_assignments=sum(m.overdue_assignments_count for m in modules),
        completed_content_items=sum(m.completed_content_items for m in modules),
        total_content_items=sum(m.total_content_items for m in modules),
        average_progress=average(
            [exact_percentage(m.completed_content_items, m.total_content_items) for m in modules]
        ),
    )


def present(
    dashboard: DashboardProgress,
    filters: MyModulesFilters,
    courses: dict[int, CourseInfo],
) -> MyModulesResponse:
    """Filter dashboard modules, attach course info, and summarize what is left."""
    rows: list[MyModuleRow] = []
    for module in dashboard.student_progress:
        if not _matches(module, filters):
            continue

        course = courses.get(module.module_id) or CourseInfo()
        data = module.model_dump()
        if course.course_offering_id is not None:
            data["course_offering_id"] = course.course_offering_id
        rows.append(
            MyModuleRow(
                **data,
                course_name=course.course_name,
                course_code=course.course_code,
            )
        )

    return MyModulesResponse(modules=rows, summary=summarize(rows))
