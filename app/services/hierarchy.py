"""Loads the published Module -> Section -> Content tree.

Sections and contents are each filtered on their own `published_at`, and are
ordered by `order` with ties kept in insertion (id) order.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from app.models.assignment import Assignment
from app.models.module import ContentType, Module, ModuleContent, ModuleSection
from app.services.batching import chunked
from app.services.errors import NotFoundError, store_errors
from app.services.overdue import as_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContentNode:
    id: int
    section_id: int
    title: str
    subtitle: str | None
    content_type: str
    order: int
    due_date: datetime | None = None
    grace_period_minutes: int = 0
    allow_late_submission: bool = False

    @property
    def is_assignment(self) -> bool:
        return self.content_type == ContentType.ASSIGNMENT.value


@dataclass(frozen=True)
class SectionNode:
    id: int
    title: str
    order: int
    items: tuple[ContentNode, ...] = ()

    @property
    def item_ids(self) -> list[int]:
        return [item.id for item in self.items]


@dataclass(frozen=True)
class ModuleTree:
    id: int
    title: str
    course_offering_id: int | None
    sections: tuple[SectionNode, ...] = ()

    @property
    def items(self) -> list[ContentNode]:
        return [item for section in self.sections for item in section.items]

    @property
    def item_ids(self) -> list[int]:
        return [item.id for item in self.items]


def _load_sections(db: Session, module_ids: list[int]) -> list[ModuleSection]:
    sections: list[ModuleSection] = []
    for batch in chunked(module_ids):
        sections.extend(
            db.query(ModuleSection)
            .filter(
                ModuleSection.module_id.in_(batch),
                ModuleSection.published_at.is_not(None),
            )
            .all()
        )
    # stable sort: order first, then insertion order
    sections.sort(key=lambda s: (s.order, s.id))
    return sections


def _load_contents(db: Session, section_ids: list[int]) -> list[tuple]:
    rows: list[tuple] = []
    for batch in chunked(section_ids):
        rows.extend(
            db.query(
                ModuleContent.id,
                ModuleContent.module_section_id,
                ModuleContent.title,
                ModuleContent.subtitle,
                ModuleContent.content_type,
                ModuleContent.order,
                Assignment.due_date,
                Assignment.grace_period_minutes,
                Assignment.allow_late_submission,
            )
            .outerjoin(Assignment, Assignment.module_content_id == ModuleContent.id)
            .filter(
                ModuleContent.module_section_id.in_(batch),
                ModuleContent.published_at.is_not(None),
            )
            .all()
        )
    rows.sort(key=lambda r: (r.order, r.id))
    return rows


def _content_node(r) -> ContentNode:
    is_assignment = r.content_type == ContentType.ASSIGNMENT.value
    return ContentNode(
        id=r.id,
        section_id=r.module_section_id,
        title=r.title,
        subtitle=r.subtitle,
        content_type=r.content_type,
        order=r.order,
        due_date=as_utc(r.due_date) if is_assignment else None,
        grace_period_minutes=(r.grace_period_minutes or 0) if is_assignment else 0,
        allow_late_submission=bool(r.allow_late_submission) if is_assignment else False,
    )


def load_published_many(db: Session, module_ids: list[int]) -> list[ModuleTree]:
    """Trees for `module_ids`, in the order given. Unknown ids raise NotFoundError."""
    if not module_ids:
        return []

    with store_errors("content hierarchy"):
        modules: dict[int, Module] = {}
        for batch in chunked(module_ids):
            for m in db.query(Module).filter(Module.id.in_(batch)).all():
                modules[m.id] = m

        missing = [mid for mid in module_ids if mid not in modules]
        if missing:
            raise NotFoundError(f"Module with ID {missing[0]} not found")

        sections = _load_sections(db, list(modules))
        contents = _load_contents(db, [s.id for s in sections])

    items_by_section: dict[int, list[ContentNode]] = {}
    for r in contents:
        items_by_section.setdefault(r.module_section_id, []).append(_content_node(r))

    sections_by_module: dict[int, list[SectionNode]] = {}
    for s in sections:
        sections_by_module.setdefault(s.module_id, []).append(
            SectionNode(
                id=s.id,
                title=s.title,
                order=s.order,
                items=tuple(items_by_section.get(s.id, [])),
            )
        )

    logger.debug(
        "Loaded %d modules, %d sections, %d contents",
        len(modules),
        len(sections),
        len(contents),
    )

    return [
        ModuleTree(
            id=mid,
            title=modules[mid].title,
            course_offering_id=modules[mid].course_offering_id,
            sections=tuple(sections_by_module.get(mid, [])),
        )
        for mid in module_ids
    ]


def load_published(db: Session, module_id: int) -> ModuleTree:
    return load_published_many(db, [module_id])[0]
