from datetime import timedelta

import pytest

from app.models.module import Module, ModuleContent, ModuleSection
from app.services.errors import NotFoundError
from app.services.hierarchy import load_published, load_published_many
from tests.conftest import NOW


def test_only_published_sections_and_items(db, seed):
    tree = load_published(db, seed.m_vars)

    assert [s.title for s in tree.sections] == ["Basics"]
    assert tree.item_ids == [seed.i1, seed.i2]
    assert seed.i_future not in tree.item_ids


def test_assignment_fields_attach_to_assignments(db, seed):
    i1, i2 = load_published(db, seed.m_vars).items

    assert i1.is_assignment
    assert i1.due_date == NOW - timedelta(days=1)
    assert i1.grace_period_minutes == 0
    assert not i2.is_assignment
    assert i2.due_date is None


def test_module_with_only_unpublished_sections_is_empty(db, seed):
    tree = load_published(db, seed.m_loops)

    assert tree.sections == ()
    assert tree.item_ids == []


def test_order_ties_keep_insertion_order(db, seed):
    module = Module(title="Ties", course_offering_id=seed.offering1, published_at=NOW)
    db.add(module)
    db.commit()

    late = ModuleSection(module_id=module.id, title="Late", order=2, published_at=NOW)
    first = ModuleSection(module_id=module.id, title="First", order=1, published_at=NOW)
    second = ModuleSection(module_id=module.id, title="Second", order=1, published_at=NOW)
    db.add_all([late, first, second])
    db.commit()

    b = ModuleContent(module_section_id=first.id, title="b", content_type="LESSON", order=5, published_at=NOW)
    a1 = ModuleContent(module_section_id=first.id, title="a1", content_type="LESSON", order=1, published_at=NOW)
    a2 = ModuleContent(module_section_id=first.id, title="a2", content_type="VIDEO", order=1, published_at=NOW)
    db.add_all([b, a1, a2])
    db.commit()

    tree = load_published(db, module.id)

    assert [s.title for s in tree.sections] == ["First", "Second", "Late"]
    assert [i.title for i in tree.sections[0].items] == ["a1", "a2", "b"]


def test_many_keeps_requested_order(db, seed):
    trees = load_published_many(db, [seed.m_calc, seed.m_vars])

    assert [t.id for t in trees] == [seed.m_calc, seed.m_vars]
    assert trees[0].course_offering_id == seed.offering2
    assert load_published_many(db, []) == []


def test_unknown_module_raises_not_found(db, seed):
    with pytest.raises(NotFoundError):
        load_published(db, 999999)

    with pytest.raises(NotFoundError):
        load_published_many(db, [seed.m_vars, 999999])
