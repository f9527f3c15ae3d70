"""create module hierarchy and content progress tables

Revision ID: b7c41e92d0a3
Revises: 5e2d8a1c90f4
Create Date: 2026-03-02 18:41:07.113502

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7c41e92d0a3'
down_revision: Union[str, Sequence[str], None] = '5e2d8a1c90f4'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "course_offering_id",
            sa.Integer(),
            sa.ForeignKey("course_offerings.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_modules_course_offering_id", "modules", ["course_offering_id"])

    op.create_table(
        "module_sections",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_module_sections_module_id", "module_sections", ["module_id"])

    op.create_table(
        "module_contents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_section_id",
            sa.Integer(),
            sa.ForeignKey("module_sections.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("content_type", sa.String(20), nullable=False, server_default="LESSON"),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_module_contents_module_section_id", "module_contents", ["module_section_id"]
    )

    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "module_content_id",
            sa.Integer(),
            sa.ForeignKey("module_contents.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("grace_period_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("allow_late_submission", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "content_progress",
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "module_content_id",
            sa.Integer(),
            sa.ForeignKey("module_contents.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "module_id",
            sa.Integer(),
            sa.ForeignKey("modules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="IN_PROGRESS"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_content_progress_module_student",
        "content_progress",
        ["module_id", "student_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_content_progress_module_student", table_name="content_progress")
    op.drop_table("content_progress")
    op.drop_table("assignments")
    op.drop_index("ix_module_contents_module_section_id", table_name="module_contents")
    op.drop_table("module_contents")
    op.drop_index("ix_module_sections_module_id", table_name="module_sections")
    op.drop_table("module_sections")
    op.drop_index("ix_modules_course_offering_id", table_name="modules")
    op.drop_table("modules")
