"""create report documents

Revision ID: 3b7c9d21a8e4
Revises:
Create Date: 2026-10-18 09:12:44.201537

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3b7c9d21a8e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create report_documents table (one row per 8D report document)."""
    op.create_table(
        'report_documents',
        sa.Column('id', sa.String(length=32), primary_key=True),
        sa.Column('app_id', sa.String(length=100), nullable=False),
        sa.Column(
            'data',
            sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'),
            nullable=False,
            comment="Report body (title, createdBy, currentDiscipline, d1_team..d8_recognition)",
        ),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_report_documents_app_id', 'report_documents', ['app_id'])
    op.create_index('ix_report_documents_created_at', 'report_documents', ['created_at'])
    op.create_index('idx_report_documents_app_created', 'report_documents', ['app_id', 'created_at'])


def downgrade() -> None:
    """Drop report_documents table."""
    op.drop_index('idx_report_documents_app_created', table_name='report_documents')
    op.drop_index('ix_report_documents_created_at', table_name='report_documents')
    op.drop_index('ix_report_documents_app_id', table_name='report_documents')
    op.drop_table('report_documents')
