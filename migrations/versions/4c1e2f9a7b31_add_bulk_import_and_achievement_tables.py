"""Add bulk import and achievement tables

Revision ID: 4c1e2f9a7b31
Revises:
Create Date: 2026-10-19 10:12:41.503218

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1e2f9a7b31'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create import_sessions table
    op.create_table('import_sessions',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('total_files', sa.Integer(), nullable=False),
        sa.Column('processed_files', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_imported', sa.Integer(), nullable=False),
        sa.Column('created_by', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_import_sessions_created_by'), 'import_sessions', ['created_by'], unique=False)

    # Create import_session_files table
    op.create_table('import_session_files',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('total_rows', sa.Integer(), nullable=False),
        sa.Column('valid_rows', sa.Integer(), nullable=False),
        sa.Column('imported_rows', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error_message', sa.String(length=2000), nullable=True),
        sa.Column('preview_json', sa.String(length=10000), nullable=False),
        sa.Column('duration_seconds', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['import_sessions.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_import_session_files_session_id'), 'import_session_files', ['session_id'], unique=False)

    # Create import_errors table
    op.create_table('import_errors',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('row_number', sa.Integer(), nullable=False),
        sa.Column('error_type', sa.String(length=50), nullable=False),
        sa.Column('error_message', sa.String(length=2000), nullable=False),
        sa.Column('cell_value', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['import_sessions.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_import_errors_session_id'), 'import_errors', ['session_id'], unique=False)

    # Create hardware_stores table
    op.create_table('hardware_stores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('store_code', sa.String(length=64), nullable=False),
        sa.Column('store_name', sa.String(length=255), nullable=False),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=False),
        sa.Column('province', sa.String(length=100), nullable=False),
        sa.Column('contact_person', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('credit_limit', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('store_type', sa.String(length=50), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('import_session_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_hardware_stores_store_code'), 'hardware_stores', ['store_code'], unique=True)
    op.create_index(op.f('ix_hardware_stores_province'), 'hardware_stores', ['province'], unique=False)
    op.create_index(op.f('ix_hardware_stores_import_session_id'), 'hardware_stores', ['import_session_id'], unique=False)

    # Create user_achievement_progress table
    op.create_table('user_achievement_progress',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('achievement_type', sa.String(length=20), nullable=False),
        sa.Column('current_progress', sa.Float(), nullable=False),
        sa.Column('target_progress', sa.Float(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('total_points', sa.Integer(), nullable=False),
        sa.Column('last_import_accuracy', sa.Float(), nullable=True),
        sa.Column('best_accuracy', sa.Float(), nullable=False),
        sa.Column('consecutive_successful_imports', sa.Integer(), nullable=False),
        sa.Column('total_imports', sa.Integer(), nullable=False),
        sa.Column('total_records_imported', sa.Integer(), nullable=False),
        sa.Column('average_import_time', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'achievement_type', name='uq_progress_user_type')
    )
    op.create_index(op.f('ix_user_achievement_progress_user_id'), 'user_achievement_progress', ['user_id'], unique=False)

    # Create import_achievements table
    op.create_table('import_achievements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('achievement_type', sa.String(length=20), nullable=False),
        sa.Column('achievement_name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('icon_type', sa.String(length=20), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('points_awarded', sa.Integer(), nullable=False),
        sa.Column('criteria_json', sa.String(length=1000), nullable=False),
        sa.Column('unlocked_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'achievement_type', 'level', name='uq_achievement_user_type_level')
    )
    op.create_index(op.f('ix_import_achievements_user_id'), 'import_achievements', ['user_id'], unique=False)

    # Create import_accuracy_metrics table
    op.create_table('import_accuracy_metrics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(length=100), nullable=False),
        sa.Column('session_id', sa.String(length=64), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('total_rows', sa.Integer(), nullable=False),
        sa.Column('valid_rows', sa.Integer(), nullable=False),
        sa.Column('error_rows', sa.Integer(), nullable=False),
        sa.Column('accuracy_percentage', sa.Float(), nullable=False),
        sa.Column('import_duration', sa.Float(), nullable=False),
        sa.Column('quality_score', sa.Float(), nullable=False),
        sa.Column('errors_detected_json', sa.String(length=10000), nullable=False),
        sa.Column('improvement_suggestions_json', sa.String(length=2000), nullable=False),
        sa.Column('points_earned', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_import_accuracy_metrics_user_id'), 'import_accuracy_metrics', ['user_id'], unique=False)
    op.create_index(op.f('ix_import_accuracy_metrics_session_id'), 'import_accuracy_metrics', ['session_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('import_accuracy_metrics')
    op.drop_table('import_achievements')
    op.drop_table('user_achievement_progress')
    op.drop_table('hardware_stores')
    op.drop_table('import_errors')
    op.drop_table('import_session_files')
    op.drop_table('import_sessions')
