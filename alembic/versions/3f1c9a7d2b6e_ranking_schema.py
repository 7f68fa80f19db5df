"""ranking schema

Revision ID: 3f1c9a7d2b6e
Revises:
Create Date: 2026-10-18 10:12:41.503117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b6e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('department', sa.String(), nullable=False, server_default=''),
        sa.Column('position', sa.String(), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_employees_id', 'employees', ['id'])

    op.create_table(
        'evaluation_criteria',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('key', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('weight', sa.Float(), nullable=False, server_default='0'),
        sa.Column('direction', sa.String(), nullable=False, server_default='higher_is_better'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_evaluation_criteria_id', 'evaluation_criteria', ['id'])

    op.create_table(
        'employee_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('criterion_id', sa.Integer(), sa.ForeignKey('evaluation_criteria.id'), nullable=False),
        sa.Column('period', sa.Date(), nullable=False),
        sa.Column('raw_value', sa.Float(), nullable=False),
        sa.Column('normalized_score', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('employee_id', 'criterion_id', 'period', name='uq_employee_criterion_period'),
    )
    op.create_index('ix_employee_scores_id', 'employee_scores', ['id'])
    op.create_index('ix_employee_scores_period', 'employee_scores', ['period'])

    op.create_table(
        'employee_rankings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('period', sa.Date(), nullable=False),
        sa.Column('employee_name', sa.String(), nullable=False),
        sa.Column('department', sa.String(), nullable=False, server_default=''),
        sa.Column('position', sa.String(), nullable=False, server_default=''),
        sa.Column('total_score', sa.Float(), nullable=False),
        sa.Column('rank_position', sa.Integer(), nullable=False),
        sa.Column('previous_rank', sa.Integer(), nullable=True),
        sa.Column('rank_variation', sa.Integer(), nullable=True),
        sa.Column('criterion_scores', sa.JSON(), nullable=False),
        sa.Column('strengths', sa.JSON(), nullable=False),
        sa.Column('weaknesses', sa.JSON(), nullable=False),
        sa.Column('suggestions', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('employee_id', 'period', name='uq_employee_period_ranking'),
    )
    op.create_index('ix_employee_rankings_id', 'employee_rankings', ['id'])
    op.create_index('ix_employee_rankings_period', 'employee_rankings', ['period'])


def downgrade() -> None:
    op.drop_table('employee_rankings')
    op.drop_table('employee_scores')
    op.drop_table('evaluation_criteria')
    op.drop_table('employees')
