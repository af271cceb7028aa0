"""create marks and push_subscriptions tables

Revision ID: 5b7e2c1d9a30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision: str = '5b7e2c1d9a30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # init_db() may already have created the tables on a dev database
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    tables = inspector.get_table_names()

    if 'marks' not in tables:
        op.create_table(
            'marks',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('lat', sa.Float(), nullable=False),
            sa.Column('lng', sa.Float(), nullable=False),
            sa.Column('color', sa.String(length=16), nullable=False),
            sa.Column('street', sa.Text(), nullable=True),
            sa.Column('note', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(op.f('ix_marks_expires_at'), 'marks', ['expires_at'], unique=False)

    if 'push_subscriptions' not in tables:
        op.create_table(
            'push_subscriptions',
            sa.Column('id', sa.String(length=36), nullable=False),
            sa.Column('endpoint', sa.String(length=1000), nullable=False),
            sa.Column('keys', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index(
            op.f('ix_push_subscriptions_endpoint'), 'push_subscriptions', ['endpoint'], unique=True
        )


def downgrade() -> None:
    op.drop_index(op.f('ix_push_subscriptions_endpoint'), table_name='push_subscriptions')
    op.drop_table('push_subscriptions')
    op.drop_index(op.f('ix_marks_expires_at'), table_name='marks')
    op.drop_table('marks')
