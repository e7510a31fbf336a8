"""Add optimistic-concurrency version columns to match and pool

Revision ID: 002_version_columns
Revises: 001_initial
"""

from alembic import op
import sqlalchemy as sa


revision = "002_version_columns"
down_revision = "001_initial"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column("match", sa.Column("version", sa.Integer(), nullable=False, server_default="1"))
    op.add_column("pool", sa.Column("version", sa.Integer(), nullable=False, server_default="1"))


def downgrade():
    with op.batch_alter_table("pool") as batch_op:
        batch_op.drop_column("version")
    with op.batch_alter_table("match") as batch_op:
        batch_op.drop_column("version")
