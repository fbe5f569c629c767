"""Create tenants table

Revision ID: tenants_0001
Revises:
Create Date: 2020-01-01 00:00:01.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'tenants_0001'
down_revision = None
branch_labels = ('tenants',)
depends_on = None


def upgrade():
    op.create_table('tenants',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('slug', sa.String(length=63), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug'),
        sa.UniqueConstraint('domain')
    )
    op.create_index('ix_tenants_slug_active', 'tenants', ['slug', 'is_active'], unique=False)


def downgrade():
    op.drop_index('ix_tenants_slug_active', table_name='tenants')
    op.drop_table('tenants')
