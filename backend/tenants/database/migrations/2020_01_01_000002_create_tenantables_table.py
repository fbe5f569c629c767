"""Create tenantables table

Links any host model (by type and id) to the tenants it belongs to.

Revision ID: tenants_0002
Revises: tenants_0001
Create Date: 2020-01-01 00:00:02.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'tenants_0002'
down_revision = 'tenants_0001'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('tenantables',
        sa.Column('tenant_id', sa.Uuid(), nullable=False),
        sa.Column('tenantable_type', sa.String(length=255), nullable=False),
        sa.Column('tenantable_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('tenant_id', 'tenantable_type', 'tenantable_id', name='uq_tenantables')
    )
    op.create_index(op.f('ix_tenantables_tenantable'), 'tenantables', ['tenantable_type', 'tenantable_id'], unique=False)


def downgrade():
    op.drop_index(op.f('ix_tenantables_tenantable'), table_name='tenantables')
    op.drop_table('tenantables')
