"""
Tenantables Table

Polymorphic link between a tenant and any record of the host application,
identified by the record's type name and primary key. Created by the
``create_tenantables_table`` migration.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Table, UniqueConstraint, Uuid

from .base import Base


tenantables = Table(
    'tenantables',
    Base.metadata,
    Column('tenant_id', Uuid(as_uuid=True), ForeignKey('tenants.id', ondelete='CASCADE'), nullable=False),
    Column('tenantable_type', String(255), nullable=False),
    Column('tenantable_id', String(36), nullable=False),
    Column('created_at', DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False),
    Column(
        'updated_at',
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    ),
    UniqueConstraint('tenant_id', 'tenantable_type', 'tenantable_id', name='uq_tenantables'),
    Index('ix_tenantables_tenantable', 'tenantable_type', 'tenantable_id'),
)
