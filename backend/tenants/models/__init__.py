"""
SQLAlchemy models for the tenants add-on.

- Base: declarative base owning the add-on's metadata
- BaseModel: mixin with UUID primary key and timestamps
- Tenant: tenant registry
- tenantables: tenant links of host records
"""

from tenants.models.base import Base, BaseModel
from tenants.models.tenant import Tenant
from tenants.models.tenantable import tenantables

__all__ = [
    'Base',
    'BaseModel',
    'Tenant',
    'tenantables',
]
