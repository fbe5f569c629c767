"""
Tenant Model

Registry of tenants known to the host application. Built-in resolution
strategies look tenants up here by slug (subdomain, header) or by domain.

The table is created by the published ``create_tenants_table`` migration,
not by ``create_all`` on the host's metadata.
"""

import re
import logging
from typing import Optional
from sqlalchemy import Column, String, Boolean, Index, select
from sqlalchemy.orm import Session

from .base import Base, BaseModel

logger = logging.getLogger(__name__)


class Tenant(BaseModel, Base):
    """
    Tenant model representing one organization served by the host application.

    Attributes:
        slug (str): URL-safe identifier, also used as subdomain (e.g. "acme-corp")
        name (str): Human-readable tenant name (e.g. "Acme Corporation")
        domain (str): Dedicated host name, if the tenant has one (e.g. "acme.io")
        is_active (bool): Inactive tenants are never resolved

    Inherited from BaseModel:
        id (UUID): Primary key
        created_at (datetime): Creation timestamp (UTC)
        updated_at (datetime): Last update timestamp (UTC)
    """

    __tablename__ = 'tenants'

    slug = Column(String(63), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    domain = Column(String(255), unique=True, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index('ix_tenants_slug_active', 'slug', 'is_active'),
    )

    def __init__(self, **kwargs):
        """
        Initialize a new tenant.

        If slug is not provided, it is generated from the name.
        """
        if 'slug' not in kwargs and 'name' in kwargs:
            kwargs['slug'] = self.generate_slug(kwargs['name'])
        if kwargs.get('domain'):
            kwargs['domain'] = kwargs['domain'].strip().lower()

        super().__init__(**kwargs)

    @staticmethod
    def generate_slug(tenant_name: str) -> str:
        """
        Generate a host-label-compatible slug from a tenant name.

        Rules:
        - Convert to lowercase
        - Replace spaces and special chars with hyphens
        - Collapse consecutive hyphens, strip leading/trailing ones
        - Max length: 63 characters (DNS label limit)

        Examples:
            "Acme Corporation" -> "acme-corporation"
            "Test_Co (2024)" -> "test-co-2024"
        """
        slug = tenant_name.lower().strip()
        slug = re.sub(r'[^a-z0-9]+', '-', slug)
        slug = re.sub(r'-+', '-', slug).strip('-')

        if len(slug) > 63:
            slug = slug[:63].rstrip('-')

        logger.debug(f"Generated tenant slug: {tenant_name} -> {slug}")
        return slug

    @classmethod
    def find_active_by_slug(cls, session: Session, slug: str) -> Optional['Tenant']:
        """Return the active tenant with this slug, or None."""
        if not slug:
            return None
        stmt = select(cls).where(cls.slug == slug.lower(), cls.is_active.is_(True))
        return session.execute(stmt).scalars().first()

    @classmethod
    def find_active_by_domain(cls, session: Session, domain: str) -> Optional['Tenant']:
        """Return the active tenant whose dedicated domain is this host, or None."""
        if not domain:
            return None
        stmt = select(cls).where(cls.domain == domain.lower(), cls.is_active.is_(True))
        return session.execute(stmt).scalars().first()

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} slug={self.slug}>"
