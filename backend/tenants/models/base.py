"""
Base model with common fields for the add-on's models.

The add-on keeps its own declarative metadata. Its tables are created by the
bundled migrations, and Tenants.init_app hides them from the host's
autogenerate comparisons.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase
from typing import Dict, Any, Optional


class Base(DeclarativeBase):
    pass


class BaseModel:
    """
    Mixin with common fields for all models.

    Provides:
    - UUID primary key (id)
    - Automatic timestamps (created_at, updated_at)
    - Serialization helper (to_dict)

    Usage:
        class Tenant(BaseModel, Base):
            __tablename__ = 'tenants'
            name = Column(String(255), nullable=False)
    """

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
        comment="Unique identifier for the record"
    )

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Timestamp when record was created (UTC)"
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="Timestamp when record was last updated (UTC)"
    )

    def to_dict(self, exclude: Optional[list] = None) -> Dict[str, Any]:
        """
        Convert model instance to dictionary for JSON serialization.

        Args:
            exclude: List of field names to exclude from output

        Returns:
            Dictionary representation of the model

        Example:
            >>> tenant = Tenant(name='Acme Corp')
            >>> tenant.to_dict(exclude=['created_at', 'updated_at'])
            {'id': '123e4567-...', 'name': 'Acme Corp', 'slug': 'acme-corp', ...}
        """
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            field_name = column.name
            if field_name in exclude:
                continue

            value = getattr(self, field_name, None)

            if isinstance(value, datetime):
                result[field_name] = value.isoformat()
            elif isinstance(value, uuid.UUID):
                result[field_name] = str(value)
            else:
                result[field_name] = value

        return result

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
