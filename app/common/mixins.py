"""
Common mixins for settings and audit models
"""
from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.sql import func
from uuid import uuid4


class IdMixin:
    """Mixin for models keyed by a generated UUID"""

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4, index=True)


class CreatedAtMixin:
    """Mixin for append-only records"""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TimestampMixin(CreatedAtMixin):
    """Mixin for models that need timestamp tracking"""

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
