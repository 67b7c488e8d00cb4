"""
Base models. Every table gets store-assigned created_at / updated_at.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def new_uuid():
    return str(uuid.uuid4())


class TimestampedBase(Base):
    """Abstract base with server-side timestamps."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class RecordBase(TimestampedBase):
    """Abstract base with a UUID string primary key."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=new_uuid
    )
