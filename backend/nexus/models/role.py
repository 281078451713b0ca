from datetime import datetime

from sqlalchemy import JSON, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime, generate_id, utcnow


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: generate_id("role")
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Permission keys, not ids. Reassign the whole list on change so the
    # ORM picks up the mutation.
    permissions: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, default=utcnow
    )
