from __future__ import annotations

from sqlalchemy import Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from orderledger.db.base import Base, TimestampMixin


class Document(TimestampMixin, Base):
    """One JSON document addressed by (collection, id)."""
    __tablename__ = "documents"

    collection: Mapped[str] = mapped_column(Text, primary_key=True)
    doc_id: Mapped[str] = mapped_column("id", Text, primary_key=True)
    data: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
