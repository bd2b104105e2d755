"""
SQLAlchemy ORM models for persistent storage.

Models mirror the dataclass models but add database persistence.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from prism.models.collection import utc_now


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class PrismDB(Base):
    """
    A collection of decks sharing one pool of physical cards.

    The snapshot columns hold the deck list as it was when the player last
    finished marking sleeves; changes are computed against it.
    """

    __tablename__ = "prisms"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255))

    # Normalized card keys already marked
    marked_cards: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Storage document of the decks at the last snapshot (None before the first)
    snapshot: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)
    snapshot_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    # Decks in stripe order
    decks: Mapped[list["DeckDB"]] = relationship(
        back_populates="prism",
        cascade="all, delete-orphan",
        order_by="DeckDB.position",
    )

    def __repr__(self) -> str:
        return f"<PrismDB(id={self.id}, name={self.name})>"


class DeckDB(Base):
    """
    A deck inside a prism.

    Cards are stored as a JSON list of {"name", "quantity"} in decklist order.
    """

    __tablename__ = "decks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    prism_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("prisms.id", ondelete="CASCADE"), index=True
    )
    position: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(255))
    commander: Mapped[str] = mapped_column(String(255), default="")
    bracket: Mapped[int] = mapped_column(Integer, default=1)
    assigned_color: Mapped[str] = mapped_column(String(32), default="")
    cards: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Relationship back to prism
    prism: Mapped["PrismDB"] = relationship(back_populates="decks")

    def __repr__(self) -> str:
        return f"<DeckDB(name={self.name}, position={self.position})>"
