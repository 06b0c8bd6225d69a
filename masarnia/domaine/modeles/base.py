from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def maintenant_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


# JSONB sous PostgreSQL, JSON ailleurs (SQLite en tests).
DocumentJSON = JSON().with_variant(JSONB(), "postgresql")


class BaseModele(DeclarativeBase):
    """Base declarative SQLAlchemy.

    Les noms d’attributs restent en français.
    """


class ModeleHorodate(BaseModele):
    """Mixin de dates techniques."""

    __abstract__ = True

    cree_le: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=maintenant_utc, nullable=False)
    mis_a_jour_le: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=maintenant_utc,
        onupdate=maintenant_utc,
        nullable=False,
    )
