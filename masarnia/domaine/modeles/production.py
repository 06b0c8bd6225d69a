from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.enums.types import StatutLotProduction, TypeSourceMatiere
from masarnia.domaine.modeles.base import ModeleHorodate


class LotProduction(ModeleHorodate):
    """Lot de production d'un produit fini.

    Numéro : YYYYMMDD, suffixé -n pour le n-ième lot du même produit le même jour.
    """

    __tablename__ = "lot_production"
    __table_args__ = (UniqueConstraint("produit_id", "numero_lot", name="uq_lot_production_produit_numero"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    numero_lot: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    produit_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("produit.id"), nullable=False)

    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    date_production: Mapped[date] = mapped_column(Date, nullable=False)
    date_peremption: Mapped[date] = mapped_column(Date, nullable=False)

    heure_debut: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    heure_fin: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    temperature_finale: Mapped[float | None] = mapped_column(nullable=True)
    temperature_conforme: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    statut: Mapped[StatutLotProduction] = mapped_column(
        Enum(StatutLotProduction, native_enum=False, length=50),
        nullable=False,
        default=StatutLotProduction.IN_PROGRESS,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    operateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    produit = relationship("Produit")
    lignes_matiere = relationship(
        "LigneMatiereLot",
        back_populates="lot_production",
        cascade="all, delete-orphan",
    )


class LigneMatiereLot(ModeleHorodate):
    """Matière consommée par un lot de production.

    Variante étiquetée : `type_source` désigne l'unique référence renseignée.
    """

    __tablename__ = "ligne_matiere_lot"
    __table_args__ = (
        CheckConstraint(
            "(type_source = 'RAW_MATERIAL' AND matiere_premiere_id IS NOT NULL"
            " AND lot_salaison_id IS NULL AND materiau_id IS NULL)"
            " OR (type_source = 'CURING_BATCH' AND lot_salaison_id IS NOT NULL"
            " AND matiere_premiere_id IS NULL AND materiau_id IS NULL)"
            " OR (type_source = 'MATERIAL' AND materiau_id IS NOT NULL"
            " AND matiere_premiere_id IS NULL AND lot_salaison_id IS NULL)",
            name="ck_ligne_matiere_lot_source_unique",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    lot_production_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("lot_production.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type_source: Mapped[TypeSourceMatiere] = mapped_column(
        Enum(TypeSourceMatiere, native_enum=False, length=50),
        nullable=False,
    )

    matiere_premiere_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("matiere_premiere.id"), nullable=True)
    reception_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("reception_matiere_premiere.id"), nullable=True
    )
    lot_salaison_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("lot_salaison.id"), nullable=True)
    materiau_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("materiau.id"), nullable=True)
    reception_materiau_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("reception_materiau.id"), nullable=True
    )

    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    lot_production = relationship("LotProduction", back_populates="lignes_matiere")
