from __future__ import annotations

from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import Date, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from masarnia.domaine.enums.types import MethodeSalaison, StatutLotSalaison
from masarnia.domaine.modeles.base import ModeleHorodate


class LotSalaison(ModeleHorodate):
    """Lot de salaison (peklowanie).

    Méthode DRY : pourcentage de sel nitrité sur la masse de viande.
    Méthode INJECTION : composition de la saumure (eau, sel, maggi, sucre).
    """

    __tablename__ = "lot_salaison"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    numero_lot: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    reception_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("reception_matiere_premiere.id"), nullable=True
    )

    nom_produit: Mapped[str] = mapped_column(String(200), nullable=False)
    quantite: Mapped[float] = mapped_column(nullable=False)
    unite: Mapped[str] = mapped_column(String(20), nullable=False, default="kg")

    methode: Mapped[MethodeSalaison] = mapped_column(
        Enum(MethodeSalaison, native_enum=False, length=50),
        nullable=False,
        default=MethodeSalaison.DRY,
    )
    description_viande: Mapped[str | None] = mapped_column(String(300), nullable=True)

    # DRY
    pourcentage_sel_nitrite: Mapped[float | None] = mapped_column(nullable=True)

    # INJECTION
    saumure_eau: Mapped[float | None] = mapped_column(nullable=True)
    saumure_sel: Mapped[float | None] = mapped_column(nullable=True)
    saumure_maggi: Mapped[float | None] = mapped_column(nullable=True)
    saumure_sucre: Mapped[float | None] = mapped_column(nullable=True)

    date_debut: Mapped[date] = mapped_column(Date, nullable=False)
    date_fin_prevue: Mapped[date] = mapped_column(Date, nullable=False)
    date_fin_reelle: Mapped[date | None] = mapped_column(Date, nullable=True)

    temperature: Mapped[float | None] = mapped_column(nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    statut: Mapped[StatutLotSalaison] = mapped_column(
        Enum(StatutLotSalaison, native_enum=False, length=50),
        nullable=False,
        default=StatutLotSalaison.IN_PROGRESS,
    )

    utilisateur_id: Mapped[UUID | None] = mapped_column(Uuid, ForeignKey("utilisateur.id"), nullable=True)

    reception = relationship("ReceptionMatierePremiere")
