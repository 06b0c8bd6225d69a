from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from uuid import UUID

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.receptions import ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import MatierePremiere, ParametresEntreprise
from masarnia.domaine.modeles.salaison import LotSalaison


class ErreurEtiquette(Exception):
    """Erreur générique de génération d'étiquette."""


class LotSalaisonIntrouvableEtiquette(ErreurEtiquette):
    """Lot de salaison introuvable."""


@dataclass(frozen=True)
class DonneesEtiquetteSalaison:
    entreprise: str
    numero_lot: str
    produit: str
    description_viande: str | None
    quantite: str
    date_debut: date
    date_fin_prevue: date
    largeur_mm: int
    hauteur_mm: int


class ServiceEtiquettes:
    """Étiquette d'un bac de salaison, au format de l'imprimante configurée."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def etiquette_salaison(self, lot_id: UUID) -> bytes:
        return self._render_pdf(await self.donnees_etiquette_salaison(lot_id))

    async def donnees_etiquette_salaison(self, lot_id: UUID) -> DonneesEtiquetteSalaison:
        lot = await self._session.get(LotSalaison, lot_id)
        if lot is None:
            raise LotSalaisonIntrouvableEtiquette("Lot de salaison introuvable.")

        produit = lot.nom_produit
        if lot.reception_id is not None:
            res = await self._session.execute(
                select(MatierePremiere.nom)
                .join(ReceptionMatierePremiere, ReceptionMatierePremiere.matiere_premiere_id == MatierePremiere.id)
                .where(ReceptionMatierePremiere.id == lot.reception_id)
            )
            produit = res.scalar_one_or_none() or produit

        parametres = (await self._session.execute(select(ParametresEntreprise).limit(1))).scalar_one_or_none()

        return DonneesEtiquetteSalaison(
            entreprise=parametres.nom_entreprise if parametres else "Masarnia",
            numero_lot=lot.numero_lot,
            produit=produit,
            description_viande=lot.description_viande,
            quantite=f"{lot.quantite:g} {lot.unite}",
            date_debut=lot.date_debut,
            date_fin_prevue=lot.date_fin_prevue,
            largeur_mm=parametres.largeur_etiquette_mm if parametres else 60,
            hauteur_mm=parametres.hauteur_etiquette_mm if parametres else 40,
        )

    @staticmethod
    def _render_pdf(donnees: DonneesEtiquetteSalaison) -> bytes:
        buffer = BytesIO()
        largeur = donnees.largeur_mm * mm
        hauteur = donnees.hauteur_mm * mm
        c = canvas.Canvas(buffer, pagesize=(largeur, hauteur))

        marge = 3 * mm
        y = hauteur - marge - 3 * mm
        c.setFont("Helvetica", 7)
        c.drawString(marge, y, donnees.entreprise)

        y -= 6 * mm
        c.setFont("Helvetica-Bold", 14)
        c.drawString(marge, y, f"LOT {donnees.numero_lot}")

        y -= 5 * mm
        c.setFont("Helvetica-Bold", 9)
        c.drawString(marge, y, donnees.produit)
        if donnees.description_viande:
            y -= 4 * mm
            c.setFont("Helvetica", 7)
            c.drawString(marge, y, donnees.description_viande)

        y -= 5 * mm
        c.setFont("Helvetica", 8)
        c.drawString(marge, y, f"Quantité : {donnees.quantite}")
        y -= 4 * mm
        c.drawString(marge, y, f"Début : {donnees.date_debut.strftime('%d.%m.%Y')}")
        y -= 4 * mm
        c.drawString(marge, y, f"Fin prévue : {donnees.date_fin_prevue.strftime('%d.%m.%Y')}")

        c.showPage()
        c.save()
        return buffer.getvalue()
