from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.haccp import ActionCorrective
from masarnia.domaine.modeles.production import LigneMatiereLot, LotProduction
from masarnia.domaine.modeles.receptions import ReceptionMateriau, ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, MatierePremiere, Produit
from masarnia.domaine.modeles.salaison import LotSalaison


class ErreurTracabilite(Exception):
    """Erreur générique de traçabilité."""


class LotIntrouvableTracabilite(ErreurTracabilite):
    """Lot de production introuvable."""


@dataclass(frozen=True)
class EvenementTracabilite:
    moment: datetime
    type_evenement: str
    titre: str
    details: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ChronologieLot:
    lot_id: UUID
    numero_lot: str
    nom_produit: str
    evenements: list[EvenementTracabilite]


def _en_moment(valeur: date | datetime) -> datetime:
    """Ramène dates et datetimes (naïfs ou non) sur une même échelle UTC naïve."""

    if isinstance(valeur, datetime):
        if valeur.tzinfo is not None:
            return valeur.astimezone(timezone.utc).replace(tzinfo=None)
        return valeur
    return datetime.combine(valeur, time.min)


def _na(valeur: object | None, suffixe: str = "") -> str:
    if valeur is None or valeur == "":
        return "N/A"
    return f"{valeur}{suffixe}"


class ServiceTracabilite:
    """Traçabilité amont d'un lot de production (réceptions, salaisons, matériaux)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def chronologie(self, lot_id: UUID) -> ChronologieLot:
        lot = await self._session.get(LotProduction, lot_id)
        if lot is None:
            raise LotIntrouvableTracabilite("Lot de production introuvable.")

        produit = await self._session.get(Produit, lot.produit_id)
        nom_produit = produit.nom if produit is not None else "(produit inconnu)"

        res = await self._session.execute(
            select(LigneMatiereLot).where(LigneMatiereLot.lot_production_id == lot.id)
        )
        evenements: list[EvenementTracabilite] = []
        for ligne in res.scalars().all():
            if ligne.reception_id is not None:
                evenements.append(await self._evenement_reception(ligne.reception_id, "Réception matière"))
            if ligne.lot_salaison_id is not None:
                evenements.extend(await self._evenements_salaison(ligne.lot_salaison_id))
            if ligne.reception_materiau_id is not None:
                evenements.append(await self._evenement_materiau(ligne))

        evenements.append(
            EvenementTracabilite(
                moment=_en_moment(lot.heure_debut or lot.date_production),
                type_evenement="PRODUCTION",
                titre=f"Production : {nom_produit}",
                details={
                    "Numéro de lot": lot.numero_lot,
                    "Quantité": f"{lot.quantite:g} {lot.unite}",
                    "Date de péremption": lot.date_peremption.isoformat(),
                    "Statut": lot.statut.value,
                },
            )
        )
        if lot.heure_fin is not None and lot.temperature_finale is not None:
            evenements.append(
                EvenementTracabilite(
                    moment=_en_moment(lot.heure_fin),
                    type_evenement="CUISSON",
                    titre="Fin de cuisson",
                    details={
                        "Température à cœur": f"{lot.temperature_finale:g}°C",
                        "Conforme": "oui" if lot.temperature_conforme else "non",
                    },
                )
            )

        res_actions = await self._session.execute(
            select(ActionCorrective).where(ActionCorrective.reference == str(lot.id))
        )
        for action in res_actions.scalars().all():
            evenements.append(
                EvenementTracabilite(
                    moment=_en_moment(action.cree_le),
                    type_evenement="ACTION_CORRECTIVE",
                    titre=action.titre,
                    details={"Priorité": action.priorite.value, "Statut": action.statut.value},
                )
            )

        evenements.sort(key=lambda e: e.moment)
        return ChronologieLot(
            lot_id=lot.id,
            numero_lot=lot.numero_lot,
            nom_produit=nom_produit,
            evenements=evenements,
        )

    async def lots_utilisant_reception(self, reception_id: UUID) -> list[LotProduction]:
        """Traçabilité aval : lots de production issus d'une réception (directement ou via salaison)."""

        salaisons = select(LotSalaison.id).where(LotSalaison.reception_id == reception_id)
        res = await self._session.execute(
            select(LotProduction)
            .join(LigneMatiereLot, LigneMatiereLot.lot_production_id == LotProduction.id)
            .where(
                or_(
                    LigneMatiereLot.reception_id == reception_id,
                    LigneMatiereLot.lot_salaison_id.in_(salaisons),
                )
            )
            .distinct()
            .order_by(LotProduction.date_production.asc())
        )
        return list(res.scalars().all())

    async def _nom_fournisseur(self, fournisseur_id: UUID | None) -> str | None:
        if fournisseur_id is None:
            return None
        fournisseur = await self._session.get(Fournisseur, fournisseur_id)
        return fournisseur.nom if fournisseur is not None else None

    async def _evenement_reception(self, reception_id: UUID, libelle: str) -> EvenementTracabilite:
        reception = await self._session.get(ReceptionMatierePremiere, reception_id)
        matiere = await self._session.get(MatierePremiere, reception.matiere_premiere_id)
        return EvenementTracabilite(
            moment=_en_moment(reception.recue_le),
            type_evenement="RECEPTION",
            titre=f"{libelle} : {matiere.nom if matiere else 'inconnue'}",
            details={
                "Fournisseur": _na(await self._nom_fournisseur(reception.fournisseur_id)),
                "Numéro de lot": reception.numero_lot,
                "Quantité": f"{reception.quantite:g} {reception.unite}",
                "Température": _na(reception.temperature, "°C"),
                "Document": _na(reception.numero_document),
            },
        )

    async def _evenements_salaison(self, lot_salaison_id: UUID) -> list[EvenementTracabilite]:
        salaison = await self._session.get(LotSalaison, lot_salaison_id)
        evenements = [
            EvenementTracabilite(
                moment=_en_moment(salaison.date_debut),
                type_evenement="SALAISON",
                titre=f"Salaison : {salaison.nom_produit}",
                details={
                    "Numéro de lot": salaison.numero_lot,
                    "Quantité": f"{salaison.quantite:g} {salaison.unite}",
                    "Méthode": salaison.methode.value,
                    "Début": salaison.date_debut.isoformat(),
                    "Fin": salaison.date_fin_reelle.isoformat() if salaison.date_fin_reelle else "en cours",
                    "Statut": salaison.statut.value,
                },
            )
        ]
        if salaison.reception_id is not None:
            evenements.append(await self._evenement_reception(salaison.reception_id, "Réception viande"))
        return evenements

    async def _evenement_materiau(self, ligne: LigneMatiereLot) -> EvenementTracabilite:
        reception = await self._session.get(ReceptionMateriau, ligne.reception_materiau_id)
        materiau = await self._session.get(Materiau, reception.materiau_id)
        return EvenementTracabilite(
            moment=_en_moment(reception.recue_le),
            type_evenement="MATERIAU",
            titre=f"Matériau : {materiau.nom if materiau else 'inconnu'}",
            details={
                "Numéro de lot": reception.numero_lot,
                "Fournisseur": _na(await self._nom_fournisseur(reception.fournisseur_id)),
                "Quantité utilisée": f"{ligne.quantite:g} {ligne.unite}",
            },
        )
