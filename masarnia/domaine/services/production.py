from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from masarnia.domaine.enums.types import StatutLotProduction, TypeSourceMatiere
from masarnia.domaine.modeles.haccp import CCP
from masarnia.domaine.modeles.production import LigneMatiereLot, LotProduction
from masarnia.domaine.modeles.receptions import ReceptionMateriau, ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Materiau, MatierePremiere, Produit
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    ObservateurActionsCorrectives,
    ObservateurConformite,
    PolitiqueConformite,
)


class ErreurProduction(Exception):
    """Erreur générique de production."""


class DonneesInvalidesProduction(ErreurProduction):
    """Lot invalide (produit inconnu, quantité, température manquante…)."""


class LotProductionIntrouvable(ErreurProduction):
    """Lot de production introuvable."""


class TransitionStatutInterditeProduction(ErreurProduction):
    """Transition de statut invalide (ex: libérer un lot encore en cours)."""


@dataclass(frozen=True)
class LigneMatiereDemandee:
    """Matière consommée, exactement une référence renseignée selon `type_source`."""

    type_source: TypeSourceMatiere
    quantite: float
    unite: str = "kg"
    matiere_premiere_id: UUID | None = None
    reception_id: UUID | None = None
    lot_salaison_id: UUID | None = None
    materiau_id: UUID | None = None
    reception_materiau_id: UUID | None = None


def numero_lot_production(date_production: date, nb_lots_existants: int) -> str:
    """YYYYMMDD pour le premier lot du produit ce jour-là, YYYYMMDD-{n+1} ensuite."""

    base = date_production.strftime("%Y%m%d")
    if nb_lots_existants == 0:
        return base
    return f"{base}-{nb_lots_existants + 1}"


class ServiceProduction:
    """Lots de production : création, cuisson (CCP traitement thermique), libération.

    Cycle de vie : IN_PROGRESS -> COMPLETED -> RELEASED | BLOCKED.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        politique: PolitiqueConformite | None = None,
        observateur: ObservateurConformite | None = None,
    ) -> None:
        self._session = session
        self._evaluateur = EvaluateurConformite(politique)
        self._observateur = observateur or ObservateurActionsCorrectives(session)

    async def creer_lot(
        self,
        *,
        produit_id: UUID,
        quantite: float,
        date_production: date,
        unite: str = "kg",
        heure_debut: datetime | None = None,
        notes: str | None = None,
        operateur_id: UUID | None = None,
        lignes: list[LigneMatiereDemandee] | None = None,
    ) -> UUID:
        if quantite is None or float(quantite) <= 0:
            raise DonneesInvalidesProduction("La quantité doit être > 0.")
        for ligne in lignes or []:
            self._valider_ligne(ligne)

        async with self._session.begin():
            produit = await self._session.get(Produit, produit_id)
            if produit is None:
                raise DonneesInvalidesProduction("Produit inconnu.")

            for ligne in lignes or []:
                await self._verifier_references(ligne)

            numero = await self._generer_numero_lot(produit_id=produit.id, date_production=date_production)

            lot = LotProduction(
                numero_lot=numero,
                produit_id=produit.id,
                quantite=float(quantite),
                unite=unite,
                date_production=date_production,
                date_peremption=date_production + timedelta(days=int(produit.duree_conservation_jours)),
                heure_debut=heure_debut or datetime.now(timezone.utc),
                statut=StatutLotProduction.IN_PROGRESS,
                notes=notes,
                operateur_id=operateur_id,
            )
            self._session.add(lot)
            await self._session.flush()

            for ligne in lignes or []:
                self._session.add(
                    LigneMatiereLot(
                        lot_production_id=lot.id,
                        type_source=ligne.type_source,
                        matiere_premiere_id=ligne.matiere_premiere_id,
                        reception_id=ligne.reception_id,
                        lot_salaison_id=ligne.lot_salaison_id,
                        materiau_id=ligne.materiau_id,
                        reception_materiau_id=ligne.reception_materiau_id,
                        quantite=float(ligne.quantite),
                        unite=ligne.unite,
                    )
                )
            await self._session.flush()
            return lot.id

    async def terminer_lot(
        self,
        *,
        lot_id: UUID,
        temperature_finale: float | None,
        heure_fin: datetime | None = None,
        notes: str | None = None,
        utilisateur_id: UUID | None = None,
    ) -> LotProduction:
        """Clôt la cuisson : conformité thermique figée + action corrective si insuffisante."""

        if temperature_finale is None:
            raise DonneesInvalidesProduction("La température finale est obligatoire pour terminer un lot.")

        async with self._session.begin():
            lot = await self._charger_lot(lot_id)
            if lot.statut != StatutLotProduction.IN_PROGRESS:
                raise TransitionStatutInterditeProduction("Seul un lot en cours peut être terminé.")

            produit = await self._session.get(Produit, lot.produit_id)
            politique = self._evaluateur.politique
            temperature_requise = politique.temperature_cuisson_requise(
                produit_id=lot.produit_id,
                temperature_produit=produit.temperature_requise if produit is not None else None,
            )

            ccp_id = None
            if float(temperature_finale) < temperature_requise:
                ccp_id = await self._ccp_traitement_thermique(politique.code_ccp_traitement_thermique)

            resultat = self._evaluateur.cuisson(
                lot_id=lot.id,
                numero_lot=lot.numero_lot,
                nom_produit=produit.nom if produit is not None else "(produit inconnu)",
                temperature_finale=float(temperature_finale),
                temperature_requise=temperature_requise,
                ccp_id=ccp_id,
                utilisateur_id=utilisateur_id,
            )

            lot.temperature_finale = float(temperature_finale)
            lot.temperature_conforme = resultat.conforme
            lot.heure_fin = heure_fin or datetime.now(timezone.utc)
            lot.statut = StatutLotProduction.COMPLETED
            if notes is not None:
                lot.notes = notes
            await self._session.flush()

            if resultat.constat is not None:
                await self._observateur.signaler(resultat.constat)

            return lot

    async def liberer_lot(self, *, lot_id: UUID) -> LotProduction:
        return await self._changer_statut_apres_cuisson(lot_id, StatutLotProduction.RELEASED)

    async def bloquer_lot(self, *, lot_id: UUID, notes: str | None = None) -> LotProduction:
        return await self._changer_statut_apres_cuisson(lot_id, StatutLotProduction.BLOCKED, notes=notes)

    async def charger_lot_complet(self, lot_id: UUID) -> LotProduction:
        """Lot + lignes matière (chargement explicite, pas de lazy-load en async)."""

        res = await self._session.execute(
            select(LotProduction)
            .options(selectinload(LotProduction.lignes_matiere))
            .where(LotProduction.id == lot_id)
            .execution_options(populate_existing=True)
        )
        lot = res.scalar_one_or_none()
        if lot is None:
            raise LotProductionIntrouvable("Lot de production introuvable.")
        return lot

    async def _changer_statut_apres_cuisson(
        self,
        lot_id: UUID,
        statut: StatutLotProduction,
        *,
        notes: str | None = None,
    ) -> LotProduction:
        async with self._session.begin():
            lot = await self._charger_lot(lot_id)
            if lot.statut != StatutLotProduction.COMPLETED:
                raise TransitionStatutInterditeProduction(
                    f"Le lot doit être COMPLETED pour passer en {statut.value}."
                )
            lot.statut = statut
            if notes is not None:
                lot.notes = notes
            await self._session.flush()
            return lot

    async def _charger_lot(self, lot_id: UUID) -> LotProduction:
        lot = await self._session.get(LotProduction, lot_id)
        if lot is None:
            raise LotProductionIntrouvable("Lot de production introuvable.")
        return lot

    async def _ccp_traitement_thermique(self, code: str | None) -> UUID | None:
        if not code:
            return None
        res = await self._session.execute(select(CCP.id).where(CCP.code == code))
        return res.scalar_one_or_none()

    async def _generer_numero_lot(self, *, produit_id: UUID, date_production: date) -> str:
        res = await self._session.execute(
            select(func.count(LotProduction.id))
            .where(LotProduction.produit_id == produit_id)
            .where(LotProduction.date_production == date_production)
        )
        nb_existants = int(res.scalar_one())
        numero = numero_lot_production(date_production, nb_existants)

        # Un lot supprimé peut laisser un trou : on avance jusqu'au premier numéro libre.
        while await self._numero_existe(produit_id, numero):
            nb_existants += 1
            numero = numero_lot_production(date_production, nb_existants)
        return numero

    async def _numero_existe(self, produit_id: UUID, numero: str) -> bool:
        res = await self._session.execute(
            select(LotProduction.id)
            .where(LotProduction.produit_id == produit_id)
            .where(LotProduction.numero_lot == numero)
        )
        return res.scalar_one_or_none() is not None

    @staticmethod
    def _valider_ligne(ligne: LigneMatiereDemandee) -> None:
        if float(ligne.quantite) <= 0:
            raise DonneesInvalidesProduction("La quantité d'une ligne matière doit être > 0.")

        references = {
            TypeSourceMatiere.RAW_MATERIAL: ligne.matiere_premiere_id,
            TypeSourceMatiere.CURING_BATCH: ligne.lot_salaison_id,
            TypeSourceMatiere.MATERIAL: ligne.materiau_id,
        }
        if references[ligne.type_source] is None:
            raise DonneesInvalidesProduction(f"Référence manquante pour une ligne {ligne.type_source.value}.")
        autres = [v for k, v in references.items() if k != ligne.type_source and v is not None]
        if autres:
            raise DonneesInvalidesProduction("Une ligne matière ne référence qu'une seule source.")

    async def _verifier_references(self, ligne: LigneMatiereDemandee) -> None:
        verifications = [
            (MatierePremiere, ligne.matiere_premiere_id, "Matière première inconnue."),
            (ReceptionMatierePremiere, ligne.reception_id, "Réception inconnue."),
            (LotSalaison, ligne.lot_salaison_id, "Lot de salaison inconnu."),
            (Materiau, ligne.materiau_id, "Matériau inconnu."),
            (ReceptionMateriau, ligne.reception_materiau_id, "Réception de matériau inconnue."),
        ]
        for modele, identifiant, message in verifications:
            if identifiant is not None and await self._session.get(modele, identifiant) is None:
                raise DonneesInvalidesProduction(message)
