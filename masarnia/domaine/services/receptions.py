from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.modeles.receptions import ReceptionMateriau, ReceptionMatierePremiere
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, MatierePremiere
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    ObservateurActionsCorrectives,
    ObservateurConformite,
    PolitiqueConformite,
)


class ErreurReception(Exception):
    """Erreur générique de réception."""


class DonneesInvalidesReception(ErreurReception):
    """Réception impossible (référence inconnue, quantité…)."""


class ServiceReceptions:
    """Réceptions de matières premières et de matériaux."""

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

    async def receptionner_matiere_premiere(
        self,
        *,
        matiere_premiere_id: UUID,
        fournisseur_id: UUID,
        numero_lot: str,
        quantite: float,
        unite: str = "kg",
        date_peremption: date | None = None,
        temperature: float | None = None,
        conforme: bool = True,
        vehicule_propre: bool | None = None,
        temperature_vehicule: float | None = None,
        emballage_intact: bool | None = None,
        documents_complets: bool | None = None,
        numero_document: str | None = None,
        notes: str | None = None,
        recue_le: datetime | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ReceptionMatierePremiere:
        if quantite is None or float(quantite) <= 0:
            raise DonneesInvalidesReception("La quantité doit être > 0.")
        if not numero_lot or not numero_lot.strip():
            raise DonneesInvalidesReception("Le numéro de lot est obligatoire.")
        if recue_le is None:
            recue_le = datetime.now(timezone.utc)

        async with self._session.begin():
            matiere = await self._session.get(MatierePremiere, matiere_premiere_id)
            if matiere is None:
                raise DonneesInvalidesReception("Matière première inconnue.")
            if await self._session.get(Fournisseur, fournisseur_id) is None:
                raise DonneesInvalidesReception("Fournisseur inconnu.")

            reception = ReceptionMatierePremiere(
                matiere_premiere_id=matiere.id,
                fournisseur_id=fournisseur_id,
                numero_lot=numero_lot.strip(),
                quantite=float(quantite),
                unite=unite,
                date_peremption=date_peremption,
                temperature=temperature,
                conforme=bool(conforme),
                vehicule_propre=vehicule_propre,
                temperature_vehicule=temperature_vehicule,
                emballage_intact=emballage_intact,
                documents_complets=documents_complets,
                numero_document=numero_document,
                notes=notes,
                recue_le=recue_le,
                utilisateur_id=utilisateur_id,
            )
            self._session.add(reception)
            await self._session.flush()

            resultat = self._evaluateur.reception(
                reception_id=reception.id,
                nom_matiere=matiere.nom,
                numero_lot=reception.numero_lot,
                conforme=reception.conforme,
                notes=notes,
                utilisateur_id=utilisateur_id,
            )
            if resultat.constat is not None:
                await self._observateur.signaler(resultat.constat)

            return reception

    async def receptionner_materiau(
        self,
        *,
        materiau_id: UUID,
        numero_lot: str,
        quantite: float,
        unite: str = "kg",
        fournisseur_id: UUID | None = None,
        date_peremption: date | None = None,
        prix_unitaire: float | None = None,
        numero_document: str | None = None,
        notes: str | None = None,
        recue_le: datetime | None = None,
    ) -> ReceptionMateriau:
        """Crée la réception et incrémente le stock du matériau (même transaction)."""

        if quantite is None or float(quantite) <= 0:
            raise DonneesInvalidesReception("La quantité doit être > 0.")
        if recue_le is None:
            recue_le = datetime.now(timezone.utc)

        async with self._session.begin():
            if await self._session.get(Materiau, materiau_id) is None:
                raise DonneesInvalidesReception("Matériau inconnu.")
            if fournisseur_id is not None and await self._session.get(Fournisseur, fournisseur_id) is None:
                raise DonneesInvalidesReception("Fournisseur inconnu.")

            reception = ReceptionMateriau(
                materiau_id=materiau_id,
                fournisseur_id=fournisseur_id,
                numero_lot=numero_lot,
                quantite=float(quantite),
                unite=unite,
                date_peremption=date_peremption,
                prix_unitaire=prix_unitaire,
                numero_document=numero_document,
                notes=notes,
                recue_le=recue_le,
            )
            self._session.add(reception)

            await self._session.execute(
                update(Materiau)
                .where(Materiau.id == materiau_id)
                .values(stock_actuel=Materiau.stock_actuel + float(quantite))
            )
            await self._session.flush()
            return reception
