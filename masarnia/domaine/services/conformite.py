from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.core.configuration import ParametresApplication
from masarnia.domaine.enums.types import (
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutActionCorrective,
    StatutControleNuisibles,
)
from masarnia.domaine.modeles.haccp import ActionCorrective


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolitiqueConformite:
    """Seuils et priorités de toutes les règles de conformité.

    Un seul objet, injecté dans les services d'écriture : les routes ne
    portent aucun seuil en dur.
    """

    seuil_audit_conforme: int = 80
    seuil_audit_critique: int = 50
    temperature_cuisson_defaut: float = 72.0
    temperatures_cuisson_par_produit: Mapping[UUID, float] = field(default_factory=dict)
    code_ccp_traitement_thermique: str | None = "CCP3"

    @classmethod
    def depuis_parametres(cls, parametres: ParametresApplication) -> PolitiqueConformite:
        return cls(
            seuil_audit_conforme=parametres.seuil_audit_conforme,
            seuil_audit_critique=parametres.seuil_audit_critique,
            temperature_cuisson_defaut=parametres.temperature_cuisson_defaut,
            code_ccp_traitement_thermique=parametres.code_ccp_traitement_thermique,
        )

    def temperature_cuisson_requise(self, *, produit_id: UUID, temperature_produit: float | None) -> float:
        """Surcharge de configuration, puis fiche produit, puis défaut (72°C)."""

        if produit_id in self.temperatures_cuisson_par_produit:
            return float(self.temperatures_cuisson_par_produit[produit_id])
        if temperature_produit is not None:
            return float(temperature_produit)
        return float(self.temperature_cuisson_defaut)


@dataclass(frozen=True)
class ConstatNonConformite:
    """Non-conformité détectée par une règle, avant d'être transformée en action."""

    origine: OrigineActionCorrective
    titre: str
    description: str
    priorite: PrioriteActionCorrective
    reference: str
    cause: str | None = None
    ccp_id: UUID | None = None
    utilisateur_id: UUID | None = None


@dataclass(frozen=True)
class ResultatControle:
    conforme: bool
    constat: ConstatNonConformite | None = None


class ObservateurConformite(Protocol):
    """Reçoit les non-conformités de tous les chemins d'écriture."""

    async def signaler(self, constat: ConstatNonConformite) -> None: ...


class ObservateurActionsCorrectives:
    """Observateur par défaut : ouvre une `ActionCorrective` dans la transaction courante."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def signaler(self, constat: ConstatNonConformite) -> None:
        action = ActionCorrective(
            titre=constat.titre,
            description=constat.description,
            cause=constat.cause,
            statut=StatutActionCorrective.OPEN,
            priorite=constat.priorite,
            origine=constat.origine,
            reference=constat.reference,
            ccp_id=constat.ccp_id,
            utilisateur_id=constat.utilisateur_id,
        )
        self._session.add(action)
        await self._session.flush()

        logger.info(
            "action_corrective_ouverte origine=%s reference=%s priorite=%s action_id=%s",
            constat.origine.value,
            constat.reference,
            constat.priorite.value,
            action.id,
        )


# ---------------------------------------------------------------------------
# Règles pures
# ---------------------------------------------------------------------------


def _fmt(valeur: float) -> str:
    return f"{float(valeur):g}"


def temperature_dans_plage(temperature: float, minimum: float, maximum: float) -> bool:
    """Bornes incluses."""

    return float(minimum) <= float(temperature) <= float(maximum)


def normaliser_resultats_audit(resultats: Any) -> list[dict[str, Any]]:
    """Ramène les résultats d'audit à une liste de {"point", "conforme", "notes"}.

    Formes acceptées :
    - liste d'objets {"point"/"item", "conforme"/"passed", "notes"}
    - dictionnaire {libellé: bool}
    """

    if not resultats:
        return []

    if isinstance(resultats, Mapping):
        return [{"point": str(cle), "conforme": bool(valeur), "notes": None} for cle, valeur in resultats.items()]

    normalises: list[dict[str, Any]] = []
    for ligne in resultats:
        if isinstance(ligne, Mapping):
            point = ligne.get("point", ligne.get("item"))
            conforme = ligne.get("conforme", ligne.get("passed", False))
            notes = ligne.get("notes")
        else:
            point = getattr(ligne, "point", None)
            conforme = getattr(ligne, "conforme", False)
            notes = getattr(ligne, "notes", None)
        normalises.append({"point": point, "conforme": bool(conforme), "notes": notes})
    return normalises


def calculer_score_audit(resultats: Any) -> int:
    """Pourcentage de points conformes, arrondi à l'entier (demi vers le haut).

    Aucun résultat : 0.
    """

    lignes = normaliser_resultats_audit(resultats)
    total = len(lignes)
    if total == 0:
        return 0

    conformes = sum(1 for ligne in lignes if ligne["conforme"])
    # floor(100 * c / n + 1/2) en arithmétique entière
    return (200 * conformes + total) // (2 * total)


def priorite_audit(score: float, politique: PolitiqueConformite) -> PrioriteActionCorrective | None:
    if score >= politique.seuil_audit_conforme:
        return None
    if score < politique.seuil_audit_critique:
        return PrioriteActionCorrective.CRITICAL
    return PrioriteActionCorrective.HIGH


def priorite_controle_nuisibles(statut: StatutControleNuisibles) -> PrioriteActionCorrective | None:
    if statut == StatutControleNuisibles.REQUIRES_SERVICE:
        return PrioriteActionCorrective.CRITICAL
    if statut == StatutControleNuisibles.ACTIVITY_DETECTED:
        return PrioriteActionCorrective.HIGH
    return None


class EvaluateurConformite:
    """Applique les règles HACCP et décrit la non-conformité éventuelle.

    N'écrit rien : les services transmettent le constat à un `ObservateurConformite`.
    """

    def __init__(self, politique: PolitiqueConformite | None = None) -> None:
        self.politique = politique or PolitiqueConformite()

    def releve_temperature(
        self,
        *,
        point_id: UUID,
        nom_point: str,
        temperature: float,
        minimum: float,
        maximum: float,
        utilisateur_id: UUID | None = None,
    ) -> ResultatControle:
        if temperature_dans_plage(temperature, minimum, maximum):
            return ResultatControle(conforme=True)

        return ResultatControle(
            conforme=False,
            constat=ConstatNonConformite(
                origine=OrigineActionCorrective.TEMPERATURE,
                titre=f"Dépassement de température : {nom_point}",
                description=(
                    f"Température {_fmt(temperature)}°C relevée au point {nom_point}, "
                    f"hors plage autorisée ({_fmt(minimum)}°C à {_fmt(maximum)}°C)."
                ),
                priorite=PrioriteActionCorrective.HIGH,
                reference=str(point_id),
                utilisateur_id=utilisateur_id,
            ),
        )

    def reception(
        self,
        *,
        reception_id: UUID,
        nom_matiere: str,
        numero_lot: str,
        conforme: bool,
        notes: str | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ResultatControle:
        if conforme:
            return ResultatControle(conforme=True)

        return ResultatControle(
            conforme=False,
            constat=ConstatNonConformite(
                origine=OrigineActionCorrective.RECEPTION,
                titre=f"Réception non conforme : {nom_matiere}",
                description=f"Lot {numero_lot} : {notes or 'non-conformité constatée à la réception.'}",
                priorite=PrioriteActionCorrective.HIGH,
                reference=str(reception_id),
                utilisateur_id=utilisateur_id,
            ),
        )

    def audit(
        self,
        *,
        enregistrement_id: UUID,
        nom_checklist: str,
        score: int,
        utilisateur_id: UUID | None = None,
    ) -> ResultatControle:
        priorite = priorite_audit(score, self.politique)
        if priorite is None:
            return ResultatControle(conforme=True)

        return ResultatControle(
            conforme=False,
            constat=ConstatNonConformite(
                origine=OrigineActionCorrective.AUDIT,
                titre=f"Audit insuffisant : {nom_checklist}",
                description=(
                    f"Score de l'audit {score}% inférieur au seuil de {self.politique.seuil_audit_conforme}%."
                ),
                priorite=priorite,
                reference=str(enregistrement_id),
                utilisateur_id=utilisateur_id,
            ),
        )

    def controle_nuisibles(
        self,
        *,
        point_id: UUID,
        nom_point: str,
        statut: StatutControleNuisibles,
        constatations: str | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ResultatControle:
        priorite = priorite_controle_nuisibles(statut)
        if priorite is None:
            return ResultatControle(conforme=True)

        if statut == StatutControleNuisibles.REQUIRES_SERVICE:
            titre = f"Intervention du prestataire requise : {nom_point}"
        else:
            titre = f"Activité de nuisibles détectée : {nom_point}"

        return ResultatControle(
            conforme=False,
            constat=ConstatNonConformite(
                origine=OrigineActionCorrective.PEST_CONTROL,
                titre=titre,
                description=constatations or f"Statut {statut.value} relevé au point {nom_point}.",
                priorite=priorite,
                reference=str(point_id),
                utilisateur_id=utilisateur_id,
            ),
        )

    def cuisson(
        self,
        *,
        lot_id: UUID,
        numero_lot: str,
        nom_produit: str,
        temperature_finale: float,
        temperature_requise: float,
        ccp_id: UUID | None = None,
        utilisateur_id: UUID | None = None,
    ) -> ResultatControle:
        if float(temperature_finale) >= float(temperature_requise):
            return ResultatControle(conforme=True)

        return ResultatControle(
            conforme=False,
            constat=ConstatNonConformite(
                origine=OrigineActionCorrective.PRODUCTION,
                titre=f"Traitement thermique insuffisant : lot {numero_lot}",
                description=(
                    f"Température à cœur {_fmt(temperature_finale)}°C pour {nom_produit}, "
                    f"{_fmt(temperature_requise)}°C exigés."
                ),
                priorite=PrioriteActionCorrective.HIGH,
                reference=str(lot_id),
                cause="Traitement thermique insuffisant",
                ccp_id=ccp_id,
                utilisateur_id=utilisateur_id,
            ),
        )
