from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.api.dependances import fournir_politique_conformite, fournir_session
from masarnia.api.dependances_auth import fournir_utilisateur_courant, verifier_authentifie, verifier_roles_requis
from masarnia.api.modifications import appliquer_modifications
from masarnia.api.schemas.audits import (
    ChecklistAuditCreate,
    ChecklistAuditOut,
    ChecklistAuditUpdate,
    EnregistrementAuditOut,
    EnregistrementAuditUpdate,
    RequeteEnregistrementAudit,
)
from masarnia.domaine.enums.types import RoleUtilisateur
from masarnia.domaine.modeles.audits import ChecklistAudit, EnregistrementAudit
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.services.audits import (
    DonneesInvalidesAudit,
    EnregistrementAuditIntrouvable,
    ServiceAudits,
)
from masarnia.domaine.services.conformite import PolitiqueConformite


routeur_audits = APIRouter(
    prefix="/audits",
    tags=["audits"],
    dependencies=[Depends(verifier_authentifie)],
)

_responsable = Depends(verifier_roles_requis(RoleUtilisateur.ADMIN, RoleUtilisateur.MANAGER))


async def _charger_checklist(session: AsyncSession, checklist_id: UUID) -> ChecklistAudit:
    checklist = await session.get(ChecklistAudit, checklist_id)
    if checklist is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Checklist introuvable.")
    return checklist


# ===== Checklists =====


@routeur_audits.get("/checklists", response_model=list[ChecklistAuditOut])
async def lister_checklists(
    session: AsyncSession = Depends(fournir_session),
    actif: bool | None = Query(default=None),
) -> list[ChecklistAudit]:
    stmt = select(ChecklistAudit).order_by(ChecklistAudit.nom.asc())
    if actif is not None:
        stmt = stmt.where(ChecklistAudit.actif.is_(actif))
    return list((await session.execute(stmt)).scalars().all())


@routeur_audits.post(
    "/checklists", response_model=ChecklistAuditOut, status_code=status.HTTP_201_CREATED, dependencies=[_responsable]
)
async def creer_checklist(requete: ChecklistAuditCreate, session: AsyncSession = Depends(fournir_session)) -> ChecklistAudit:
    checklist = ChecklistAudit(**requete.model_dump())
    session.add(checklist)
    await session.commit()
    return checklist


@routeur_audits.patch("/checklists/{checklist_id}", response_model=ChecklistAuditOut, dependencies=[_responsable])
async def maj_checklist(
    checklist_id: UUID,
    requete: ChecklistAuditUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> ChecklistAudit:
    checklist = await _charger_checklist(session, checklist_id)
    appliquer_modifications(checklist, requete.model_dump(exclude_unset=True))
    await session.commit()
    return checklist


@routeur_audits.delete("/checklists/{checklist_id}", dependencies=[_responsable])
async def supprimer_checklist(checklist_id: UUID, session: AsyncSession = Depends(fournir_session)) -> dict[str, str]:
    checklist = await _charger_checklist(session, checklist_id)
    await session.delete(checklist)
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Checklist déjà utilisée : désactivez-la plutôt que de la supprimer.",
        ) from e
    return {"statut": "ok"}


# ===== Audits réalisés =====


@routeur_audits.get("/records", response_model=list[EnregistrementAuditOut])
async def lister_audits(
    session: AsyncSession = Depends(fournir_session),
    checklist_id: UUID | None = Query(default=None),
    limit: int = Query(100, ge=1, le=1000),
) -> list[EnregistrementAudit]:
    stmt = select(EnregistrementAudit).order_by(EnregistrementAudit.date_audit.desc()).limit(limit)
    if checklist_id is not None:
        stmt = stmt.where(EnregistrementAudit.checklist_id == checklist_id)
    return list((await session.execute(stmt)).scalars().all())


@routeur_audits.get("/records/{enregistrement_id}", response_model=EnregistrementAuditOut)
async def lire_audit(enregistrement_id: UUID, session: AsyncSession = Depends(fournir_session)) -> EnregistrementAudit:
    enregistrement = await session.get(EnregistrementAudit, enregistrement_id)
    if enregistrement is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Enregistrement d'audit introuvable.")
    return enregistrement


@routeur_audits.post("/records", response_model=EnregistrementAuditOut, status_code=status.HTTP_201_CREATED)
async def creer_audit(
    requete: RequeteEnregistrementAudit,
    utilisateur: Utilisateur = Depends(fournir_utilisateur_courant),
    politique: PolitiqueConformite = Depends(fournir_politique_conformite),
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementAudit:
    service = ServiceAudits(session, politique=politique)

    try:
        return await service.enregistrer_audit(
            checklist_id=requete.checklist_id,
            auditeur=requete.auditeur,
            resultats=requete.resultats,
            score_fourni=requete.score,
            constatations=requete.constatations,
            recommandations=requete.recommandations,
            date_audit=requete.date_audit,
            utilisateur_id=utilisateur.id,
        )
    except DonneesInvalidesAudit as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@routeur_audits.patch("/records/{enregistrement_id}", response_model=EnregistrementAuditOut)
async def maj_audit(
    enregistrement_id: UUID,
    requete: EnregistrementAuditUpdate,
    session: AsyncSession = Depends(fournir_session),
) -> EnregistrementAudit:
    service = ServiceAudits(session)

    try:
        return await service.modifier_audit(
            enregistrement_id=enregistrement_id,
            auditeur=requete.auditeur,
            resultats=requete.resultats,
            score_fourni=requete.score,
            constatations=requete.constatations,
            recommandations=requete.recommandations,
            date_audit=requete.date_audit,
        )
    except EnregistrementAuditIntrouvable as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except DonneesInvalidesAudit as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
