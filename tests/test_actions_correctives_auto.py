from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from masarnia.domaine.enums.types import (
    CategorieMatierePremiere,
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutActionCorrective,
    StatutControleNuisibles,
    TypePointNuisibles,
    TypePointTemperature,
)
from masarnia.domaine.modeles.audits import ChecklistAudit
from masarnia.domaine.modeles.haccp import ActionCorrective
from masarnia.domaine.modeles.hygiene import PointNuisibles, PointTemperature, ReleveTemperature
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, MatierePremiere
from masarnia.domaine.services.audits import DonneesInvalidesAudit, ServiceAudits
from masarnia.domaine.services.conformite import ConstatNonConformite
from masarnia.domaine.services.nuisibles import ServiceNuisibles
from masarnia.domaine.services.receptions import DonneesInvalidesReception, ServiceReceptions
from masarnia.domaine.services.temperatures import PointTemperatureIntrouvable, ServiceTemperatures


async def _actions(session: AsyncSession) -> list[ActionCorrective]:
    res = await session.execute(select(ActionCorrective).order_by(ActionCorrective.cree_le.asc()))
    return list(res.scalars().all())


async def _point_temperature(session: AsyncSession) -> PointTemperature:
    point = PointTemperature(
        nom="Chłodnia nr 1",
        type_point=TypePointTemperature.COOLER,
        temperature_min=0.0,
        temperature_max=4.0,
        actif=True,
    )
    session.add(point)
    await session.commit()
    return point


def _resultats(conformes: int, total: int) -> list[dict]:
    return [{"point": f"Point {i + 1}", "conforme": i < conformes} for i in range(total)]


# ===== Températures =====


@pytest.mark.asyncio
async def test_releve_hors_plage_ouvre_une_action_high(session_test: AsyncSession) -> None:
    point = await _point_temperature(session_test)

    releve = await ServiceTemperatures(session_test).enregistrer_releve(point_temperature_id=point.id, temperature=5.0)

    assert releve.conforme is False
    actions = await _actions(session_test)
    assert len(actions) == 1
    action = actions[0]
    assert action.priorite == PrioriteActionCorrective.HIGH
    assert action.origine == OrigineActionCorrective.TEMPERATURE
    assert action.statut == StatutActionCorrective.OPEN
    assert action.reference == str(point.id)
    assert "5" in action.description


@pytest.mark.asyncio
async def test_releve_conforme_sans_action(session_test: AsyncSession) -> None:
    point = await _point_temperature(session_test)
    service = ServiceTemperatures(session_test)

    await service.enregistrer_releve(point_temperature_id=point.id, temperature=4.0)
    await service.enregistrer_releve(point_temperature_id=point.id, temperature=0.0)

    res = await session_test.execute(select(ReleveTemperature.conforme))
    assert [c for (c,) in res.all()] == [True, True]
    assert await _actions(session_test) == []


@pytest.mark.asyncio
async def test_releve_point_inconnu(session_test: AsyncSession) -> None:
    from uuid import uuid4

    with pytest.raises(PointTemperatureIntrouvable):
        await ServiceTemperatures(session_test).enregistrer_releve(point_temperature_id=uuid4(), temperature=3.0)


@pytest.mark.asyncio
async def test_observateur_injecte_recoit_le_constat(session_test: AsyncSession) -> None:
    point = await _point_temperature(session_test)
    recus: list[ConstatNonConformite] = []

    class _Collecteur:
        async def signaler(self, constat: ConstatNonConformite) -> None:
            recus.append(constat)

    await ServiceTemperatures(session_test, observateur=_Collecteur()).enregistrer_releve(
        point_temperature_id=point.id, temperature=-3.0
    )

    assert len(recus) == 1
    assert recus[0].origine == OrigineActionCorrective.TEMPERATURE
    # L'observateur remplace l'écriture par défaut
    assert await _actions(session_test) == []


@pytest.mark.asyncio
async def test_tendances_par_jour(session_test: AsyncSession) -> None:
    point = await _point_temperature(session_test)
    service = ServiceTemperatures(session_test)
    maintenant = datetime.now(timezone.utc)

    for valeur in (2.0, 3.0, 6.0):
        await service.enregistrer_releve(point_temperature_id=point.id, temperature=valeur, releve_le=maintenant)

    tendances = await service.tendances(jours=7)

    assert len(tendances) == 1
    assert tendances[0].moyenne == pytest.approx(3.67, abs=0.01)
    assert tendances[0].minimum == 2.0
    assert tendances[0].maximum == 6.0
    assert tendances[0].nb_releves == 3
    assert tendances[0].nb_non_conformes == 1


# ===== Audits =====


@pytest.mark.asyncio
async def test_audit_sous_le_seuil(session_test: AsyncSession) -> None:
    checklist = ChecklistAudit(nom="Hygiène du personnel", points=[f"Point {i + 1}" for i in range(10)])
    session_test.add(checklist)
    await session_test.commit()

    # Le score saisi est ignoré : les résultats font foi.
    enregistrement = await ServiceAudits(session_test).enregistrer_audit(
        checklist_id=checklist.id, auditeur="Jan Kowalski", resultats=_resultats(7, 10), score_fourni=95
    )

    assert enregistrement.score == 70
    actions = await _actions(session_test)
    assert len(actions) == 1
    assert actions[0].priorite == PrioriteActionCorrective.HIGH
    assert actions[0].origine == OrigineActionCorrective.AUDIT
    assert actions[0].reference == str(enregistrement.id)


@pytest.mark.asyncio
async def test_audit_critique_et_audit_vide(session_test: AsyncSession) -> None:
    checklist = ChecklistAudit(nom="Zone de découpe", points=[])
    session_test.add(checklist)
    await session_test.commit()
    service = ServiceAudits(session_test)

    mauvais = await service.enregistrer_audit(checklist_id=checklist.id, auditeur="Anna", resultats=_resultats(4, 10))
    vide = await service.enregistrer_audit(checklist_id=checklist.id, auditeur="Anna", resultats=[])

    assert mauvais.score == 40
    assert vide.score == 0
    actions = await _actions(session_test)
    assert [a.priorite for a in actions] == [PrioriteActionCorrective.CRITICAL, PrioriteActionCorrective.CRITICAL]


@pytest.mark.asyncio
async def test_audit_conforme_puis_modifie_sans_nouvelle_action(session_test: AsyncSession) -> None:
    checklist = ChecklistAudit(nom="Chambres froides", points=[])
    session_test.add(checklist)
    await session_test.commit()
    service = ServiceAudits(session_test)

    enregistrement = await service.enregistrer_audit(
        checklist_id=checklist.id, auditeur="Piotr", resultats=_resultats(10, 10)
    )
    assert enregistrement.score == 100

    modifie = await service.modifier_audit(enregistrement_id=enregistrement.id, resultats=_resultats(2, 10))

    assert modifie.score == 20
    assert await _actions(session_test) == []


@pytest.mark.asyncio
async def test_audit_sans_auditeur_refuse(session_test: AsyncSession) -> None:
    checklist = ChecklistAudit(nom="Réception", points=[])
    session_test.add(checklist)
    await session_test.commit()

    with pytest.raises(DonneesInvalidesAudit):
        await ServiceAudits(session_test).enregistrer_audit(checklist_id=checklist.id, auditeur="  ")


# ===== Nuisibles =====


@pytest.mark.asyncio
async def test_controles_nuisibles(session_test: AsyncSession) -> None:
    point = PointNuisibles(nom="Stacja deratyzacyjna 1", type_point=TypePointNuisibles.BAIT_STATION, actif=True)
    session_test.add(point)
    await session_test.commit()
    service = ServiceNuisibles(session_test)

    await service.enregistrer_controle(point_nuisibles_id=point.id, statut=StatutControleNuisibles.OK)
    await service.enregistrer_controle(point_nuisibles_id=point.id, statut=StatutControleNuisibles.DAMAGED)
    await service.enregistrer_controle(
        point_nuisibles_id=point.id,
        statut=StatutControleNuisibles.ACTIVITY_DETECTED,
        constatations="Ślady gryzoni",
    )
    await service.enregistrer_controle(point_nuisibles_id=point.id, statut=StatutControleNuisibles.REQUIRES_SERVICE)

    actions = await _actions(session_test)
    assert [a.priorite for a in actions] == [PrioriteActionCorrective.HIGH, PrioriteActionCorrective.CRITICAL]
    assert all(a.origine == OrigineActionCorrective.PEST_CONTROL for a in actions)
    assert actions[0].description == "Ślady gryzoni"


# ===== Réceptions =====


async def _referentiel_reception(session: AsyncSession) -> tuple[Fournisseur, MatierePremiere]:
    fournisseur = Fournisseur(nom="Zakłady Mięsne Sp. z o.o.", agree=True)
    matiere = MatierePremiere(nom="Łopatka wieprzowa", categorie=CategorieMatierePremiere.MEAT)
    session.add_all([fournisseur, matiere])
    await session.commit()
    return fournisseur, matiere


@pytest.mark.asyncio
async def test_reception_non_conforme_ouvre_une_action(session_test: AsyncSession) -> None:
    fournisseur, matiere = await _referentiel_reception(session_test)
    service = ServiceReceptions(session_test)

    await service.receptionner_matiere_premiere(
        matiere_premiere_id=matiere.id, fournisseur_id=fournisseur.id, numero_lot="L-001", quantite=120.0
    )
    refusee = await service.receptionner_matiere_premiere(
        matiere_premiere_id=matiere.id,
        fournisseur_id=fournisseur.id,
        numero_lot="L-002",
        quantite=80.0,
        temperature=9.5,
        conforme=False,
        notes="Température du lot trop élevée",
    )

    actions = await _actions(session_test)
    assert len(actions) == 1
    assert actions[0].origine == OrigineActionCorrective.RECEPTION
    assert actions[0].priorite == PrioriteActionCorrective.HIGH
    assert actions[0].reference == str(refusee.id)
    assert "L-002" in actions[0].description


@pytest.mark.asyncio
async def test_reception_quantite_invalide(session_test: AsyncSession) -> None:
    fournisseur, matiere = await _referentiel_reception(session_test)

    with pytest.raises(DonneesInvalidesReception):
        await ServiceReceptions(session_test).receptionner_matiere_premiere(
            matiere_premiere_id=matiere.id, fournisseur_id=fournisseur.id, numero_lot="L-003", quantite=0
        )


@pytest.mark.asyncio
async def test_reception_materiau_incremente_le_stock(session_test: AsyncSession) -> None:
    materiau = Materiau(nom="Sól peklowa", categorie="ADDITIVES", stock_actuel=1.5)
    session_test.add(materiau)
    await session_test.commit()

    await ServiceReceptions(session_test).receptionner_materiau(materiau_id=materiau.id, numero_lot="S-1", quantite=25.0)

    res = await session_test.execute(select(Materiau.stock_actuel).where(Materiau.id == materiau.id))
    assert res.scalar_one() == pytest.approx(26.5)
    res = await session_test.execute(select(func.count(ActionCorrective.id)))
    assert res.scalar_one() == 0
