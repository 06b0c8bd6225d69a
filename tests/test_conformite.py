from __future__ import annotations

from datetime import date
from uuid import uuid4

import pytest

from masarnia.api.endpoints.laboratoire import taux_conformite
from masarnia.api.endpoints.plan_haccp import significativite
from masarnia.domaine.enums.types import (
    NiveauRisque,
    OrigineActionCorrective,
    PrioriteActionCorrective,
    StatutControleNuisibles,
)
from masarnia.domaine.services.conformite import (
    EvaluateurConformite,
    PolitiqueConformite,
    calculer_score_audit,
    normaliser_resultats_audit,
    priorite_audit,
    priorite_controle_nuisibles,
    temperature_dans_plage,
)
from masarnia.domaine.services.production import numero_lot_production
from masarnia.domaine.services.rapports_pdf import pourcentage
from masarnia.domaine.services.salaison import numero_lot_salaison_base


@pytest.mark.parametrize(
    ("temperature", "attendu"),
    [(0.0, True), (4.0, True), (2.5, True), (4.1, False), (-0.5, False), (5.0, False)],
)
def test_temperature_dans_plage_bornes_incluses(temperature: float, attendu: bool) -> None:
    assert temperature_dans_plage(temperature, 0.0, 4.0) is attendu


def test_releve_hors_plage_decrit_la_temperature() -> None:
    evaluateur = EvaluateurConformite()
    point_id = uuid4()

    resultat = evaluateur.releve_temperature(
        point_id=point_id, nom_point="Chłodnia nr 1", temperature=5.0, minimum=0.0, maximum=4.0
    )

    assert resultat.conforme is False
    assert resultat.constat is not None
    assert resultat.constat.priorite == PrioriteActionCorrective.HIGH
    assert resultat.constat.origine == OrigineActionCorrective.TEMPERATURE
    assert resultat.constat.reference == str(point_id)
    assert "5°C" in resultat.constat.description
    assert "0°C à 4°C" in resultat.constat.description


def test_releve_dans_la_plage_sans_constat() -> None:
    resultat = EvaluateurConformite().releve_temperature(
        point_id=uuid4(), nom_point="Chłodnia nr 1", temperature=3.0, minimum=0.0, maximum=4.0
    )
    assert resultat.conforme is True
    assert resultat.constat is None


@pytest.mark.parametrize(
    ("conformes", "total", "score"),
    [(7, 10, 70), (10, 10, 100), (0, 4, 0), (1, 3, 33), (2, 3, 67), (1, 8, 13)],
)
def test_score_audit_arrondi(conformes: int, total: int, score: int) -> None:
    resultats = [{"point": f"P{i}", "conforme": i < conformes} for i in range(total)]
    assert calculer_score_audit(resultats) == score


def test_score_audit_sans_resultat_vaut_zero() -> None:
    assert calculer_score_audit([]) == 0
    assert calculer_score_audit(None) == 0


def test_normalisation_accepte_dictionnaire_et_alias() -> None:
    assert normaliser_resultats_audit({"Sol propre": True, "Gants": False}) == [
        {"point": "Sol propre", "conforme": True, "notes": None},
        {"point": "Gants", "conforme": False, "notes": None},
    ]
    assert normaliser_resultats_audit([{"item": "Tenue", "passed": True, "notes": "ok"}]) == [
        {"point": "Tenue", "conforme": True, "notes": "ok"}
    ]


@pytest.mark.parametrize(
    ("score", "priorite"),
    [
        (100, None),
        (80, None),
        (79, PrioriteActionCorrective.HIGH),
        (70, PrioriteActionCorrective.HIGH),
        (50, PrioriteActionCorrective.HIGH),
        (49, PrioriteActionCorrective.CRITICAL),
        (0, PrioriteActionCorrective.CRITICAL),
    ],
)
def test_priorite_audit(score: int, priorite: PrioriteActionCorrective | None) -> None:
    assert priorite_audit(score, PolitiqueConformite()) == priorite


def test_seuils_audit_configurables() -> None:
    politique = PolitiqueConformite(seuil_audit_conforme=90, seuil_audit_critique=60)
    assert priorite_audit(85, politique) == PrioriteActionCorrective.HIGH
    assert priorite_audit(55, politique) == PrioriteActionCorrective.CRITICAL


@pytest.mark.parametrize(
    ("statut", "priorite"),
    [
        (StatutControleNuisibles.OK, None),
        (StatutControleNuisibles.NEEDS_ATTENTION, None),
        (StatutControleNuisibles.REPLACED, None),
        (StatutControleNuisibles.DAMAGED, None),
        (StatutControleNuisibles.ACTIVITY_DETECTED, PrioriteActionCorrective.HIGH),
        (StatutControleNuisibles.REQUIRES_SERVICE, PrioriteActionCorrective.CRITICAL),
    ],
)
def test_priorite_controle_nuisibles(
    statut: StatutControleNuisibles, priorite: PrioriteActionCorrective | None
) -> None:
    assert priorite_controle_nuisibles(statut) == priorite


def test_temperature_cuisson_requise_ordre_de_priorite() -> None:
    produit_id = uuid4()
    politique = PolitiqueConformite(temperatures_cuisson_par_produit={produit_id: 75.0})

    assert politique.temperature_cuisson_requise(produit_id=produit_id, temperature_produit=70.0) == 75.0
    assert politique.temperature_cuisson_requise(produit_id=uuid4(), temperature_produit=70.0) == 70.0
    assert politique.temperature_cuisson_requise(produit_id=uuid4(), temperature_produit=None) == 72.0


def test_cuisson_a_la_limite_est_conforme() -> None:
    evaluateur = EvaluateurConformite()
    assert evaluateur.cuisson(
        lot_id=uuid4(), numero_lot="20240305", nom_produit="Kiełbasa", temperature_finale=72.0, temperature_requise=72.0
    ).conforme

    resultat = evaluateur.cuisson(
        lot_id=uuid4(), numero_lot="20240305", nom_produit="Kiełbasa", temperature_finale=68.5, temperature_requise=72.0
    )
    assert resultat.conforme is False
    assert resultat.constat is not None
    assert resultat.constat.origine == OrigineActionCorrective.PRODUCTION
    assert "68.5°C" in resultat.constat.description


def test_numerotation_lots() -> None:
    assert numero_lot_production(date(2024, 3, 5), 0) == "20240305"
    assert numero_lot_production(date(2024, 3, 5), 1) == "20240305-2"
    assert numero_lot_production(date(2024, 3, 5), 2) == "20240305-3"
    assert numero_lot_salaison_base(date(2024, 3, 5)) == "05-03"


def test_significativite_danger() -> None:
    assert significativite(NiveauRisque.LOW, NiveauRisque.LOW) == 1
    assert significativite(NiveauRisque.HIGH, NiveauRisque.MEDIUM) == 6
    assert significativite(NiveauRisque.HIGH, NiveauRisque.HIGH) == 9


def test_taux_et_pourcentages() -> None:
    assert taux_conformite(0, 0) == 0.0
    assert taux_conformite(2, 1) == 66.7
    assert taux_conformite(5, 0) == 100.0
    assert pourcentage(1, 3) == 33.3
    assert pourcentage(0, 0) == 0.0
