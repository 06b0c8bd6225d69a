from __future__ import annotations

from fastapi import APIRouter

# ===== Socle =====
from masarnia.api.endpoints.auth import routeur_auth
from masarnia.api.endpoints.utilisateurs import routeur_utilisateurs
from masarnia.api.endpoints.referentiel import (
    routeur_fournisseurs,
    routeur_materiaux,
    routeur_matieres_premieres,
    routeur_parametres,
    routeur_produits,
)

# ===== Registres HACCP =====
from masarnia.api.endpoints.receptions import routeur_receptions
from masarnia.api.endpoints.temperatures import routeur_temperatures
from masarnia.api.endpoints.salaison import routeur_salaison
from masarnia.api.endpoints.production import routeur_production
from masarnia.api.endpoints.nettoyage import routeur_nettoyage
from masarnia.api.endpoints.nuisibles import routeur_nuisibles
from masarnia.api.endpoints.audits import routeur_audits
from masarnia.api.endpoints.actions_correctives import routeur_actions_correctives
from masarnia.api.endpoints.formations import routeur_formations
from masarnia.api.endpoints.documents import routeur_documents
from masarnia.api.endpoints.plan_haccp import routeur_plan_haccp
from masarnia.api.endpoints.laboratoire import routeur_laboratoire
from masarnia.api.endpoints.dechets import routeur_dechets
from masarnia.api.endpoints.decoupe import routeur_decoupe

# ===== Restitution =====
from masarnia.api.endpoints.tableau_de_bord import routeur_tableau_de_bord
from masarnia.api.endpoints.rapports import routeur_rapports
from masarnia.api.endpoints.etiquettes import routeur_etiquettes


# ==============================
# ROUTEUR PRINCIPAL
# ==============================
router = APIRouter(prefix="/api")

# Auth et utilisateurs
router.include_router(routeur_auth)
router.include_router(routeur_utilisateurs)

# Référentiel
router.include_router(routeur_fournisseurs)
router.include_router(routeur_matieres_premieres)
router.include_router(routeur_materiaux)
router.include_router(routeur_produits)
router.include_router(routeur_parametres)

# Registres
router.include_router(routeur_receptions)
router.include_router(routeur_temperatures)
router.include_router(routeur_salaison)
router.include_router(routeur_production)
router.include_router(routeur_nettoyage)
router.include_router(routeur_nuisibles)
router.include_router(routeur_audits)
router.include_router(routeur_actions_correctives)
router.include_router(routeur_formations)
router.include_router(routeur_documents)
router.include_router(routeur_plan_haccp)
router.include_router(routeur_laboratoire)
router.include_router(routeur_dechets)
router.include_router(routeur_decoupe)

# Tableau de bord, rapports, étiquettes
router.include_router(routeur_tableau_de_bord)
router.include_router(routeur_rapports)
router.include_router(routeur_etiquettes)
