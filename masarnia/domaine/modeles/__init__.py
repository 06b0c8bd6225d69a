"""Modèles SQLAlchemy.

Aucune logique métier ici : uniquement la structure des tables.
"""

from masarnia.domaine.modeles.base import BaseModele, ModeleHorodate
from masarnia.domaine.modeles.auth import Utilisateur
from masarnia.domaine.modeles.audit import JournalAudit
from masarnia.domaine.modeles.referentiel import Fournisseur, Materiau, MatierePremiere, ParametresEntreprise, Produit
from masarnia.domaine.modeles.receptions import ReceptionMateriau, ReceptionMatierePremiere
from masarnia.domaine.modeles.salaison import LotSalaison
from masarnia.domaine.modeles.production import LigneMatiereLot, LotProduction
from masarnia.domaine.modeles.hygiene import (
    ControleNuisibles,
    EnregistrementNettoyage,
    PointNuisibles,
    PointTemperature,
    ReleveTemperature,
    ZoneNettoyage,
)
from masarnia.domaine.modeles.audits import ChecklistAudit, EnregistrementAudit
from masarnia.domaine.modeles.haccp import CCP, ActionCorrective, Danger
from masarnia.domaine.modeles.formation import Formation, ParticipantFormation
from masarnia.domaine.modeles.documents import Document
from masarnia.domaine.modeles.laboratoire import AnalyseLabo, TypeAnalyseLabo
from masarnia.domaine.modeles.dechets import CollecteurDechets, EnregistrementDechet, TypeDechet
from masarnia.domaine.modeles.decoupe import Decoupe, ElementDecoupe

__all__ = [
    "BaseModele",
    "ModeleHorodate",
    # Auth & audit
    "Utilisateur",
    "JournalAudit",
    # Référentiel
    "Fournisseur",
    "MatierePremiere",
    "Materiau",
    "Produit",
    "ParametresEntreprise",
    # Réceptions
    "ReceptionMatierePremiere",
    "ReceptionMateriau",
    # Salaison & production
    "LotSalaison",
    "LotProduction",
    "LigneMatiereLot",
    "Decoupe",
    "ElementDecoupe",
    # Hygiène
    "PointTemperature",
    "ReleveTemperature",
    "ZoneNettoyage",
    "EnregistrementNettoyage",
    "PointNuisibles",
    "ControleNuisibles",
    # Audits & plan HACCP
    "ChecklistAudit",
    "EnregistrementAudit",
    "CCP",
    "Danger",
    "ActionCorrective",
    # Formation, documents, laboratoire, déchets
    "Formation",
    "ParticipantFormation",
    "Document",
    "TypeAnalyseLabo",
    "AnalyseLabo",
    "TypeDechet",
    "CollecteurDechets",
    "EnregistrementDechet",
]
