from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class StatistiquesOut(BaseModel):
    produits_actifs: int
    fournisseurs_agrees: int
    releves_du_jour: int
    releves_non_conformes_7j: int
    actions_en_cours: int
    checklists_actives: int

    class Config:
        from_attributes = True


class AlerteOut(BaseModel):
    identifiant: str
    type_alerte: str
    gravite: str
    message: str
    moment: datetime

    class Config:
        from_attributes = True


class PointGraphiqueOut(BaseModel):
    jour: date
    moyenne: float

    class Config:
        from_attributes = True
