from __future__ import annotations

import enum


# NOTE : les valeurs restent les codes historiques (anglais, majuscules) déjà
# stockés en base et partagés avec l'interface.


class RoleUtilisateur(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


class CategorieMatierePremiere(str, enum.Enum):
    MEAT = "MEAT"
    SPICES = "SPICES"
    ADDITIVES = "ADDITIVES"
    PACKAGING = "PACKAGING"
    OTHER = "OTHER"


class TypePointTemperature(str, enum.Enum):
    COOLER = "COOLER"
    FREEZER = "FREEZER"
    PRODUCTION = "PRODUCTION"
    TRANSPORT = "TRANSPORT"


class FrequenceNettoyage(str, enum.Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    AS_NEEDED = "AS_NEEDED"


class TypePointNuisibles(str, enum.Enum):
    BAIT_STATION = "BAIT_STATION"
    INSECT_TRAP = "INSECT_TRAP"
    UV_LAMP = "UV_LAMP"
    OTHER = "OTHER"


class StatutControleNuisibles(str, enum.Enum):
    """Résultat d'un contrôle de point de lutte contre les nuisibles.

    Seuls ACTIVITY_DETECTED et REQUIRES_SERVICE déclenchent une action corrective.
    """

    OK = "OK"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"
    REPLACED = "REPLACED"
    DAMAGED = "DAMAGED"
    ACTIVITY_DETECTED = "ACTIVITY_DETECTED"
    REQUIRES_SERVICE = "REQUIRES_SERVICE"


class StatutActionCorrective(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class PrioriteActionCorrective(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class OrigineActionCorrective(str, enum.Enum):
    """Écriture qui a déclenché l'action corrective."""

    MANUAL = "MANUAL"
    TEMPERATURE = "TEMPERATURE"
    RECEPTION = "RECEPTION"
    AUDIT = "AUDIT"
    PEST_CONTROL = "PEST_CONTROL"
    PRODUCTION = "PRODUCTION"


class MethodeSalaison(str, enum.Enum):
    DRY = "DRY"
    INJECTION = "INJECTION"


class StatutLotSalaison(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class StatutLotProduction(str, enum.Enum):
    """Cycle de vie d'un lot de production.

    IN_PROGRESS -> COMPLETED -> RELEASED | BLOCKED
    """

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    RELEASED = "RELEASED"
    BLOCKED = "BLOCKED"


class TypeSourceMatiere(str, enum.Enum):
    """Origine d'une ligne matière consommée par un lot de production."""

    RAW_MATERIAL = "RAW_MATERIAL"
    CURING_BATCH = "CURING_BATCH"
    MATERIAL = "MATERIAL"


class TypeDanger(str, enum.Enum):
    BIOLOGICAL = "BIOLOGICAL"
    CHEMICAL = "CHEMICAL"
    PHYSICAL = "PHYSICAL"


class NiveauRisque(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class CategorieDocument(str, enum.Enum):
    PROCEDURE = "PROCEDURE"
    INSTRUCTION = "INSTRUCTION"
    FORM = "FORM"
    RECORD = "RECORD"
    CERTIFICATE = "CERTIFICATE"
    OTHER = "OTHER"


class PolitiqueStockInsuffisant(str, enum.Enum):
    """Comportement de la déduction du sel nitrité quand aucune réception ne suffit.

    - IGNORE : rien n'est déduit, le lot est créé (comportement historique)
    - REJECT : la création du lot échoue
    - PARTIAL_FIFO : consommation répartie sur plusieurs réceptions, les plus anciennes d'abord
    - ALLOW_NEGATIVE : la réception la plus ancienne peut passer en négatif
    """

    IGNORE = "IGNORE"
    REJECT = "REJECT"
    PARTIAL_FIFO = "PARTIAL_FIFO"
    ALLOW_NEGATIVE = "ALLOW_NEGATIVE"
