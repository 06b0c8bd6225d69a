from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

routeur_sante = APIRouter(tags=["sante"])


@routeur_sante.get("/health")
async def health() -> dict[str, str]:
    """Sonde de disponibilité (sans base de données)."""

    return {"statut": "ok", "horodatage": datetime.now(timezone.utc).isoformat()}
