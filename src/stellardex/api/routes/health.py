"""Health check endpoints."""

import logging

from fastapi import APIRouter, Depends

from stellardex import __version__
from stellardex.config import get_settings
from stellardex.errors import StellarDexError
from stellardex.horizon import LedgerService
from stellardex.web.dependencies import get_ledger

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "stellardex"}


@router.get("/health/detailed")
async def detailed_health(ledger: LedgerService = Depends(get_ledger)):
    """Health check that asks Horizon for its network and latest ledger.

    Reports ``degraded`` when Horizon cannot be reached or serves a
    different network than the one intents are built for.
    """
    settings = get_settings()
    horizon = {"url": settings.horizon_url, "reachable": False}

    try:
        root = await ledger.network_status()
    except StellarDexError as e:
        logger.warning(f"Horizon health check failed: {e}")
        horizon["error"] = e.message
    else:
        horizon["reachable"] = True
        horizon["latest_ledger"] = root.get("history_latest_ledger")
        horizon["network_matches"] = root.get("network_passphrase") == settings.network_passphrase

    healthy = horizon["reachable"] and horizon["network_matches"]
    return {
        "status": "healthy" if healthy else "degraded",
        "service": "stellardex",
        "version": __version__,
        "horizon": horizon,
        "config": settings.get_safe_dict(),
    }
