"""API routes package."""

from ppc_contracts.routes.contracts import router as contracts_router
from ppc_contracts.routes.health import router as health_router
from ppc_contracts.routes.signing import router as signing_router

__all__ = ["contracts_router", "health_router", "signing_router"]
