"""
REST API Routes.

Provides:
- /api/v1/machines - Machine management
- /api/v1/auxiliary-equipment - Auxiliary equipment management
- /api/v1/maintenance - Integrity checks and orphan sweeps
- /api/v1/health - Health checks
"""

from .machines import router as machines_router
from .auxiliary_equipment import router as auxiliary_equipment_router
from .maintenance import router as maintenance_router
from .health import router as health_router

__all__ = [
    "machines_router",
    "auxiliary_equipment_router",
    "maintenance_router",
    "health_router",
]
