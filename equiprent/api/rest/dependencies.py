"""
FastAPI Dependencies for dependency injection.

Following DIP (Dependency Inversion Principle):
- API layer depends on application services, never on store backends
- Services are injected via FastAPI dependency system
- Tests swap the whole container through set_app_state()
"""

from typing import Optional

from equiprent.application.factories import ServiceContainer, ServiceFactory
from equiprent.application.services import AuxiliaryEquipmentService, MachineService
from equiprent.config import EquipRentConfig, get_config


# ═══════════════════════════════════════════════════════════════════════════════
# Application State (Singleton services)
# ═══════════════════════════════════════════════════════════════════════════════

class AppState:
    """
    Application state container.

    Holds the service container shared across requests. Initialized once
    at startup, used throughout the application lifetime.
    """

    def __init__(self):
        self._services: Optional[ServiceContainer] = None
        self._config: Optional[EquipRentConfig] = None
        self._initialized: bool = False

    def initialize(
        self,
        services: Optional[ServiceContainer] = None,
        config: Optional[EquipRentConfig] = None,
    ) -> None:
        """
        Initialize application state with services.

        Args:
            services: Pre-wired services (built from config when omitted)
            config: Configuration (defaults to global config)
        """
        self._config = config or get_config()
        self._services = services or ServiceFactory.create(self._config)
        self._initialized = True

    @property
    def services(self) -> ServiceContainer:
        """Get the service container, wiring it on first use."""
        if self._services is None:
            self.initialize()
        return self._services

    @property
    def config(self) -> Optional[EquipRentConfig]:
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Check if app state is initialized."""
        return self._initialized


# Global application state
_app_state: Optional[AppState] = None


def get_app_state() -> AppState:
    """Get the global application state."""
    global _app_state
    if _app_state is None:
        _app_state = AppState()
    return _app_state


def set_app_state(state: AppState) -> None:
    """Set the global application state (for testing)."""
    global _app_state
    _app_state = state


def reset_app_state() -> None:
    """Reset the global application state (for testing)."""
    global _app_state
    _app_state = None


# ═══════════════════════════════════════════════════════════════════════════════
# FastAPI Dependencies
# ═══════════════════════════════════════════════════════════════════════════════

def get_services() -> ServiceContainer:
    """FastAPI dependency for the service container."""
    return get_app_state().services


def get_machine_service() -> MachineService:
    """FastAPI dependency for machine mutations."""
    return get_app_state().services.machines


def get_auxiliary_equipment_service() -> AuxiliaryEquipmentService:
    """FastAPI dependency for auxiliary equipment mutations."""
    return get_app_state().services.auxiliary_equipment
