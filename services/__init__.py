"""
Services package - Business logic layer.

This package exposes business services while avoiding heavy imports at module load time.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "ArtService",
    "ExportService",
    "StateService",
    "ThumbnailSettings",
    "ThumbnailState",
    "get_art_service",
    "get_export_service",
    "get_state_service",
    "load_logo",
]

_LAZY_MODULES = {
    "ArtService": "services.art_service",
    "get_art_service": "services.art_service",
    "load_logo": "services.art_service",
    "ExportService": "services.export_service",
    "get_export_service": "services.export_service",
    "StateService": "services.state_service",
    "ThumbnailSettings": "services.state_service",
    "ThumbnailState": "services.thumbnail_state",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_MODULES:
        module = import_module(_LAZY_MODULES[name])
        value = getattr(module, name)
        globals()[name] = value
        return value

    raise AttributeError(f"module 'services' has no attribute '{name}'")


def get_state_service():
    from services.state_service import StateService

    return StateService()
