"""Controllers module - Application-level controllers for coordinating business logic."""

from controllers.app_controller import (
    ThumbnailController,
    get_thumbnail_controller,
    reset_thumbnail_controller,
)

__all__ = ["ThumbnailController", "get_thumbnail_controller", "reset_thumbnail_controller"]
