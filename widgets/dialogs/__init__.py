"""Dialog windows for the thumbnail editor."""

from widgets.dialogs.art_selection_dialog import ArtSelectionDialog

__all__ = ["ArtSelectionDialog"]
