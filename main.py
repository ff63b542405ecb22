#!/usr/bin/env python3
"""wxPython entry point that launches the thumbnail editor."""

from __future__ import annotations

import sys
import traceback

import wx
from loguru import logger

from controllers.app_controller import get_thumbnail_controller
from utils.constants import LOGS_DIR, ensure_base_dirs
from utils.logging_config import configure_logging


def _log_exception(title: str, exc_type, exc_value, exc_traceback) -> None:
    logger.error(f"=== {title} ===")
    logger.error(f"Exception type: {exc_type.__name__}")
    logger.error(f"Exception value: {exc_value}")
    logger.error("Traceback:")
    for line in traceback.format_tb(exc_traceback):
        logger.error(line.rstrip())
    logger.error(f"=== END {title} ===")


class ThumbnailWxApp(wx.App):
    """Bootstrap the thumbnail editor."""

    def OnInit(self) -> bool:  # noqa: N802 - wx override
        logger.info("Starting MTG Matchup Thumbnail Tools (wx)")
        self.controller = get_thumbnail_controller()
        frame = self.controller.create_frame()
        self.SetTopWindow(frame)
        frame.Show()
        wx.CallAfter(frame.refresh_canvas)
        return True

    def OnExceptionInMainLoop(self) -> bool:  # noqa: N802 - wx override
        """Handle exceptions in the main event loop."""
        exc_type, exc_value, exc_traceback = sys.exc_info()
        _log_exception("UNHANDLED EXCEPTION IN MAIN LOOP", exc_type, exc_value, exc_traceback)

        error_msg = f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}\n\nCheck the log file for details."
        wx.MessageBox(error_msg, "Application Error", wx.OK | wx.ICON_ERROR)

        # Return True to continue running, False to exit
        return True


def main() -> None:
    ensure_base_dirs()
    log_file = configure_logging(LOGS_DIR)
    if log_file:
        logger.info(f"Logging to {log_file}")

    # Install global exception handler for exceptions outside of wx mainloop
    def global_exception_handler(exc_type, exc_value, exc_traceback):
        _log_exception("UNCAUGHT EXCEPTION (GLOBAL)", exc_type, exc_value, exc_traceback)
        sys.__excepthook__(exc_type, exc_value, exc_traceback)

    sys.excepthook = global_exception_handler

    app = ThumbnailWxApp(False)
    app.MainLoop()


if __name__ == "__main__":
    main()
