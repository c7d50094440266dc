from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """Raised when the system clipboard cannot be written."""


def copy_to_clipboard(text: str) -> None:
    """Copy text to the system clipboard.

    Raises:
        ClipboardError: If no clipboard mechanism is available or the write failed.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.debug("Clipboard write failed: %s", e)
        raise ClipboardError(str(e) or "clipboard unavailable") from e
