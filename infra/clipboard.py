"""
Clipboard export using pyperclip.
"""

import logging

import pyperclip

from core.errors import ClipboardError


class SystemClipboard:
    """Copies text to the system clipboard."""

    def __init__(self):
        self._logger = logging.getLogger("murmur.infra.clipboard")

    def copy(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(str(e)) from e
        self._logger.info(f"Copied {len(text)} characters to clipboard")
