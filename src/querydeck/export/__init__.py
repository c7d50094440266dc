"""Result export helpers."""

from querydeck.export.clipboard import ClipboardError, copy_to_clipboard
from querydeck.export.results_json import history_to_json, results_to_json

__all__ = ["ClipboardError", "copy_to_clipboard", "history_to_json", "results_to_json"]
