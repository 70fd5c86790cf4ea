"""State of the user interface and the pure helpers that drive its display."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .types import AvailableFile, UIMessage


@dataclass
class UIState:
    """Window toggles, the file browser filter, selections and queued messages."""

    show_settings: bool = False
    show_file_browser: bool = False
    file_search_filter: str = ""
    selected_btld_index: int | None = None
    selected_swfl1_index: int | None = None
    selected_swfl2_index: int | None = None
    message_queue: list[UIMessage] = field(default_factory=list)
    desired_size_mb: float = 4.0
    use_desired_size: bool = False

    def matches_filter(self, display_name: str) -> bool:
        """Whether *display_name* passes the current search filter.

        Matching ignores case and treats hyphens and underscores in the
        filter as interchangeable.
        """
        needle = self.file_search_filter.lower()
        if not needle:
            return True
        haystack = display_name.lower()
        patterns = (needle, needle.replace("-", "_"), needle.replace("_", "-"))
        return any(pattern in haystack for pattern in patterns)

    def filtered_indices(self, files: Iterable[AvailableFile]) -> list[int]:
        """Positions of the files whose display names pass the filter."""
        return [
            index
            for index, file in enumerate(files)
            if self.matches_filter(file.display_name)
        ]


def describe_file(file: AvailableFile) -> str:
    """One-line summary of a file's type and size for the file browser."""
    return f"Type: {file.file_type.value} | Size: {file.size / 1024.0:.0f} KiB"


def status_tone(status_message: str) -> str:
    """Classify a status message as ``"error"``, ``"success"`` or ``"normal"``."""
    if "Error" in status_message:
        return "error"
    if "complete" in status_message:
        return "success"
    return "normal"