"""Core data types shared across the package."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path


class FileType(enum.Enum):
    """Kind of flash container found in a PSDZ tree."""

    BTLD = "BTLD"
    SWFL = "SWFL"


@dataclass
class AvailableFile:
    """A flash container discovered while scanning a PSDZ folder."""

    path: Path
    file_type: FileType
    display_name: str
    size: int


@dataclass
class FlashSegment:
    """One segment described in a flash container's XML descriptor."""

    source_start_addr: int = 0
    source_end_addr: int = 0
    target_start_addr: int = 0
    target_end_addr: int = 0
    is_compressed: bool = False

    def source_size(self) -> int:
        """Number of bytes the segment occupies in the container file."""
        return self.source_end_addr - self.source_start_addr + 1

    def target_size(self) -> int:
        """Number of bytes the segment occupies in the flash image."""
        return self.target_end_addr - self.target_start_addr + 1


class FileActionKind(enum.Enum):
    CLEAR = "clear"
    SELECT_BTLD = "select_btld"
    SELECT_SWFL1 = "select_swfl1"
    SELECT_SWFL2 = "select_swfl2"


@dataclass(frozen=True)
class FileAction:
    """A request to change the file selection."""

    kind: FileActionKind
    index: int | None = None
    file_type: str | None = None

    @classmethod
    def clear(cls, file_type: str) -> "FileAction":
        return cls(FileActionKind.CLEAR, file_type=file_type)

    @classmethod
    def select(cls, kind: FileActionKind, index: int) -> "FileAction":
        if kind is FileActionKind.CLEAR:
            raise ValueError("use FileAction.clear for clearing a selection")
        return cls(kind, index=index)


class MessageKind(enum.Enum):
    SELECT_PSDZ_FOLDER = "select_psdz_folder"
    TOGGLE_FILE_BROWSER = "toggle_file_browser"
    SELECT_FILE = "select_file"
    CLEAR_FILE = "clear_file"
    SELECT_BTLD_FILE = "select_btld_file"
    SELECT_SWFL1_FILE = "select_swfl1_file"
    SELECT_SWFL2_FILE = "select_swfl2_file"
    SELECT_OUTPUT_FILE = "select_output_file"
    EXTRACT_FILES = "extract_files"
    RELOAD_UCL_LIBRARY = "reload_ucl_library"
    BROWSE_UCL_LIBRARY = "browse_ucl_library"
    SET_DESIRED_SIZE_MB = "set_desired_size_mb"
    TOGGLE_USE_DESIRED_SIZE = "toggle_use_desired_size"


@dataclass(frozen=True)
class UIMessage:
    """A user interaction queued for the application to handle."""

    kind: MessageKind
    index: int | None = None
    file_type: str | None = None
    size_mb: float | None = None
    path: Path | None = None