"""Application state and the actions the user interface drives."""

from __future__ import annotations

from pathlib import Path

from .config import AppConfig
from .file_ops import (
    ExtractionError,
    generate_output_filename,
    get_program_directory,
    process_files,
    scan_psdz_files,
)
from .types import AvailableFile, FileAction, FileActionKind, FileType, MessageKind, UIMessage
from .ucl import UclDecompressor
from .ui_state import UIState

_SELECTION_INDEX = {
    "btld": "selected_btld_index",
    "swfl1": "selected_swfl1_index",
    "swfl2": "selected_swfl2_index",
}

_ACTION_FILE_TYPE = {
    FileActionKind.SELECT_BTLD: "btld",
    FileActionKind.SELECT_SWFL1: "swfl1",
    FileActionKind.SELECT_SWFL2: "swfl2",
}


def _extracted_sibling(path: Path) -> Path:
    return path.with_name(path.name.replace(".bin", ".extracted"))


class VirtualReaderApp:
    """Holds the selected containers, the output target and the status line."""

    def __init__(
        self,
        config: AppConfig | None = None,
        decompressor: UclDecompressor | None = None,
    ):
        self.config = config if config is not None else AppConfig.load()
        self.btld_file: Path | None = None
        self.swfl1_file: Path | None = None
        self.swfl2_file: Path | None = None
        self.output_file: Path | None = None
        self.status_message = "Ready"
        self.is_processing = False
        self.psdz_folder: Path | None = None
        self.available_files: list[AvailableFile] = []
        self.ui_state = UIState()
        self.decompressor = decompressor

        if self.decompressor is not None:
            self.status_message = "UCL library loaded successfully"
        else:
            try:
                self.decompressor = UclDecompressor(self.config.ucl_algorithm)
            except ValueError:
                self.status_message = (
                    f"Warning: Could not load UCL decompressor {self.config.ucl_algorithm!r}"
                )
            else:
                self.status_message = "UCL library loaded successfully"

    def select_psdz_folder(self, path: str | Path | None) -> None:
        """Use *path* as the PSDZ folder; ``None`` means the choice was cancelled."""
        if path is None:
            return
        path = Path(path)
        self.psdz_folder = path
        self.scan_psdz_files(path)
        self.config.last_input_dir = str(path)

    def scan_psdz_files(self, psdz_path: str | Path) -> None:
        self.available_files = []
        self.status_message = "Scanning PSDZ files..."
        self.available_files = scan_psdz_files(psdz_path)
        btld = sum(f.file_type is FileType.BTLD for f in self.available_files)
        swfl = sum(f.file_type is FileType.SWFL for f in self.available_files)
        self.status_message = (
            f"Found {len(self.available_files)} files ({btld} BTLD, {swfl} SWFL)"
        )

    def select_file_by_index(self, index: int, file_type: str) -> None:
        """Select a scanned file as ``btld``, ``swfl1`` or ``swfl2``."""
        if not 0 <= index < len(self.available_files):
            return
        path = self.available_files[index].path
        if file_type == "btld":
            self.btld_file = path
            self.ui_state.selected_btld_index = index
            if self.output_file is None and path.name:
                self.output_file = _extracted_sibling(path)
        elif file_type == "swfl1":
            self.swfl1_file = path
            self.ui_state.selected_swfl1_index = index
            name = generate_output_filename(path)
            if name is not None:
                self.output_file = get_program_directory() / name
        elif file_type == "swfl2":
            self.swfl2_file = path
            self.ui_state.selected_swfl2_index = index

    def clear_file_selection(self, file_type: str) -> None:
        if file_type == "btld":
            self.btld_file = None
        elif file_type == "swfl1":
            self.swfl1_file = None
        elif file_type == "swfl2":
            self.swfl2_file = None
        else:
            return
        setattr(self.ui_state, _SELECTION_INDEX[file_type], None)

    def select_btld_file(self, path: str | Path | None) -> None:
        if path is None:
            return
        path = Path(path)
        self.btld_file = path
        if self.output_file is None and self.swfl1_file is None and path.name:
            self.output_file = _extracted_sibling(path)
        if self.output_file is not None:
            self.config.update_directories(path, self.output_file)

    def select_swfl1_file(self, path: str | Path | None) -> None:
        if path is None:
            return
        path = Path(path)
        self.swfl1_file = path
        name = generate_output_filename(path)
        if name is not None:
            self.output_file = get_program_directory() / name
        self.config.last_input_dir = str(path.parent)

    def select_swfl2_file(self, path: str | Path | None) -> None:
        if path is None:
            return
        path = Path(path)
        self.swfl2_file = path
        self.config.last_input_dir = str(path.parent)

    def select_output_file(self, path: str | Path | None) -> None:
        if path is None:
            return
        path = Path(path)
        self.output_file = path
        if self.btld_file is not None:
            self.config.update_directories(self.btld_file, path)

    def process_files(self) -> None:
        """Build the combined image; raises :class:`ExtractionError` on failure."""
        self.is_processing = True
        self.status_message = "Processing..."
        try:
            if self.output_file is None:
                raise ExtractionError("No output file selected")
            if self.decompressor is None:
                raise ExtractionError("UCL library not loaded")
            desired = self.ui_state.desired_size_mb if self.ui_state.use_desired_size else 0.0

            def report(status: str) -> None:
                self.status_message = status

            process_files(
                self.btld_file,
                self.swfl1_file,
                self.swfl2_file,
                self.output_file,
                desired,
                self.decompressor,
                report,
            )
        finally:
            self.is_processing = False

    def reload_decompressor(self) -> None:
        self.decompressor = None
        try:
            self.decompressor = UclDecompressor(self.config.ucl_algorithm)
        except ValueError:
            self.status_message = (
                f"Failed to load UCL decompressor {self.config.ucl_algorithm!r}"
            )
        else:
            self.status_message = "UCL library reloaded successfully"

    def handle_file_action(self, action: FileAction) -> None:
        if action.kind is FileActionKind.CLEAR:
            self.clear_file_selection(action.file_type or "")
        else:
            self.select_file_by_index(action.index, _ACTION_FILE_TYPE[action.kind])

    def handle_message(self, message: UIMessage) -> None:
        """Carry out one queued user interaction."""
        kind = message.kind
        if kind is MessageKind.SELECT_PSDZ_FOLDER:
            self.select_psdz_folder(message.path)
        elif kind is MessageKind.TOGGLE_FILE_BROWSER:
            self.ui_state.show_file_browser = not self.ui_state.show_file_browser
        elif kind is MessageKind.SELECT_FILE:
            self.select_file_by_index(message.index, message.file_type or "")
        elif kind is MessageKind.CLEAR_FILE:
            self.clear_file_selection(message.file_type or "")
        elif kind is MessageKind.SELECT_BTLD_FILE:
            self.select_btld_file(message.path)
        elif kind is MessageKind.SELECT_SWFL1_FILE:
            self.select_swfl1_file(message.path)
        elif kind is MessageKind.SELECT_SWFL2_FILE:
            self.select_swfl2_file(message.path)
        elif kind is MessageKind.SELECT_OUTPUT_FILE:
            self.select_output_file(message.path)
        elif kind is MessageKind.EXTRACT_FILES:
            if self.is_processing:
                return
            try:
                self.process_files()
            except (ExtractionError, OSError, ValueError) as exc:
                self.status_message = f"Error: {exc}"
        elif kind is MessageKind.RELOAD_UCL_LIBRARY:
            self.reload_decompressor()
        elif kind is MessageKind.BROWSE_UCL_LIBRARY:
            if message.file_type:
                self.config.ucl_algorithm = message.file_type
                self.reload_decompressor()
        elif kind is MessageKind.SET_DESIRED_SIZE_MB:
            if message.size_mb is not None:
                self.ui_state.desired_size_mb = message.size_mb
        elif kind is MessageKind.TOGGLE_USE_DESIRED_SIZE:
            self.ui_state.use_desired_size = not self.ui_state.use_desired_size

    def handle_ui_messages(self) -> None:
        """Drain the message queue, handling each message in order."""
        messages = self.ui_state.message_queue[:]
        self.ui_state.message_queue.clear()
        for message in messages:
            self.handle_message(message)

    def filtered_files(self) -> list[tuple[int, AvailableFile]]:
        """Scanned files that pass the search filter, with their indices."""
        return [
            (index, self.available_files[index])
            for index in self.ui_state.filtered_indices(self.available_files)
        ]