"""Locating flash containers and assembling them into one flash image."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional

from .types import AvailableFile, FileType
from .ucl import UclDecompressor, UclError
from .xml_parser import parse_xml

logger = logging.getLogger(__name__)

_MB = 1024 * 1024
MAX_OUTPUT_SIZE = 200 * _MB

StatusCallback = Callable[[str], None]


class ExtractionError(Exception):
    """A flash container could not be turned into image data."""


def _scan_directory(directory: Path, file_type: FileType) -> list[AvailableFile]:
    if not directory.exists():
        return []
    try:
        entries = list(os.scandir(directory))
    except OSError:
        return []
    found = []
    for entry in entries:
        if ".bin" not in entry.name:
            continue
        try:
            size = entry.stat().st_size
        except OSError:
            continue
        found.append(
            AvailableFile(
                path=Path(entry.path),
                file_type=file_type,
                display_name=entry.name.replace(".bin.", "_"),
                size=size,
            )
        )
    return found


def scan_psdz_files(psdz_path: str | Path) -> list[AvailableFile]:
    """List the BTLD and SWFL containers below ``swe/`` in a PSDZ folder.

    Bootloaders come first, then software files; each group is sorted by
    display name.
    """
    root = Path(psdz_path) / "swe"
    files = _scan_directory(root / "btld", FileType.BTLD)
    files += _scan_directory(root / "swfl", FileType.SWFL)
    order = {FileType.BTLD: 0, FileType.SWFL: 1}
    files.sort(key=lambda f: (order[f.file_type], f.display_name))
    return files


def get_xml_path(bin_path: str | Path) -> Path:
    """Return the descriptor path that belongs to a container file."""
    path = Path(bin_path)
    if not path.name or path.name == "..":
        return path
    return path.with_name(path.name.replace(".bin", ".xml"))


def generate_output_filename(swfl1_path: str | Path) -> Optional[str]:
    """Derive ``<version>.vr.bin`` from the part after the last underscore."""
    name = Path(swfl1_path).name
    if not name or name == "..":
        return None
    base = name[:-4] if name.endswith(".bin") else name
    _, sep, version = base.rpartition("_")
    if not sep:
        return None
    return f"{version}.vr.bin"


def get_program_directory() -> Path:
    """Directory holding the running program, or the working directory."""
    if sys.argv and sys.argv[0]:
        program = Path(sys.argv[0])
        if program.is_file():
            return program.resolve().parent
    try:
        return Path.cwd()
    except OSError:
        return Path(".")


def decompress_ucl(decompressor: UclDecompressor, data: bytes) -> bytes:
    """Decompress a UCL block, raising :class:`ExtractionError` on failure."""
    if not data:
        raise ExtractionError("UCL decompression failed: input data is empty")
    try:
        return decompressor.decompress(data)
    except UclError as exc:
        raise ExtractionError(f"UCL decompression failed: {exc}") from exc


def process_single_file(
    bin_path: str | Path, xml_path: str | Path, decompressor: UclDecompressor
) -> list[tuple[int, bytes]]:
    """Read every segment of one container as ``(target address, data)`` pairs."""
    segments = parse_xml(xml_path)
    bin_path = Path(bin_path)
    try:
        handle = bin_path.open("rb")
    except OSError as exc:
        raise ExtractionError(f"Failed to open input file: {bin_path}: {exc}") from exc

    results: list[tuple[int, bytes]] = []
    with handle:
        for segment in segments:
            source_size = segment.source_size()
            target_size = segment.target_size()
            if source_size <= 0 or target_size <= 0:
                raise ExtractionError(
                    f"Invalid address range in segment: source 0x{segment.source_start_addr:08X}"
                    f"-0x{segment.source_end_addr:08X}, target 0x{segment.target_start_addr:08X}"
                    f"-0x{segment.target_end_addr:08X}"
                )
            handle.seek(segment.source_start_addr)
            raw = handle.read(source_size)
            if len(raw) != source_size:
                raise ExtractionError(
                    f"Unexpected end of file in {bin_path}: wanted {source_size} bytes "
                    f"at 0x{segment.source_start_addr:08X}, got {len(raw)}"
                )

            data = raw
            if segment.is_compressed:
                try:
                    data = decompress_ucl(decompressor, raw)
                except ExtractionError:
                    logger.warning("UCL decompression failed. Using raw data instead.")

            ratio = len(data) / target_size
            if segment.is_compressed and 0.8 < ratio < 1.2:
                pass  # close enough: most likely raw data after a failed decompression
            elif ratio < 0.01 or ratio > 50.0:
                raise ExtractionError(
                    f"Extreme size mismatch for segment - expected {target_size} bytes, "
                    f"got {len(data)} bytes (ratio: {ratio:.2f})"
                )

            if len(data) != target_size:
                logger.warning(
                    "Size mismatch for segment - expected %d bytes, got %d",
                    target_size,
                    len(data),
                )
            results.append((segment.target_start_addr, data))
    return results


def _format_number(value: float) -> str:
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def process_files(
    btld_file: str | Path | None,
    swfl1_file: str | Path | None,
    swfl2_file: str | Path | None,
    output_file: str | Path,
    desired_size_mb: float,
    decompressor: UclDecompressor,
    status_callback: StatusCallback | None = None,
) -> None:
    """Combine the selected containers into one image written to *output_file*.

    A container that fails is reported through *status_callback* and skipped.
    With *desired_size_mb* above zero the image is zero-padded up to that size.
    """
    report: StatusCallback = status_callback or (lambda _message: None)
    all_segments: list[tuple[int, bytes]] = []

    for label, container in (("BTLD", btld_file), ("SWFL1", swfl1_file), ("SWFL2", swfl2_file)):
        if container is None:
            continue
        container = Path(container)
        report(f"Processing {label} file: {container.name}")
        try:
            segments = process_single_file(container, get_xml_path(container), decompressor)
        except (ExtractionError, ValueError, OSError) as exc:
            report(f"Warning: Failed to process {label} file: {exc}")
            continue
        all_segments.extend(segments)
        report(f"{label}: Found {len(segments)} segments")

    if not all_segments:
        raise ExtractionError("No valid files to process")

    base_addr = all_segments[0][0]
    end_addr = max(addr + len(data) - 1 for addr, data in all_segments)
    total_size = max(end_addr - base_addr + 1, 0)

    if total_size > MAX_OUTPUT_SIZE:
        raise ExtractionError(
            f"Output buffer size too large: {total_size} bytes (max: {MAX_OUTPUT_SIZE} bytes). "
            f"Address range: 0x{base_addr:08X} to 0x{end_addr:08X}"
        )

    image = bytearray(total_size)
    for target_addr, data in all_segments:
        offset = target_addr - base_addr
        if offset >= 0 and offset + len(data) <= len(image):
            image[offset:offset + len(data)] = data

    if desired_size_mb > 0.0:
        desired_bytes = int(desired_size_mb * 1024.0 * 1024.0)
        if len(image) < desired_bytes:
            padding = desired_bytes - len(image)
            image.extend(bytes(padding))
            report(
                f"Padded output with {padding} bytes of zero data to reach "
                f"{_format_number(desired_size_mb)} MB"
            )

    try:
        Path(output_file).write_bytes(bytes(image))
    except OSError as exc:
        raise ExtractionError(f"Failed to write output file: {exc}") from exc

    report(
        f"Combined extraction complete: {len(image)} bytes "
        f"({_format_number(len(image) / _MB)} MB), "
        f"range: 0x{base_addr:08X} to 0x{end_addr:08X}"
    )