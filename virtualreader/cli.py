"""Command-line front end for building a flash image from PSDZ containers."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_CONFIG_PATH, AppConfig
from .app import VirtualReaderApp
from .types import MessageKind, UIMessage
from .ui_state import describe_file

_ALGORITHMS = ("nrv2b", "nrv2d", "nrv2e")


def _positive_size(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not value > 0.0:
        raise argparse.ArgumentTypeError("desired size must be greater than zero")
    return value


def _index(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an index: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError("index must not be negative")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the command."""
    parser = argparse.ArgumentParser(
        prog="virtualreader",
        description=(
            "Combine bootloader (BTLD) and software (SWFL) flash containers "
            "into one flash image."
        ),
    )
    parser.add_argument("--psdz", type=Path, metavar="FOLDER",
                        help="PSDZ data folder to scan for containers")
    parser.add_argument("--list", action="store_true",
                        help="list the containers found in the PSDZ folder")
    parser.add_argument("--filter", default="", metavar="TEXT",
                        help="only list containers whose names contain TEXT")
    parser.add_argument("--btld", type=Path, metavar="PATH",
                        help="bootloader container file")
    parser.add_argument("--swfl1", type=Path, metavar="PATH",
                        help="program container file")
    parser.add_argument("--swfl2", type=Path, metavar="PATH",
                        help="tune container file")
    parser.add_argument("--btld-index", type=_index, metavar="N",
                        help="select the listed container N as bootloader")
    parser.add_argument("--swfl1-index", type=_index, metavar="N",
                        help="select the listed container N as program")
    parser.add_argument("--swfl2-index", type=_index, metavar="N",
                        help="select the listed container N as tune")
    parser.add_argument("-o", "--output", type=Path, metavar="PATH",
                        help="output image file")
    parser.add_argument("--size", type=_positive_size, metavar="MB",
                        help="pad the image with zeros up to this many MB")
    parser.add_argument("--algorithm", choices=_ALGORITHMS,
                        help="UCL algorithm for compressed segments")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH,
                        metavar="PATH", help="settings file (default: %(default)s)")
    parser.add_argument("--no-save-config", action="store_true",
                        help="do not write the settings file on exit")
    return parser


def _print_listing(app: VirtualReaderApp) -> None:
    state = app.ui_state
    marks = {
        state.selected_btld_index: "BTLD",
        state.selected_swfl1_index: "SWFL1",
        state.selected_swfl2_index: "SWFL2",
    }
    for index, file in app.filtered_files():
        mark = f" [SELECTED] {marks[index]}" if index in marks else ""
        print(f"{index:4d}  {file.display_name}  ({describe_file(file)}){mark}")


def _save_config(config: AppConfig, path: Path) -> None:
    try:
        config.save(path)
    except OSError as exc:
        print(f"Failed to save config: {exc}", file=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    indices = {
        "btld": args.btld_index,
        "swfl1": args.swfl1_index,
        "swfl2": args.swfl2_index,
    }
    if args.psdz is None and (args.list or any(i is not None for i in indices.values())):
        parser.error("--list and the --*-index options need --psdz")

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    config = AppConfig.load(args.config)
    if args.algorithm is not None:
        config.ucl_algorithm = args.algorithm
    app = VirtualReaderApp(config)
    queue = app.ui_state.message_queue

    try:
        if args.psdz is not None:
            queue.append(UIMessage(MessageKind.SELECT_PSDZ_FOLDER, path=args.psdz))
            app.handle_ui_messages()
            print(app.status_message)
            count = len(app.available_files)
            for file_type, index in indices.items():
                if index is not None and index >= count:
                    print(f"Error: no listed file with index {index} "
                          f"(found {count})", file=sys.stderr)
                    return 2
                if index is not None:
                    queue.append(UIMessage(MessageKind.SELECT_FILE, index=index,
                                           file_type=file_type))

        for kind, path in (
            (MessageKind.SELECT_BTLD_FILE, args.btld),
            (MessageKind.SELECT_SWFL1_FILE, args.swfl1),
            (MessageKind.SELECT_SWFL2_FILE, args.swfl2),
        ):
            if path is not None:
                queue.append(UIMessage(kind, path=path))
        if args.output is not None:
            queue.append(UIMessage(MessageKind.SELECT_OUTPUT_FILE, path=args.output))
        if args.size is not None:
            queue.append(UIMessage(MessageKind.SET_DESIRED_SIZE_MB, size_mb=args.size))
            if not app.ui_state.use_desired_size:
                queue.append(UIMessage(MessageKind.TOGGLE_USE_DESIRED_SIZE))
        app.handle_ui_messages()

        if args.list:
            app.ui_state.file_search_filter = args.filter
            _print_listing(app)

        if app.btld_file is None and app.swfl1_file is None and app.swfl2_file is None:
            if args.psdz is not None:
                return 0
            parser.error("no input files selected")

        queue.append(UIMessage(MessageKind.EXTRACT_FILES))
        app.handle_ui_messages()
        if app.status_message.startswith("Error"):
            print(app.status_message, file=sys.stderr)
            return 1
        print(app.status_message)
        if app.output_file is not None:
            print(f"Output: {app.output_file}")
        return 0
    finally:
        if not args.no_save_config:
            _save_config(app.config, args.config)


if __name__ == "__main__":
    sys.exit(main())