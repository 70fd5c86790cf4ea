# virtualreader

Rebuilds a single, address-aligned flash image from the files of a PSDZ data
set: a bootloader (BTLD) file and up to two software flash (SWFL) files.

Each `.bin` file in a PSDZ folder comes with a matching `.xml` description
(the same name with `.bin` replaced by `.xml`) that lists its flash segments:
where each segment lives in the `.bin` file, where it belongs in the target's
address space, and whether it is UCL-compressed. `virtualreader` reads those
descriptions, decompresses the compressed segments with a pure-Python NRV2B,
NRV2D or NRV2E decoder, and places every segment at its target address in one
output file. Gaps are filled with zero bytes, and the result can optionally be
padded with zeros up to a desired size in megabytes.

## Installation

```
pip install .
```

No third-party libraries are needed at run time. To run the tests:

```
pip install ".[test]"
pytest
```

## Command line

The package installs one command, `virtualreader`:

```
virtualreader --help
```

Pick files from a PSDZ folder (its `swe/btld` and `swe/swfl` subfolders):

```
virtualreader --psdz psdz --list
virtualreader --psdz psdz --list --filter 0000abcd
virtualreader --psdz psdz --btld-index 0 --swfl1-index 3 --swfl2-index 4
```

`--list` prints each found file with its index, display name, type and size
in KiB, marking the ones selected. `--filter` ignores case and treats `-` and
`_` as interchangeable. Giving `--psdz` with no file selected only scans (and
lists); nothing is written. An index beyond the list ends the command with
exit status 2.

Or name the files directly:

```
virtualreader --btld btld.bin --swfl1 swfl_0000abcd.bin -o image.bin --size 4
```

Options:

- `--psdz FOLDER`, `--list`, `--filter TEXT`
- `--btld PATH`, `--swfl1 PATH`, `--swfl2 PATH`
- `--btld-index N`, `--swfl1-index N`, `--swfl2-index N` (need `--psdz`)
- `-o`, `--output PATH`
- `--size MB`: pad the image with zeros up to this size (must be above zero)
- `--algorithm {nrv2b,nrv2d,nrv2e}`: decoder for compressed segments
- `--config PATH`: settings file (default `config.json`)
- `--no-save-config`: do not write the settings file on exit

Without `-o`, the output name is derived: choosing an SWFL1 file names the
output `<part after the last underscore>.vr.bin` in the directory of the
running program; choosing only a BTLD file puts the output next to it, with
`.bin` in its name replaced by `.extracted`.

A file that cannot be processed is reported and skipped. If nothing usable is
left, or the combined image would be larger than 200 MB, the error is printed
to standard error and the exit status is 1. On success the final status line
and the output path are printed. Size mismatches and failed decompressions
(where the raw data is used instead) are logged as warnings.

## Library use

Finding the flashable files in a PSDZ folder:

```python
from pathlib import Path
from virtualreader.file_ops import scan_psdz_files

for available in scan_psdz_files(Path("psdz")):
    print(available.file_type, available.display_name, available.size)
```

Bootloader files are listed before software flash files, each group sorted by
display name (the file name with `.bin.` shown as `_`).

Reading the segment table of one file:

```python
from virtualreader.xml_parser import parse_xml

for segment in parse_xml(Path("psdz/swe/swfl/swfl_0000abcd.xml.001_002_003")):
    print(hex(segment.target_start_addr), segment.target_size(), segment.is_compressed)
```

`parse_xml` and `parse_xml_text` raise `SegmentParseError` for unreadable or
malformed descriptions and for addresses that are not 32-bit hexadecimal.

Naming the output after the first SWFL file:

```python
from virtualreader.file_ops import generate_output_filename

generate_output_filename(Path("swfl_0000abcd.bin"))  # "0000abcd.vr.bin"
```

Decompressing UCL data:

```python
from virtualreader.ucl import UclDecompressor, nrv2b_decompress

data = UclDecompressor("nrv2e").decompress(compressed)
data = nrv2b_decompress(compressed, 65536)  # fixed output limit
```

`UclDecompressor.decompress` retries with larger output limits while the
output overruns; failures raise `UclError`, whose `kind` is a `UclErrorKind`.

`process_files` combines everything into one image. It takes the BTLD, SWFL1
and SWFL2 paths (any of them may be `None`), the output path, the desired size
in megabytes (`0.0` keeps the natural size), a `UclDecompressor` and a
callback that receives status messages. Files that fail to process are
reported through the callback and skipped; an `ExtractionError` is raised when
nothing usable is left, the combined image would exceed 200 MB, or the output
cannot be written.

`VirtualReaderApp` in `virtualreader.app` holds the selections, output path
and status line, and carries out queued `UIMessage` requests through
`handle_ui_messages`; the command is built on it.

## Configuration

Settings are kept as JSON by `AppConfig`: the last used input and output
directories, a window width and height, and `ucl_algorithm` (`nrv2b` by
default). A missing or unreadable file simply yields the defaults.

## What it does not do

There is no graphical interface and no file dialogs; files are chosen on the
command line or through the library. Decompression is done by the built-in
decoders only; no external compression library is loaded. The window size
stored in the settings is kept but not used.