import json
from pathlib import Path

import pytest

from virtualreader.cli import build_parser, main

PAYLOAD = bytes(range(16))
BIN_NAME = "btld_00000001.bin.001_002_003"
XML_NAME = "btld_00000001.xml.001_002_003"

XML = (
    '<FLASH xmlns="http://example.com/ns">'
    '<FLASH-SEGMENT COMPRESSION-STATUS="UNCOMPRESSED">'
    "<SOURCE-START-ADDRESS>0</SOURCE-START-ADDRESS>"
    "<SOURCE-END-ADDRESS>F</SOURCE-END-ADDRESS>"
    "<TARGET-START-ADDRESS>80000000</TARGET-START-ADDRESS>"
    "<TARGET-END-ADDRESS>8000000F</TARGET-END-ADDRESS>"
    "</FLASH-SEGMENT></FLASH>"
)


def _container(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / XML_NAME).write_text(XML, encoding="utf-8")
    bin_path = directory / BIN_NAME
    bin_path.write_bytes(PAYLOAD)
    return bin_path


@pytest.fixture
def psdz(tmp_path):
    root = tmp_path / "psdz"
    _container(root / "swe" / "btld")
    return root


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.algorithm is None
    assert args.size is None
    assert args.list is False


def test_parser_rejects_non_positive_size():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--size", "0"])


def test_parser_rejects_unknown_algorithm():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--algorithm", "lzma"])


def test_extract_from_explicit_path(tmp_path):
    bin_path = _container(tmp_path / "in")
    out = tmp_path / "image.bin"
    cfg = tmp_path / "config.json"
    assert main(["--btld", str(bin_path), "-o", str(out), "--config", str(cfg)]) == 0
    assert out.read_bytes() == PAYLOAD


def test_padding_to_desired_size(tmp_path):
    bin_path = _container(tmp_path / "in")
    out = tmp_path / "image.bin"
    cfg = tmp_path / "config.json"
    rc = main(["--btld", str(bin_path), "-o", str(out), "--size", "1",
               "--config", str(cfg)])
    assert rc == 0
    data = out.read_bytes()
    assert len(data) == 1024 * 1024
    assert data[:16] == PAYLOAD
    assert set(data[16:]) == {0}


def test_config_saved_with_directories(tmp_path):
    bin_path = _container(tmp_path / "in")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    cfg = tmp_path / "config.json"
    main(["--btld", str(bin_path), "-o", str(out_dir / "x.bin"), "--config", str(cfg)])
    saved = json.loads(cfg.read_text(encoding="utf-8"))
    assert saved["last_input_dir"] == str(bin_path.parent)
    assert saved["last_output_dir"] == str(out_dir)


def test_no_save_config(tmp_path):
    bin_path = _container(tmp_path / "in")
    cfg = tmp_path / "config.json"
    rc = main(["--btld", str(bin_path), "-o", str(tmp_path / "o.bin"),
               "--config", str(cfg), "--no-save-config"])
    assert rc == 0
    assert not cfg.exists()


def test_missing_descriptor_is_error(tmp_path, capsys):
    bin_path = tmp_path / "lonely.bin"
    bin_path.write_bytes(PAYLOAD)
    rc = main(["--btld", str(bin_path), "-o", str(tmp_path / "o.bin"),
               "--config", str(tmp_path / "c.json")])
    assert rc == 1
    assert "No valid files to process" in capsys.readouterr().err


def test_no_inputs_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as info:
        main(["--config", str(tmp_path / "c.json")])
    assert info.value.code == 2


def test_index_without_psdz_is_usage_error(tmp_path):
    with pytest.raises(SystemExit) as info:
        main(["--btld-index", "0", "--config", str(tmp_path / "c.json")])
    assert info.value.code == 2


def test_list_psdz(psdz, tmp_path, capsys):
    rc = main(["--psdz", str(psdz), "--list", "--config", str(tmp_path / "c.json")])
    out = capsys.readouterr().out
    assert rc == 0
    assert "Found 1 files (1 BTLD, 0 SWFL)" in out
    assert "btld_00000001_001_002_003" in out


def test_list_filter_excludes(psdz, tmp_path, capsys):
    rc = main(["--psdz", str(psdz), "--list", "--filter", "swfl",
               "--config", str(tmp_path / "c.json")])
    assert rc == 0
    assert "btld_00000001_001_002_003" not in capsys.readouterr().out


def test_select_by_index_with_output(psdz, tmp_path):
    out = tmp_path / "image.bin"
    rc = main(["--psdz", str(psdz), "--btld-index", "0", "-o", str(out),
               "--config", str(tmp_path / "c.json")])
    assert rc == 0
    assert out.read_bytes() == PAYLOAD


def test_select_by_index_default_output(psdz, tmp_path):
    rc = main(["--psdz", str(psdz), "--btld-index", "0",
               "--config", str(tmp_path / "c.json")])
    assert rc == 0
    expected = psdz / "swe" / "btld" / BIN_NAME.replace(".bin", ".extracted")
    assert expected.read_bytes() == PAYLOAD


def test_index_out_of_range(psdz, tmp_path):
    rc = main(["--psdz", str(psdz), "--btld-index", "5",
               "--config", str(tmp_path / "c.json")])
    assert rc == 2