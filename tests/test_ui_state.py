from pathlib import Path

import pytest

from virtualreader.types import AvailableFile, FileType, MessageKind, UIMessage
from virtualreader.ui_state import UIState, describe_file, status_tone


def _file(name: str, file_type: FileType = FileType.SWFL, size: int = 0) -> AvailableFile:
    return AvailableFile(
        path=Path("/psdz/swe") / name,
        file_type=file_type,
        display_name=name,
        size=size,
    )


def test_defaults_match_source():
    state = UIState()
    assert state.desired_size_mb == 4.0
    assert state.use_desired_size is False
    assert state.show_settings is False
    assert state.show_file_browser is False
    assert state.file_search_filter == ""
    assert state.selected_btld_index is None
    assert state.selected_swfl1_index is None
    assert state.selected_swfl2_index is None
    assert state.message_queue == []


def test_message_queues_are_independent():
    first = UIState()
    second = UIState()
    first.message_queue.append(UIMessage(MessageKind.EXTRACT_FILES))
    assert second.message_queue == []
    assert len(first.message_queue) == 1


@pytest.mark.parametrize("name", ["anything", "", "SWFL_00001234_001_002_003"])
def test_empty_filter_matches_everything(name):
    assert UIState().matches_filter(name) is True


def test_filter_is_case_insensitive():
    state = UIState(file_search_filter="swfl_0000")
    assert state.matches_filter("SWFL_0000ABCD_001") is True


def test_hyphen_in_filter_matches_underscore():
    state = UIState(file_search_filter="abc-def")
    assert state.matches_filter("abc_def_001") is True


def test_underscore_in_filter_matches_hyphen():
    state = UIState(file_search_filter="abc_def")
    assert state.matches_filter("x-abc-def") is True


def test_filter_rejects_unrelated_name():
    state = UIState(file_search_filter="btld")
    assert state.matches_filter("swfl_0001") is False


def test_filtered_indices_keeps_order_and_positions():
    files = [
        _file("btld_0001", FileType.BTLD),
        _file("swfl_0002"),
        _file("swfl_0003"),
        _file("other"),
    ]
    state = UIState(file_search_filter="SWFL")
    assert state.filtered_indices(files) == [1, 2]


def test_filtered_indices_without_filter_is_all():
    files = [_file("a"), _file("b"), _file("c")]
    assert UIState().filtered_indices(files) == list(range(len(files)))


def test_filtered_indices_subset_of_all():
    files = [_file("a-1"), _file("a_2"), _file("b_3")]
    state = UIState(file_search_filter="a_")
    result = state.filtered_indices(files)
    assert result == [0, 1]
    assert all(state.matches_filter(files[i].display_name) for i in result)


def test_describe_file_btld():
    assert describe_file(_file("boot", FileType.BTLD, 3 * 1024)) == "Type: BTLD | Size: 3 KiB"


def test_describe_file_mentions_type():
    text = describe_file(_file("prog", FileType.SWFL, 0))
    assert text.startswith("Type: SWFL | Size: ")
    assert text.endswith(" KiB")


def test_status_tone_error_messages_share_tone():
    assert status_tone("Error: one") == status_tone("Error: two")
    assert status_tone("Error: one") != status_tone("Ready")


def test_status_tone_complete_distinct():
    done = status_tone("Combined extraction complete: 10 bytes")
    assert done != status_tone("Ready")
    assert done != status_tone("Error: failed")


def test_status_tone_error_takes_precedence():
    assert status_tone("Error: extraction complete") == status_tone("Error: x")


def test_status_tone_plain_messages_share_tone():
    assert status_tone("Ready") == status_tone("Processing...")