import pytest

from ragchunk.processing.grouping import build_groups, enforce_group_budget
from ragchunk.processing.models import Segment
from ragchunk.processing.options import ChunkingOptions


def _segments(*texts: str) -> list[Segment]:
    segments = []
    cursor = 0
    for text in texts:
        segments.append(Segment(text, cursor, cursor + len(text)))
        cursor += len(text) + 1
    return segments


def test_build_groups_creates_one_window_per_segment() -> None:
    segments = _segments("s0", "s1", "s2", "s3", "s4")

    groups = build_groups(segments, buffer_size=1)

    assert len(groups) == 5
    assert [group.segments for group in groups] == [
        ["s0", "s1"],
        ["s0", "s1", "s2"],
        ["s1", "s2", "s3"],
        ["s2", "s3", "s4"],
        ["s3", "s4"],
    ]
    assert groups[2].combined_text == "s1 s2 s3"
    assert (groups[2].start, groups[2].end) == (segments[1].start, segments[3].end)
    assert [group.core_text for group in groups] == ["s0", "s1", "s2", "s3", "s4"]
    assert [group.index for group in groups] == [0, 1, 2, 3, 4]


def test_build_groups_without_buffer_mirrors_segments() -> None:
    segments = _segments("a", "b")

    groups = build_groups(segments, buffer_size=0)

    assert [(group.combined_text, group.start, group.end) for group in groups] == [
        ("a", 0, 1),
        ("b", 2, 3),
    ]


def test_build_groups_rejects_negative_buffer() -> None:
    with pytest.raises(ValueError):
        build_groups(_segments("a"), buffer_size=-1)


def test_groups_within_budget_are_kept(char_counter) -> None:
    groups = build_groups(_segments("aa", "bb"), buffer_size=1)

    kept = enforce_group_budget(groups, ChunkingOptions(max_tokens_per_chunk=5, min_tokens_per_chunk=1), char_counter)

    assert kept == groups


def test_oversized_group_degrades_to_core_segment(char_counter) -> None:
    groups = build_groups(_segments("aaaa", "bbbb", "cccc"), buffer_size=1)
    options = ChunkingOptions(max_tokens_per_chunk=9, min_tokens_per_chunk=1)

    kept = enforce_group_budget(groups, options, char_counter)

    assert [group.combined_text for group in kept] == ["aaaa bbbb", "bbbb", "bbbb cccc"]
    assert (kept[1].start, kept[1].end) == (groups[1].start, groups[1].end)
    assert kept[1].index == 1


def test_group_with_oversized_core_is_dropped(char_counter) -> None:
    groups = build_groups(_segments("a", "bbbbbbbbbbbb", "c"), buffer_size=0)
    options = ChunkingOptions(max_tokens_per_chunk=5, min_tokens_per_chunk=1)

    kept = enforce_group_budget(groups, options, char_counter)

    assert [group.index for group in kept] == [0, 2]
