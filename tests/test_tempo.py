"""Tests for tempo resolution."""

import pytest

from performance.errors import MissingTempoError, UnsupportedFormatError
from performance.midi_input import NoteOn, Other, Tempo, TrackEvent
from performance.tempo import find_first_tempo, ticks_per_second


def test_first_tempo_wins():
    stream = [
        TrackEvent(0, Other("track_name")),
        TrackEvent(0, Tempo(500000)),
        TrackEvent(480, Tempo(250000)),
    ]
    assert find_first_tempo(stream) == 500000
    assert ticks_per_second(stream, 480) == 960


def test_tempo_after_notes_still_found():
    stream = [TrackEvent(0, NoteOn(60, 80)), TrackEvent(10, Tempo(600000))]
    assert ticks_per_second(stream, 480) == 800


def test_truncating_division():
    # 96 * 1e6 / 700000 = 137.14...
    stream = [TrackEvent(0, Tempo(700000))]
    assert ticks_per_second(stream, 96) == 137


def test_missing_tempo():
    stream = [TrackEvent(0, NoteOn(60, 80))]
    assert find_first_tempo(stream) is None
    with pytest.raises(MissingTempoError):
        ticks_per_second(stream, 480)


def test_non_metrical_timing_rejected():
    with pytest.raises(UnsupportedFormatError, match="metric timing"):
        ticks_per_second([TrackEvent(0, Tempo(500000))], None)


def test_zero_ticks_per_second_rejected():
    with pytest.raises(UnsupportedFormatError, match="zero ticks"):
        ticks_per_second([TrackEvent(0, Tempo(2_000_000))], 1)
