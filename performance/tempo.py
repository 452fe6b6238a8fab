"""Resolve the (single) tempo of a piece into ticks per second."""

from typing import Iterable, Optional

from performance.errors import MissingTempoError, UnsupportedFormatError
from performance.midi_input import Tempo, TrackEvent

US_PER_SEC = 1_000_000


def find_first_tempo(stream: Iterable[TrackEvent]) -> Optional[int]:
    """Microseconds per quarter note of the first tempo message, or None."""
    for ev in stream:
        if isinstance(ev.message, Tempo):
            return ev.message.us_per_quarter
    return None


def ticks_per_second(stream: Iterable[TrackEvent], ticks_per_quarter: Optional[int]) -> int:
    """
    ticks_per_quarter * 1e6 // us_per_quarter, using the first tempo only.

    Later tempo changes are ignored for the whole piece.
    """
    if ticks_per_quarter is None:
        raise UnsupportedFormatError("Could not find metric timing header")

    us_per_quarter = find_first_tempo(stream)
    if us_per_quarter is None:
        raise MissingTempoError("Could not find tempo message")
    if us_per_quarter <= 0:
        raise UnsupportedFormatError(f"Invalid tempo {us_per_quarter} us per quarter note")

    tps = ticks_per_quarter * US_PER_SEC // us_per_quarter
    if tps <= 0:
        raise UnsupportedFormatError(
            f"Tempo {us_per_quarter} us/qn with {ticks_per_quarter} ticks/qn "
            f"resolves to zero ticks per second"
        )
    return tps
