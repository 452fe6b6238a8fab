"""
Fixed 388-token performance vocabulary.

  NOTE_ON     0..127   key
  NOTE_OFF  128..255   key
  TIME_SHIFT 256..355  10 ms bucket (0 = 10 ms, 99 = 1 s)
  VELOCITY  356..387   velocity bucket (MIDI velocity // 4)

Both directions are plain arithmetic over VOCAB_LAYOUT, so every token in
range maps to exactly one event and back.
"""

import operator
from typing import Iterable, List, NamedTuple

from performance.errors import TokenOutOfRangeError

NOTE_ON    = "NOTE_ON"
NOTE_OFF   = "NOTE_OFF"
TIME_SHIFT = "TIME_SHIFT"
VELOCITY   = "VELOCITY"

NUM_KEYS           = 128
TIME_SHIFT_BUCKETS = 100
VELOCITY_BUCKETS   = 32


def _build_layout():
    layout = {}
    idx = 0
    for group, size in ((NOTE_ON, NUM_KEYS),
                        (NOTE_OFF, NUM_KEYS),
                        (TIME_SHIFT, TIME_SHIFT_BUCKETS),
                        (VELOCITY, VELOCITY_BUCKETS)):
        layout[group] = {"start": idx, "size": size}
        idx += size
    return layout


VOCAB_LAYOUT = _build_layout()
VOCAB_SIZE = sum(spec["size"] for spec in VOCAB_LAYOUT.values())  # 388


class PerformanceEvent(NamedTuple):
    kind: str
    value: int

    def __repr__(self) -> str:
        return f"{self.kind}({self.value})"


def note_on(key: int) -> PerformanceEvent:
    return PerformanceEvent(NOTE_ON, key)


def note_off(key: int) -> PerformanceEvent:
    return PerformanceEvent(NOTE_OFF, key)


def time_shift(bucket: int) -> PerformanceEvent:
    return PerformanceEvent(TIME_SHIFT, bucket)


def velocity(bucket: int) -> PerformanceEvent:
    return PerformanceEvent(VELOCITY, bucket)


# -------------- ENCODE / DECODE --------------
def event_to_index(event: PerformanceEvent) -> int:
    spec = VOCAB_LAYOUT.get(event.kind)
    if spec is None:
        raise ValueError(f"Unknown event kind '{event.kind}'")
    if not 0 <= event.value < spec["size"]:
        raise ValueError(f"{event.kind} value {event.value} outside [0, {spec['size'] - 1}]")
    return spec["start"] + int(event.value)


def index_to_event(idx: int) -> PerformanceEvent:
    """
    Inverse of event_to_index; raises TokenOutOfRangeError outside the vocab.

    Tokens must be integers (numpy integers included); floats raise TypeError.
    """
    idx = operator.index(idx)
    for kind, spec in VOCAB_LAYOUT.items():
        local = idx - spec["start"]
        if 0 <= local < spec["size"]:
            return PerformanceEvent(kind, int(local))
    raise TokenOutOfRangeError(idx)


def events_to_indices(events: Iterable[PerformanceEvent]) -> List[int]:
    return [event_to_index(e) for e in events]


def indices_to_events(indices: Iterable[int]) -> List[PerformanceEvent]:
    return [index_to_event(i) for i in indices]


# -------------- BUCKET VALUES --------------
def timeshift_to_ms(bucket: int) -> int:
    # buckets are 10 ms steps starting at 10 ms
    return (bucket + 1) * 10


def velocity_from_bucket(bucket: int) -> int:
    return max(1, min(127, bucket * 4))
