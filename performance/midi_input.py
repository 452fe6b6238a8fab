"""
Timed MIDI messages as seen by the performance encoder.

mido does the binary parsing; this module only flattens what it returns into
a small set of message kinds and a header:

  NoteOn(key, velocity)   note_on
  NoteOff(key, velocity)  note_off
  Controller(number, value)  control_change
  Tempo(us_per_quarter)   meta set_tempo
  Other(kind)             everything else (program changes, track names, ...)

Each message travels with the delta (in ticks) since the previous message of
its own track. Channels are dropped.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import mido

# -------------- TRACK LAYOUT --------------
FORMAT_SINGLE     = "single"      # SMF type 0
FORMAT_PARALLEL   = "parallel"    # SMF type 1
FORMAT_SEQUENTIAL = "sequential"  # SMF type 2

SMF_TYPE_TO_FORMAT = {
    0: FORMAT_SINGLE,
    1: FORMAT_PARALLEL,
    2: FORMAT_SEQUENTIAL,
}


# -------------- MESSAGES --------------
@dataclass(frozen=True)
class NoteOn:
    key: int
    velocity: int


@dataclass(frozen=True)
class NoteOff:
    key: int
    velocity: int = 0


@dataclass(frozen=True)
class Controller:
    number: int
    value: int


@dataclass(frozen=True)
class Tempo:
    us_per_quarter: int


@dataclass(frozen=True)
class Other:
    kind: str = "other"


Message = Union[NoteOn, NoteOff, Controller, Tempo, Other]


@dataclass(frozen=True)
class TrackEvent:
    delta: int
    message: Message


Track = List[TrackEvent]


@dataclass(frozen=True)
class MidiHeader:
    track_format: str
    # None when the file uses SMPTE timecode instead of ticks per quarter note
    ticks_per_quarter: Optional[int]

    @property
    def is_metrical(self) -> bool:
        return self.ticks_per_quarter is not None


# -------------- MIDO ADAPTER --------------
def convert_message(msg) -> Message:
    """Map one mido message (or meta message) onto our message kinds."""
    if msg.type == "note_on":
        return NoteOn(int(msg.note), int(msg.velocity))
    if msg.type == "note_off":
        return NoteOff(int(msg.note), int(msg.velocity))
    if msg.type == "control_change":
        return Controller(int(msg.control), int(msg.value))
    if msg.type == "set_tempo":
        return Tempo(int(msg.tempo))
    return Other(msg.type)


def convert_track(track) -> Track:
    return [TrackEvent(int(msg.time), convert_message(msg)) for msg in track]


def _division_to_ticks(division: int) -> Optional[int]:
    # mido unpacks the division word as signed; SMPTE divisions have the high bit set
    if division <= 0 or division & 0x8000:
        return None
    return int(division)


def from_mido(mid: mido.MidiFile) -> Tuple[MidiHeader, List[Track]]:
    track_format = SMF_TYPE_TO_FORMAT.get(int(mid.type))
    if track_format is None:
        raise ValueError(f"Unknown MIDI file type {mid.type}")
    header = MidiHeader(
        track_format=track_format,
        ticks_per_quarter=_division_to_ticks(int(mid.ticks_per_beat)),
    )
    return header, [convert_track(t) for t in mid.tracks]


def load_midi(path: str) -> Tuple[MidiHeader, List[Track]]:
    """Parse a Standard MIDI File into (header, tracks)."""
    return from_mido(mido.MidiFile(path))
