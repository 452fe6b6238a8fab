"""
Performance-event encoder.

Turns a linearized MIDI stream into NOTE_ON / NOTE_OFF / TIME_SHIFT / VELOCITY
events:

  • Time gaps are cut into chunks of at most one second and quantized into
    10 ms buckets. Gaps separated only by messages that emit nothing are
    merged into the TIME_SHIFT already written for the previous gap.
  • A key release while the sustain pedal (CC64) is down is deferred; the
    NOTE_OFF is written when the pedal comes up, or just before the same key
    is struck again.
  • Pressing a key that is already sounding re-triggers it (VELOCITY, NOTE_ON
    again, no NOTE_OFF in between).

Pipeline: header + tracks → get_track → ticks_per_second → PerformanceEncoder.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from performance.linearize import get_track
from performance.midi_input import (
    Controller,
    MidiHeader,
    NoteOff,
    NoteOn,
    Other,
    Tempo,
    Track,
    TrackEvent,
    load_midi,
)
from performance.tempo import ticks_per_second
from performance.vocab import (
    VELOCITY_BUCKETS,
    PerformanceEvent,
    events_to_indices,
    note_off,
    note_on,
    time_shift,
    velocity,
)

SUSTAIN_CONTROLLER = 64
PEDAL_THRESHOLD    = 64  # CC64 values >= this mean "pedal down"


# -------------- QUANTIZATION --------------
def ticks_to_timeshift(ticks: int, ticks_per_sec: int) -> int:
    """Bucket for a gap of 1..ticks_per_sec ticks (10 ms steps, zero-indexed)."""
    return (ticks * 100 - 50) // ticks_per_sec


def quantize_velocity(vel: int) -> int:
    return min(int(vel) // 4, VELOCITY_BUCKETS - 1)


# -------------- STATE --------------
@dataclass
class EncoderState:
    pedal_down: bool = False
    notes_on: Set[int] = field(default_factory=set)
    sustained_notes: Set[int] = field(default_factory=set)
    # ticks of the last TIME_SHIFT chunk while it is still open for merging
    pending_ticks: Optional[int] = None
    # output position of that TIME_SHIFT
    time_slot: Optional[int] = None

    @property
    def merging_time(self) -> bool:
        return self.time_slot is not None

    def close_time_slot(self) -> None:
        self.pending_ticks = None
        self.time_slot = None

    def is_consistent(self) -> bool:
        if not self.sustained_notes <= self.notes_on:
            return False
        return self.pedal_down or not self.sustained_notes


# -------------- ENCODER --------------
class PerformanceEncoder:
    """Single-use encoder for one piece; feed messages in stream order."""

    def __init__(self, ticks_per_sec: int):
        if ticks_per_sec <= 0:
            raise ValueError(f"ticks_per_sec must be positive, got {ticks_per_sec}")
        self.ticks_per_sec = int(ticks_per_sec)
        self.state = EncoderState()
        self.events: List[PerformanceEvent] = []

    def encode(self, stream: Iterable[TrackEvent]) -> List[PerformanceEvent]:
        for ev in stream:
            self.feed(ev)
        return list(self.events)

    def feed(self, ev: TrackEvent) -> None:
        if ev.delta > 0:
            self._advance_time(ev.delta)

        n_before = len(self.events)
        self._handle_message(ev.message)
        if len(self.events) > n_before:
            self.state.close_time_slot()

    # ---- time ----
    def _advance_time(self, delta: int) -> None:
        st = self.state
        ticks = delta + (st.pending_ticks or 0)

        chunk = 0
        while ticks > 0:
            chunk = min(ticks, self.ticks_per_sec)
            ev = time_shift(ticks_to_timeshift(chunk, self.ticks_per_sec))
            if st.merging_time:
                self.events[st.time_slot] = ev
                st.close_time_slot()
            else:
                self.events.append(ev)
            ticks -= chunk

        st.pending_ticks = chunk
        st.time_slot = len(self.events) - 1

    # ---- messages ----
    def _handle_message(self, msg) -> None:
        if isinstance(msg, NoteOn) and msg.velocity > 0:
            self._press(msg.key, msg.velocity)
        elif isinstance(msg, (NoteOn, NoteOff)):
            # note_on with velocity 0 is a release too
            self._release(msg.key)
        elif isinstance(msg, Controller):
            if msg.number == SUSTAIN_CONTROLLER:
                self._pedal(msg.value)
        elif isinstance(msg, (Tempo, Other)):
            pass
        else:
            raise TypeError(f"Unexpected message {msg!r}")

    def _press(self, key: int, vel: int) -> None:
        st = self.state
        if key in st.sustained_notes:
            st.sustained_notes.discard(key)
            st.notes_on.discard(key)
            self.events.append(note_off(key))
        self.events.append(velocity(quantize_velocity(vel)))
        self.events.append(note_on(key))
        st.notes_on.add(key)

    def _release(self, key: int) -> None:
        st = self.state
        if st.pedal_down:
            if key in st.notes_on:
                st.sustained_notes.add(key)
        elif key in st.notes_on:
            st.notes_on.remove(key)
            self.events.append(note_off(key))

    def _pedal(self, value: int) -> None:
        st = self.state
        if st.pedal_down and value < PEDAL_THRESHOLD:
            for key in sorted(st.sustained_notes):
                st.notes_on.discard(key)
                self.events.append(note_off(key))
            st.sustained_notes.clear()
        st.pedal_down = value >= PEDAL_THRESHOLD


# -------------- PIPELINE --------------
def midi_to_events(header: MidiHeader, tracks: List[Track]) -> List[PerformanceEvent]:
    stream = get_track(tracks, header.track_format)
    tps = ticks_per_second(stream, header.ticks_per_quarter)
    return PerformanceEncoder(tps).encode(stream)


def midi_to_tokens(header: MidiHeader, tracks: List[Track]) -> List[int]:
    return events_to_indices(midi_to_events(header, tracks))


def midi_file_to_tokens(path: str) -> List[int]:
    header, tracks = load_midi(path)
    return midi_to_tokens(header, tracks)
