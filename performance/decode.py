"""Render performance tokens back into timed notes / a MIDI file."""

from typing import Dict, Iterable, List, Optional, Tuple

import pretty_midi

from performance.vocab import (
    NOTE_OFF,
    NOTE_ON,
    TIME_SHIFT,
    VELOCITY,
    index_to_event,
    timeshift_to_ms,
    velocity_from_bucket,
)

DEFAULT_VELOCITY = 64
# notes closed on the same tick they opened get one 10 ms step
MIN_NOTE_SEC = timeshift_to_ms(0) / 1000.0


def tokens_to_notes(tokens: Iterable[int]) -> List[pretty_midi.Note]:
    """
    Replay tokens into notes.

    NOTE_ON opens a note at the current time with the current velocity
    (closing an open note on the same key first), NOTE_OFF closes it.
    Notes still open at the end are closed at the final time.
    """
    cur_time = 0.0
    cur_vel = DEFAULT_VELOCITY
    open_notes: Dict[int, Tuple[float, int]] = {}
    notes: List[pretty_midi.Note] = []

    def _close(key: int, end: float) -> None:
        start, vel = open_notes.pop(key)
        end = max(end, start + MIN_NOTE_SEC)
        notes.append(pretty_midi.Note(velocity=vel, pitch=key, start=start, end=end))

    for tok in tokens:
        kind, value = index_to_event(tok)
        if kind == TIME_SHIFT:
            cur_time += timeshift_to_ms(value) / 1000.0
        elif kind == VELOCITY:
            cur_vel = velocity_from_bucket(value)
        elif kind == NOTE_ON:
            if value in open_notes:
                _close(value, cur_time)
            open_notes[value] = (cur_time, cur_vel)
        elif kind == NOTE_OFF:
            if value in open_notes:
                _close(value, cur_time)

    for key in sorted(open_notes):
        _close(key, cur_time)

    notes.sort(key=lambda n: (n.start, n.pitch))
    return notes


def tokens_to_midi(tokens: Iterable[int],
                   out_path: Optional[str] = None,
                   program: int = 0) -> pretty_midi.PrettyMIDI:
    pm = pretty_midi.PrettyMIDI()
    inst = pretty_midi.Instrument(program=program, name="performance")
    inst.notes.extend(tokens_to_notes(tokens))
    pm.instruments.append(inst)
    if out_path is not None:
        pm.write(out_path)
    return pm
