"""Merge delta-timed MIDI tracks into one time-ordered stream."""

from typing import List

import numpy as np

from performance.errors import UnsupportedFormatError
from performance.midi_input import (
    FORMAT_PARALLEL,
    FORMAT_SEQUENTIAL,
    FORMAT_SINGLE,
    Track,
    TrackEvent,
)


def merge_parallel_tracks(tracks: List[Track]) -> Track:
    """
    Interleave simultaneous tracks by absolute tick.

    Each track's deltas are prefix-summed on their own, all events are sorted
    stably by absolute tick (ties keep track order, then position within the
    track) and the deltas are re-derived from the merged order.
    """
    events = [ev for track in tracks for ev in track]
    if not events:
        return []

    abs_ticks = np.concatenate([
        np.cumsum([ev.delta for ev in track], dtype=np.int64)
        for track in tracks if track
    ])
    order = np.argsort(abs_ticks, kind="stable")
    deltas = np.diff(abs_ticks[order], prepend=0)

    return [
        TrackEvent(int(d), events[int(i)].message)
        for i, d in zip(order, deltas)
    ]


def get_track(tracks: List[Track], track_format: str) -> Track:
    """Return the single stream the encoder consumes for a file layout."""
    if track_format == FORMAT_SINGLE:
        return list(tracks[0]) if tracks else []
    if track_format == FORMAT_PARALLEL:
        return merge_parallel_tracks(tracks)
    if track_format == FORMAT_SEQUENTIAL:
        raise UnsupportedFormatError("Sequential tracks not supported")
    raise UnsupportedFormatError(f"Unknown track format '{track_format}'")
