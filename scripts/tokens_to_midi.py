#!/usr/bin/env python3
"""Render a saved performance-token tensor (.pt) back to a MIDI file.

Handy for listening to what the encoder kept: pedal releases become explicit
note ends, timing is snapped to 10 ms, velocities to steps of 4.
"""

import argparse
import os
import sys
from typing import List, Optional

import torch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from performance.decode import tokens_to_midi


def load_tokens(path: str) -> List[int]:
    t = torch.load(path, map_location="cpu")
    return [int(x) for x in t.reshape(-1).tolist()]


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Decode a performance-token tensor into a MIDI file.")
    ap.add_argument("tokens", help="Path to a .pt file written by convert_midi_dir.py")
    ap.add_argument("out_midi", help="Output .mid path")
    ap.add_argument("--program", type=int, default=0, help="GM program for the output track (default: 0, piano)")
    args = ap.parse_args(argv)

    if not os.path.isfile(args.tokens):
        print(f"ERROR: token file not found: {args.tokens}", file=sys.stderr)
        sys.exit(1)

    tokens = load_tokens(args.tokens)
    pm = tokens_to_midi(tokens, args.out_midi, program=args.program)
    n_notes = sum(len(inst.notes) for inst in pm.instruments)
    print(f"Decoded {len(tokens)} tokens → {n_notes} notes ({pm.get_end_time():.1f}s)")
    print(f"Wrote MIDI → {args.out_midi}")


if __name__ == "__main__":
    main()
