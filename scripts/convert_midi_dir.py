#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Convert a tree of MIDI files into performance-token tensors.

Every .mid/.midi file under INPUT_DIR is encoded into the 388-token
performance vocabulary and saved with torch.save as a 1-D integer tensor:

  INPUT_DIR/a/b/song.mid  →  OUTPUT_DIR/a/b/song.mid.pt

Files that fail to parse or encode (sequential layout, SMPTE timing,
no tempo, corrupt data) are reported and skipped; the batch keeps going.
"""

import argparse
import os
import sys
from typing import List, Optional, Tuple

import numpy as np
import torch
from tqdm import tqdm

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
from performance.encoder import midi_file_to_tokens

MIDI_EXTENSIONS = (".mid", ".midi")

TORCH_DTYPES = {
    "int16": torch.int16,
    "int32": torch.int32,
    "int64": torch.int64,
}


def find_midi_files(input_dir: str) -> List[str]:
    """All MIDI files below input_dir, relative to it, in sorted order."""
    out = []
    for root, dirs, files in os.walk(input_dir):
        dirs.sort()
        for name in sorted(files):
            if name.lower().endswith(MIDI_EXTENSIONS):
                out.append(os.path.relpath(os.path.join(root, name), input_dir))
    return out


def output_path_for(rel_path: str, output_dir: str) -> str:
    return os.path.join(output_dir, rel_path + ".pt")


def save_tokens(tokens: List[int], out_path: str, dtype: torch.dtype = torch.int16) -> None:
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    arr = np.asarray(tokens, dtype=np.int64)
    torch.save(torch.from_numpy(arr).to(dtype), out_path)


def convert_file(in_path: str, out_path: str, dtype: torch.dtype = torch.int16) -> int:
    """Encode one file and save it; returns the number of tokens."""
    tokens = midi_file_to_tokens(in_path)
    save_tokens(tokens, out_path, dtype)
    return len(tokens)


def convert_directory(input_dir: str,
                      output_dir: str,
                      overwrite: bool = False,
                      dtype: torch.dtype = torch.int16,
                      show_progress: bool = True) -> Tuple[int, int, int]:
    """
    Convert every MIDI file under input_dir.

    Returns (converted, skipped_existing, failed).
    """
    rel_paths = find_midi_files(input_dir)
    converted = 0
    existing = 0
    failed = 0
    total_tokens = 0

    for rel in tqdm(rel_paths, desc="Encoding", unit="file", disable=not show_progress):
        in_path = os.path.join(input_dir, rel)
        out_path = output_path_for(rel, output_dir)
        if not overwrite and os.path.exists(out_path):
            existing += 1
            continue
        try:
            n = convert_file(in_path, out_path, dtype)
        except Exception as e:
            tqdm.write(f"Skipping {rel}: {e}", file=sys.stderr)
            failed += 1
            continue
        converted += 1
        total_tokens += n

    print("\n── Conversion Summary ──────────────────────")
    print(f"  Input:            {input_dir}")
    print(f"  Output:           {output_dir}")
    print(f"  MIDI files found: {len(rel_paths)}")
    print(f"  Converted:        {converted}")
    print(f"  Already existed:  {existing}")
    print(f"  Failed:           {failed}")
    if converted:
        print(f"  Avg tokens/file:  {total_tokens / converted:.0f}")
    print("────────────────────────────────────────────")
    return converted, existing, failed


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Encode MIDI files into performance-token tensors (.pt).")
    ap.add_argument("input_dir", help="Folder searched recursively for .mid/.midi files.")
    ap.add_argument("output_dir", help="Folder receiving <name>.pt files (same sub-folder layout).")
    ap.add_argument("--overwrite", action="store_true", help="Re-encode files whose .pt already exists.")
    ap.add_argument("--dtype", default="int16", choices=list(TORCH_DTYPES.keys()),
                    help="Integer dtype of the saved tensors (default: int16).")
    ap.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")
    args = ap.parse_args(argv)

    if not os.path.isdir(args.input_dir):
        print(f"ERROR: input directory not found: {args.input_dir}", file=sys.stderr)
        sys.exit(1)
    os.makedirs(args.output_dir, exist_ok=True)

    convert_directory(
        args.input_dir,
        args.output_dir,
        overwrite=args.overwrite,
        dtype=TORCH_DTYPES[args.dtype],
        show_progress=not args.no_progress,
    )
    print("done!")


if __name__ == "__main__":
    main()
