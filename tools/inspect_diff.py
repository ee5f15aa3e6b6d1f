# tools/inspect_diff.py
"""
Print the raw character diff and the final edit spans for one correction.
-------------------------------------------------------------
Run (after `pip install -e .`):
    $ python tools/inspect_diff.py "I want to flyed" "I want to fly"
"""

from __future__ import annotations
import sys

from teach.diff_utils import DELETE, INSERT, compute_edit_spans, diff_ops

OP_NAMES = {DELETE: "DELETE", INSERT: "INSERT"}


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print(__doc__)
        return 2
    original, corrected = argv

    print("Diff ops:")
    pos = 0
    for idx, (op, text) in enumerate(diff_ops(original, corrected)):
        print(f"[{idx}] {OP_NAMES.get(op, 'EQUAL'):<6} at pos {pos}: {text!r}")
        if op != INSERT:
            pos += len(text)

    print("\nEdit spans:")
    spans = compute_edit_spans(original, corrected)
    for s in spans:
        print(f"  {s.start:>3}-{s.end:<3} {s.original!r} → {s.corrected!r}")
    if not spans:
        print("  (none)")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
