from __future__ import annotations
import csv
from pathlib import Path


def append_row(path: Path, fieldnames: list[str], row: dict):
    """Append one row with every field quoted; write the header first if the file is new."""
    path.parent.mkdir(parents=True, exist_ok=True)
    new = not path.exists()
    with path.open("a", newline="", encoding="utf-8") as f:
        if new:
            f.write(",".join(fieldnames) + "\n")
        w = csv.DictWriter(f, fieldnames=fieldnames, restval="", extrasaction="ignore",
                           quoting=csv.QUOTE_ALL, lineterminator="\n")
        w.writerow({k: ("" if row.get(k) is None else row.get(k)) for k in fieldnames})
