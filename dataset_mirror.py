"""
Reference Networks - Dataset Mirror
Downloads every dataset CSV (reference matrices + entity lists) so the
viewer can run offline:

    python dataset_mirror.py [output_dir]
    REFMAP_DATA_DIR=<output_dir> python app.py

Sources: the three datasets in refmap/catalog.py, fetched from
REFMAP_DATA_BASE_URL.
=============================================================================
"""

import sys
import time
from datetime import datetime
from pathlib import Path

import requests

from refmap import config
from refmap.catalog import SOURCES
from refmap.loader import fetch_text


# Rate limiting helper
def rate_limit(seconds=1):
    time.sleep(seconds)


def mirror_file(filename, output_dir, base_url=None):
    """Fetch one CSV from the remote data folder and write it under output_dir."""
    url = f"{(base_url or config.DATA_BASE_URL).rstrip('/')}/{filename}"
    text = fetch_text(url)
    path = Path(output_dir) / filename
    path.write_text(text, encoding="utf-8")
    print(f"[OK] {filename}: {len(text.splitlines())} lines -> {path}")
    return path


def mirror_all(output_dir, base_url=None, pause=1):
    """
    Mirror every catalog file. Per-file failures are reported and skipped.
    Returns (written paths, failed filenames).
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    written, failed = [], []

    for source in SOURCES:
        print("\n" + "=" * 60)
        print(f"[DATA] Mirroring {source.label} dataset...")
        print("=" * 60)
        for filename in (source.matrix_file, source.list_file):
            try:
                written.append(mirror_file(filename, output_dir, base_url=base_url))
            except (requests.RequestException, OSError, UnicodeDecodeError) as e:
                print(f"[WARN] Error mirroring {filename}: {e}")
                failed.append(filename)
            if pause:
                rate_limit(pause)

    return written, failed


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    output_dir = argv[0] if argv else (config.DATA_DIR or "data")

    print("=" * 70)
    print("REFERENCE NETWORKS - DATASET MIRROR")
    print("=" * 70)
    print(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    written, failed = mirror_all(output_dir)

    print("\n" + "=" * 70)
    print("[OK] MIRROR COMPLETE!" if not failed else f"[WARN] MIRROR FINISHED WITH {len(failed)} FAILURE(S)")
    print("=" * 70)
    print(f"Files written: {len(written)} in {Path(output_dir).absolute()}")
    print(f"Run the viewer offline with: REFMAP_DATA_DIR={output_dir} python app.py")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
