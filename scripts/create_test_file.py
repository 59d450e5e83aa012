"""Create a file of random bytes for ingestion tests and benchmarks.

Usage:
  python -m scripts.create_test_file --output ./test_file.bin --size-mb 200
"""

import argparse
import os
import time
from pathlib import Path

PIECE_SIZE = 1024 * 1024


def create_test_file(path: Path, size_bytes: int, piece_size: int = PIECE_SIZE) -> int:
    """Write ``size_bytes`` random bytes to ``path`` in ``piece_size`` pieces.

    Returns:
        Number of bytes written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with path.open("wb") as handle:
        while written < size_bytes:
            size = min(piece_size, size_bytes - written)
            handle.write(os.urandom(size))
            written += size
    return written


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a random-bytes test file")
    parser.add_argument("--output", type=Path, default=Path("./test_file.bin"))
    parser.add_argument("--size-mb", type=float, default=200.0)
    args = parser.parse_args()

    start = time.perf_counter()
    written = create_test_file(args.output, int(args.size_mb * 1024 * 1024))
    elapsed = time.perf_counter() - start

    print(f"Created: {args.output}")
    print(f"Size:    {written} bytes")
    print(f"Elapsed: {elapsed * 1000:.0f} ms")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
