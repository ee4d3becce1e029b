"""Streaming content digests and snapshot file naming."""

import hashlib
from datetime import datetime
from pathlib import Path

# Read size for streaming digests
CHUNK_SIZE = 1024 * 1024


def calculate_file_hash(path: str | Path, chunk_size: int = CHUNK_SIZE) -> tuple[str, int]:
    """Compute the SHA-256 digest and byte length of a file.

    The file is read sequentially in chunks, so memory use does not
    depend on file size.

    Args:
        path: File to hash.
        chunk_size: Number of bytes read per iteration.

    Returns:
        Tuple of (lowercase hex digest, number of bytes read).

    Raises:
        OSError: If the file cannot be opened or read.
    """
    digest = hashlib.sha256()
    size = 0
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
            size += len(chunk)
    return digest.hexdigest(), size


def generate_snapshot_name(prefix: str = "snapshot", extension: str = "ndjson") -> str:
    """Generate a snapshot filename stamped with the local time.

    Args:
        prefix: Leading part of the name.
        extension: File extension without the dot.

    Returns:
        Name like ``snapshot.2024-05-15.14-30-45.ndjson``.
    """
    stamp = datetime.now().strftime("%Y-%m-%d.%H-%M-%S")
    return f"{prefix}.{stamp}.{extension}"
