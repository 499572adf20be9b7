import math

_BYTES_PER_MB = 1024 * 1024


def bytes_to_mb(size_bytes: int) -> float:
    """Convert a byte count to MB, rounded half-up to one decimal (e.g. 1572864 -> 1.5)."""
    return math.floor(size_bytes / _BYTES_PER_MB * 10 + 0.5) / 10
