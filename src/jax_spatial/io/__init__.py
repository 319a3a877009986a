"""Pose serialization.

This module provides the compact six-number pose encoding and its text and
binary carriers.
"""

from .codec import (
    POSE_WIRE_LENGTH,
    PoseDecodeError,
    decode,
    dumps,
    encode,
    from_bytes,
    loads,
    to_bytes,
)

__all__ = [
    "POSE_WIRE_LENGTH",
    "PoseDecodeError",
    "decode",
    "dumps",
    "encode",
    "from_bytes",
    "loads",
    "to_bytes",
]
