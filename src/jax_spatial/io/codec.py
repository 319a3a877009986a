"""Compact six-number encoding of poses.

Every pose, whatever its representation, is written as::

    [tx, ty, tz, rx, ry, rz]

where (rx, ry, rz) is the scaled axis of rotation. Values are converted to
plain Python floats, so the encoding is lossy in two ways:

* Derivative information carried by autodiff tracers does not survive; only
  concrete values can be encoded, and decoded poses are constants.
* A rotation comes back as the quaternion built from its scaled axis, which
  matches the encoded one up to the q / -q sign and 2π wraparound of the angle.

``encode``/``decode`` work on the bare 6-tuple. ``dumps``/``loads`` (JSON
array) and ``to_bytes``/``from_bytes`` (48 bytes, little-endian float64)
are thin carriers around them.
"""

import json
import numbers
from typing import Sequence, Tuple, Type, TypeVar

import jax
import numpy as np

from ..core.pose import Pose
from ..core.rotation import UnitQuaternion
from ..log import get_logger

logger = get_logger(__name__)

P = TypeVar("P", bound=Pose)

POSE_WIRE_LENGTH = 6
_WIRE_DTYPE = np.dtype("<f8")


class PoseDecodeError(ValueError):
    """Raised when serialized input is not exactly six numbers."""


def encode(pose: Pose) -> Tuple[float, ...]:
    """Encode a pose as (tx, ty, tz, rx, ry, rz) floats."""
    translation = np.asarray(pose.translation, dtype=np.float64)
    scaled_axis = np.asarray(pose.rotation.scaled_axis_of_rotation(), dtype=np.float64)
    return tuple(float(v) for v in np.concatenate([translation, scaled_axis]))


def decode(values: Sequence, pose_cls: Type[P]) -> P:
    """
    Rebuild a pose of type ``pose_cls`` from six numbers.

    Args:
        values: sequence of exactly six real numbers
        pose_cls: concrete pose class to build

    Returns:
        The decoded pose

    Raises:
        PoseDecodeError: if ``values`` does not hold exactly six real numbers
    """
    if isinstance(values, (np.ndarray, jax.Array)):
        # to Python scalars
        values = np.asarray(values).tolist()
    try:
        items = list(values)
    except TypeError as exc:
        logger.debug("pose_decode_rejected", reason="not_iterable", value_type=type(values).__name__)
        raise PoseDecodeError(f"expected a sequence of {POSE_WIRE_LENGTH} numbers") from exc

    if len(items) != POSE_WIRE_LENGTH:
        logger.debug("pose_decode_rejected", reason="length", length=len(items))
        raise PoseDecodeError(
            f"expected a tuple of size {POSE_WIRE_LENGTH}, got {len(items)} elements"
        )
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (numbers.Real, np.floating, np.integer)):
            logger.debug("pose_decode_rejected", reason="type", element=repr(item))
            raise PoseDecodeError(f"expected real numbers, got {item!r}")

    wire = np.asarray(items, dtype=np.float64)
    rotation = UnitQuaternion.from_scaled_axis_of_rotation(wire[3:])
    return pose_cls.from_translation_and_rotation(wire[:3], rotation)


def dumps(pose: Pose) -> str:
    """Encode a pose as a JSON array."""
    return json.dumps(list(encode(pose)))


def loads(text: str, pose_cls: Type[P]) -> P:
    """Decode a pose from a JSON array."""
    try:
        values = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.debug("pose_decode_rejected", reason="json", error=exc.msg)
        raise PoseDecodeError(f"invalid JSON: {exc.msg}") from exc
    if not isinstance(values, list):
        logger.debug("pose_decode_rejected", reason="json_type", value_type=type(values).__name__)
        raise PoseDecodeError(f"expected a JSON array, got {type(values).__name__}")
    return decode(values, pose_cls)


def to_bytes(pose: Pose) -> bytes:
    """Encode a pose as six little-endian float64 values."""
    return np.asarray(encode(pose), dtype=_WIRE_DTYPE).tobytes()


def from_bytes(data: bytes, pose_cls: Type[P]) -> P:
    """Decode a pose from six little-endian float64 values."""
    expected = POSE_WIRE_LENGTH * _WIRE_DTYPE.itemsize
    if len(data) != expected:
        logger.debug("pose_decode_rejected", reason="byte_length", length=len(data))
        raise PoseDecodeError(f"expected {expected} bytes, got {len(data)}")
    return decode(np.frombuffer(data, dtype=_WIRE_DTYPE).tolist(), pose_cls)
