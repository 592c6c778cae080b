"""Embedding <-> BLOB codec.

Vectors are stored as a packed little-endian float32 array.  Rows written
by the older text format (comma-separated fixed-point decimals such as
``0.123400,-0.500000``) are still readable.

Decoding never raises: an empty or malformed blob decodes to an empty
vector, which leaves the record readable but out of the search pool.
"""

import logging
import re
from typing import Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)

_DTYPE = np.dtype("<f4")
# the older writer used fixed-point "%f": always a "." and exactly six decimals
_LEGACY_ELEMENT = rb"-?\d+\.\d{6}"
_LEGACY_TEXT = re.compile(_LEGACY_ELEMENT + rb"(?:," + _LEGACY_ELEMENT + rb")*")


def encode_embedding(vector: Optional[Sequence[float]]) -> bytes:
    if vector is None or len(vector) == 0:
        return b""
    return np.asarray(vector, dtype=_DTYPE).tobytes()


def decode_embedding(blob: Optional[bytes]) -> list[float]:
    if not blob:
        return []
    blob = bytes(blob)
    if _LEGACY_TEXT.fullmatch(blob):
        return _decode_legacy_text(blob)
    if len(blob) % _DTYPE.itemsize:
        logger.debug("Embedding blob of %d bytes is not a float32 array; ignoring", len(blob))
        return []
    values = np.frombuffer(blob, dtype=_DTYPE)
    if not np.all(np.isfinite(values)):
        logger.debug("Embedding blob contains non-finite values; ignoring")
        return []
    return values.astype(float).tolist()


def _decode_legacy_text(blob: bytes) -> list[float]:
    try:
        values = np.array([float(part) for part in blob.decode("ascii").split(",")], dtype=_DTYPE)
    except ValueError:
        logger.debug("Unparseable text embedding blob; ignoring")
        return []
    if not np.all(np.isfinite(values)):
        return []
    return values.astype(float).tolist()
