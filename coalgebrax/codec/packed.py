"""Packed keys: tensor words as fixed-width big-endian byte strings.

Every letter of a word is mapped to a non-negative integer code and the codes
are laid out with a fixed-width big-endian ``numpy`` dtype. Because of the
big-endian layout, byte-wise comparison of two keys coincides with
lexicographic comparison of their code sequences (a proper prefix sorts
first), so ``bytes`` can serve directly as hashable, ordered map keys.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from coalgebrax.errors import ContractViolation

SUPPORTED_DTYPES: tuple[str, ...] = (">u1", ">u2", ">u4")


def _checked_dtype(dtype: str) -> np.dtype:
    if dtype not in SUPPORTED_DTYPES:
        raise ContractViolation(
            f"Unsupported code dtype {dtype!r}; expected one of {SUPPORTED_DTYPES}."
        )
    return np.dtype(dtype)


def code_width(dtype: str) -> int:
    """Number of bytes used by one letter code."""
    return _checked_dtype(dtype).itemsize


def max_code(dtype: str) -> int:
    """Largest letter code representable with ``dtype``."""
    return int(np.iinfo(_checked_dtype(dtype)).max)


def pack_codes(codes: Iterable[int], dtype: str = ">u2") -> bytes:
    """Packs letter codes into a key.

    Raises ``ContractViolation`` if a code does not fit into ``dtype``;
    codes are never truncated.
    """
    np_dtype = _checked_dtype(dtype)
    arr = np.fromiter(codes, dtype=np.int64)
    if arr.size == 0:
        return b""
    lo = int(arr.min())
    hi = int(arr.max())
    if lo < 0 or hi > np.iinfo(np_dtype).max:
        raise ContractViolation(
            f"Letter code out of range for {dtype}: codes span [{lo}, {hi}]."
        )
    return arr.astype(np_dtype).tobytes()


def unpack_codes(key: bytes, dtype: str = ">u2") -> tuple[int, ...]:
    """Inverse of ``pack_codes``."""
    np_dtype = _checked_dtype(dtype)
    if len(key) % np_dtype.itemsize:
        raise ContractViolation(
            f"Key of {len(key)} bytes is not a whole number of {dtype} codes."
        )
    return tuple(np.frombuffer(key, dtype=np_dtype).tolist())


def key_length(key: bytes, dtype: str = ">u2") -> int:
    """Number of letters in a packed key, without decoding it."""
    return len(key) // code_width(dtype)


def split_key(key: bytes, sizes: Sequence[int], dtype: str = ">u2") -> tuple[bytes, ...]:
    """Cuts a key into contiguous blocks with the given letter counts."""
    width = code_width(dtype)
    if sum(sizes) * width != len(key):
        raise ContractViolation(
            f"Cannot split a key of {len(key) // width} letters into blocks {tuple(sizes)}."
        )
    blocks: list[bytes] = []
    start = 0
    for size in sizes:
        stop = start + size * width
        blocks.append(key[start:stop])
        start = stop
    return tuple(blocks)


def concat_keys(*keys: bytes) -> bytes:
    return b"".join(keys)
