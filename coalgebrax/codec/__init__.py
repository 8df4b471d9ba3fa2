"""Compact term codec.

Exports
- ``pack_codes`` / ``unpack_codes``: letter codes <-> ordered byte keys.
- ``split_key`` / ``concat_keys``: block operations on packed keys.
- ``BitsetCodec``: index subsets <-> fixed-width bitsets.
"""

from coalgebrax.codec.bitset import NIL_BITS, BitsetCodec
from coalgebrax.codec.packed import (
    SUPPORTED_DTYPES,
    code_width,
    concat_keys,
    key_length,
    max_code,
    pack_codes,
    split_key,
    unpack_codes,
)

__all__ = [
    "NIL_BITS",
    "BitsetCodec",
    "SUPPORTED_DTYPES",
    "code_width",
    "concat_keys",
    "key_length",
    "max_code",
    "pack_codes",
    "split_key",
    "unpack_codes",
]
