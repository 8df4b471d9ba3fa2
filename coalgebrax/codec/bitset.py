"""Index subsets packed into fixed-width integers."""

from __future__ import annotations

from typing import Iterable

from coalgebrax.config import get_config
from coalgebrax.errors import ContractViolation

NIL_BITS = 0


class BitsetCodec:
    """Bijection between small index sets and integers.

    Index ``i`` is stored in bit ``i - offset``. The empty set encodes to
    ``NIL_BITS`` and so does any set with a repeated index: both denote a
    degenerate construction (e.g. a minor with a repeated column). An index
    outside ``[offset, offset + max_variables)`` is a contract violation,
    since silently dropping it would change the letter.

    Parameters
    ----------
    max_variables : int, optional
        Alphabet bound. Defaults to ``EngineConfig.max_bitset_variables``.
    offset : int, default=1
        Smallest representable index.
    """

    def __init__(self, max_variables: int | None = None, offset: int = 1):
        if max_variables is None:
            max_variables = get_config().max_bitset_variables
        if not 1 <= max_variables <= 32:
            raise ContractViolation(
                f"Bitset width must be in [1, 32], got {max_variables}."
            )
        self.max_variables = max_variables
        self.offset = offset

    @property
    def dtype(self) -> str:
        """Packed code dtype wide enough for every bitset of this codec."""
        return ">u2" if self.max_variables <= 16 else ">u4"

    def encode(self, indices: Iterable[int]) -> int:
        bits = NIL_BITS
        for index in indices:
            pos = index - self.offset
            if not 0 <= pos < self.max_variables:
                raise ContractViolation(
                    f"Index {index} does not fit into a bitset of {self.max_variables} "
                    f"variables starting at {self.offset}."
                )
            mask = 1 << pos
            if bits & mask:
                return NIL_BITS
            bits |= mask
        return bits

    def decode(self, bits: int) -> tuple[int, ...]:
        """Sorted indices stored in ``bits``."""
        indices: list[int] = []
        pos = 0
        while bits:
            if bits & 1:
                indices.append(pos + self.offset)
            bits >>= 1
            pos += 1
        return tuple(indices)

    @staticmethod
    def popcount(bits: int) -> int:
        return bin(bits).count("1")
