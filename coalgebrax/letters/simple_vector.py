"""Words over non-negative integer letters.

The smallest algebra that exercises the whole engine: letters are plain
ints, terms are tuples of ints. The coproduct lives in the Lie coalgebra,
so ``comultiply`` reduces to the Lyndon basis and wedges the parts.
"""

from __future__ import annotations

from typing import Iterable, Sequence, override

from coalgebrax.codec.packed import max_code
from coalgebrax.errors import ContractViolation
from coalgebrax.hopf_algebras.coalgebra import (
    CoproductFlavor,
    coexpr_type_for,
    register_coexpr_type,
)
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, WordParam


class SimpleVectorParam(WordParam[int]):
    code_dtype = ">u2"
    coproduct_is_lie_algebra = True

    @override
    def letter_to_code(self, letter: int) -> int:
        if not isinstance(letter, int) or isinstance(letter, bool):
            raise ContractViolation(f"Simple vector letters must be ints, got {letter!r}.")
        if not 0 <= letter <= max_code(self.code_dtype):
            raise ContractViolation(
                f"Letter {letter} is outside [0, {max_code(self.code_dtype)}]."
            )
        return letter

    @override
    def code_to_letter(self, code: int) -> int:
        return code

    @override
    def object_to_string(self, obj: tuple[int, ...]) -> str:
        return "(" + ", ".join(str(x) for x in obj) + ")"


class SimpleVectorExpr(Linear[tuple[int, ...], bytes]):
    __slots__ = ()
    param = SimpleVectorParam()


class SimpleVectorICoExpr(Linear[tuple[tuple[int, ...], ...], tuple[bytes, ...]]):
    __slots__ = ()
    param = CoExprParam(SimpleVectorExpr.param, 2, lie_algebra=True, iterated=True)


class SimpleVectorCoExpr(Linear[tuple[tuple[int, ...], ...], tuple[bytes, ...]]):
    __slots__ = ()
    param = CoExprParam(SimpleVectorExpr.param, 2, lie_algebra=True, iterated=False)


register_coexpr_type(SimpleVectorExpr, CoproductFlavor.ITERATED, SimpleVectorICoExpr)
register_coexpr_type(SimpleVectorExpr, CoproductFlavor.NORMAL, SimpleVectorCoExpr)


def SV(word: Iterable[int]) -> SimpleVectorExpr:
    return SimpleVectorExpr.single(tuple(word))


def CoSV(parts: Sequence[Iterable[int]]) -> Linear:
    """Single co-term of the normal co-expression with ``len(parts)`` parts, stored as given."""
    coexpr_type = coexpr_type_for(SimpleVectorExpr, CoproductFlavor.NORMAL, len(parts))
    return coexpr_type.single(tuple(tuple(part) for part in parts))
