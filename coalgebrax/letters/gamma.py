"""Plücker coordinates as bitset letters.

A ``Gamma`` is a ``d x d`` minor of a ``d x n`` matrix, identified by the
set of columns it uses. Columns are 1-based and packed into a bitset, so
a minor with a repeated column is nil and every term containing it
vanishes. Minors of different size never mix in one expression.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, override

from coalgebrax.codec.bitset import NIL_BITS, BitsetCodec
from coalgebrax.codec.packed import unpack_codes
from coalgebrax.errors import ContractViolation
from coalgebrax.hopf_algebras.coalgebra import CoproductFlavor, register_coexpr_type
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, OrderingPolicy, WordParam

MAX_GAMMA_VARIABLES = 16

_CODEC = BitsetCodec(MAX_GAMMA_VARIABLES)


@dataclass(frozen=True, order=True)
class Gamma:
    """Minor over the columns set in ``bits``. Ordered by the bitset value."""

    bits: int = NIL_BITS

    @classmethod
    def from_indices(cls, indices: Iterable[int]) -> Gamma:
        return cls(_CODEC.encode(indices))

    def is_nil(self) -> bool:
        return self.bits == NIL_BITS

    def index_vector(self) -> tuple[int, ...]:
        return _CODEC.decode(self.bits)

    @property
    def dimension(self) -> int:
        return BitsetCodec.popcount(self.bits)

    def __str__(self) -> str:
        return "(" + ",".join(str(i) for i in self.index_vector()) + ")"


class GammaExprParam(WordParam[Gamma]):
    code_dtype = _CODEC.dtype
    coproduct_is_lie_algebra = True

    @override
    def letter_to_code(self, letter: Gamma) -> int:
        return letter.bits

    @override
    def code_to_letter(self, code: int) -> Gamma:
        return Gamma(code)

    @override
    def is_nil_letter(self, letter: Gamma) -> bool:
        return letter.is_nil()

    @override
    def object_to_dimension(self, obj: tuple[Gamma, ...]) -> int:
        if not obj:
            raise ContractViolation("Dimension of an empty Gamma term is undefined.")
        dimensions = {g.dimension for g in obj}
        if len(dimensions) > 1:
            raise ContractViolation(
                f"Gamma term mixes minors of sizes {sorted(dimensions)}: "
                f"{self.object_to_string(obj)}"
            )
        return dimensions.pop()

    @override
    def key_to_dimension(self, key: bytes) -> int:
        dimensions = {BitsetCodec.popcount(code) for code in unpack_codes(key, self.code_dtype)}
        if len(dimensions) != 1:
            return self.object_to_dimension(self.key_to_object(key))
        return dimensions.pop()


class GammaExpr(Linear[tuple[Gamma, ...], bytes]):
    __slots__ = ()
    param = GammaExprParam()


class GammaICoExpr(Linear):
    __slots__ = ()
    param = CoExprParam(GammaExpr.param, 2, lie_algebra=True, iterated=True)


class GammaNCoExpr(Linear):
    __slots__ = ()
    param = CoExprParam(GammaExpr.param, 2, lie_algebra=True, iterated=False)


# Longer parts first: a glued pair leads, then the single letters.
class GammaACoExpr(Linear):
    __slots__ = ()
    param = CoExprParam(
        GammaExpr.param,
        2,
        lie_algebra=True,
        iterated=True,
        ordering=OrderingPolicy.LENGTH_DESC,
    )


register_coexpr_type(GammaExpr, CoproductFlavor.ITERATED, GammaICoExpr)
register_coexpr_type(GammaExpr, CoproductFlavor.NORMAL, GammaNCoExpr)
register_coexpr_type(GammaExpr, CoproductFlavor.GLUED, GammaACoExpr)


def G(vars: Iterable[int]) -> GammaExpr:
    """Single minor. A repeated column gives the zero expression."""
    g = Gamma.from_indices(vars)
    return GammaExpr() if g.is_nil() else GammaExpr.single((g,))


def substitute_variables(expr: GammaExpr, new_points: Sequence[int]) -> GammaExpr:
    """Renames column ``i`` to ``new_points[i - 1]`` in every minor.

    Minors that collapse (two columns mapped to the same point) kill their term.
    """

    def _substitute(term: tuple[Gamma, ...]) -> GammaExpr:
        new_term = []
        for g in term:
            indices = g.index_vector()
            if indices and indices[-1] > len(new_points):
                raise ContractViolation(
                    f"Column {indices[-1]} has no substitute among {len(new_points)} points."
                )
            new_g = Gamma.from_indices(new_points[i - 1] for i in indices)
            if new_g.is_nil():
                return GammaExpr()
            new_term.append(new_g)
        return GammaExpr.single(tuple(new_term))

    return expr.mapped_expanding(_substitute).without_annotations()


def terms_with_unique_multiples(expr: GammaExpr) -> GammaExpr:
    """Keeps terms in which no minor occurs twice."""
    return expr.filtered(lambda term: len(set(term)) == len(term))
