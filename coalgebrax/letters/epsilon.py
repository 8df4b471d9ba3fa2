"""Epsilon letters and formal polylogarithm symbols.

A term of ``EpsilonExpr`` is an ``EpsilonPack``, one of

- a product of letters, each either a variable ``x_i`` or a complement
  ``(1 - x_i x_j ...)``; the empty product is the unity, or
- a formal symbol ``LiParam`` that does not decompose into letters.

Every consumer of a pack (codec, weight, rendering, tensor product, vector
form) dispatches on both shapes explicitly and fails on anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, assert_never, override

from coalgebrax.codec.bitset import NIL_BITS, BitsetCodec
from coalgebrax.codec.packed import concat_keys, key_length, pack_codes, split_key, unpack_codes
from coalgebrax.errors import ContractViolation
from coalgebrax.hopf_algebras.coalgebra import CoproductFlavor, register_coexpr_type
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, ExprParam, OrderingPolicy

MAX_EPSILON_VARIABLES = 16

_CODEC = BitsetCodec(MAX_EPSILON_VARIABLES)
_CODE_DTYPE = ">u4"
_COMPLEMENT_FLAG = 1 << 16

PRODUCT_TAG = 0
FORMAL_SYMBOL_TAG = 1


@dataclass(frozen=True, order=True)
class EpsilonVar:
    idx: int

    def __post_init__(self) -> None:
        if not 1 <= self.idx < _COMPLEMENT_FLAG:
            raise ContractViolation(
                f"Variable index must be in [1, {_COMPLEMENT_FLAG}), got {self.idx}."
            )

    def __str__(self) -> str:
        return f"x{self.idx}"


@dataclass(frozen=True, order=True)
class EpsilonComplement:
    """``1 - prod(x_i)`` over the indices set in ``bits``. Empty set is nil."""

    bits: int

    def is_nil(self) -> bool:
        return self.bits == NIL_BITS

    def index_vector(self) -> tuple[int, ...]:
        return _CODEC.decode(self.bits)

    def __str__(self) -> str:
        return "(1 - " + "".join(f"x{i}" for i in self.index_vector()) + ")"


Epsilon = EpsilonVar | EpsilonComplement


@dataclass(frozen=True, order=True)
class LiParam:
    """Parameters of a formal ``Li`` symbol.

    Parameters
    ----------
    foreweight : int
        Number of leading zero dots, at least 1.
    weights : tuple of int
        Weight of every argument group, each at least 1.
    points : tuple of tuple of int
        Variables multiplied in each argument group.
    """

    foreweight: int
    weights: tuple[int, ...]
    points: tuple[tuple[int, ...], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "weights", tuple(self.weights))
        object.__setattr__(self, "points", tuple(tuple(p) for p in self.points))
        if self.foreweight < 1:
            raise ContractViolation(f"Foreweight must be >= 1, got {self.foreweight}.")
        if len(self.weights) != len(self.points):
            raise ContractViolation(
                f"LiParam needs one point group per weight, got {self.weights} and {self.points}."
            )
        if any(w < 1 for w in self.weights):
            raise ContractViolation(f"LiParam weights must be positive, got {self.weights}.")

    @property
    def total_weight(self) -> int:
        return self.foreweight + sum(self.weights)

    def __str__(self) -> str:
        weights = "_".join(str(w) for w in self.weights)
        points = ", ".join("".join(f"x{i}" for i in group) for group in self.points)
        return f"Li{self.foreweight}_{weights}({points})"


EpsilonPack = tuple[Epsilon, ...] | LiParam
EpsilonKey = tuple[int, bytes] | tuple[int, tuple]


def _epsilon_to_code(letter: Epsilon) -> int:
    if isinstance(letter, EpsilonVar):
        return letter.idx
    elif isinstance(letter, EpsilonComplement):
        return _COMPLEMENT_FLAG | letter.bits
    else:
        assert_never(letter)


def _code_to_epsilon(code: int) -> Epsilon:
    if code & _COMPLEMENT_FLAG:
        return EpsilonComplement(code & (_COMPLEMENT_FLAG - 1))
    return EpsilonVar(code)


class EpsilonExprParam(ExprParam[EpsilonPack, EpsilonKey]):
    """Hopf algebra of epsilon products and formal symbols.

    Keys are tagged: ``(PRODUCT_TAG, packed letter codes)`` or
    ``(FORMAL_SYMBOL_TAG, (foreweight, weights, points))``. Products sort
    before formal symbols. Tensor product and vector form exist only for
    products.
    """

    @override
    def object_to_key(self, obj: EpsilonPack) -> EpsilonKey:
        if isinstance(obj, tuple):
            return (PRODUCT_TAG, pack_codes((_epsilon_to_code(e) for e in obj), _CODE_DTYPE))
        elif isinstance(obj, LiParam):
            return (FORMAL_SYMBOL_TAG, (obj.foreweight, obj.weights, obj.points))
        else:
            assert_never(obj)

    @override
    def key_to_object(self, key: EpsilonKey) -> EpsilonPack:
        tag, payload = key
        if tag == PRODUCT_TAG:
            return tuple(_code_to_epsilon(code) for code in unpack_codes(payload, _CODE_DTYPE))
        if tag == FORMAL_SYMBOL_TAG:
            return LiParam(*payload)
        raise ContractViolation(f"Unknown epsilon pack tag {tag!r}.")

    @override
    def object_to_weight(self, obj: EpsilonPack) -> int:
        if isinstance(obj, tuple):
            return len(obj)
        elif isinstance(obj, LiParam):
            return obj.total_weight
        else:
            assert_never(obj)

    @override
    def object_to_string(self, obj: EpsilonPack) -> str:
        if isinstance(obj, tuple):
            return " ⊗ ".join(str(e) for e in obj) if obj else "1"
        elif isinstance(obj, LiParam):
            return str(obj)
        else:
            assert_never(obj)

    @override
    def is_nil(self, obj: EpsilonPack) -> bool:
        if isinstance(obj, tuple):
            return any(isinstance(e, EpsilonComplement) and e.is_nil() for e in obj)
        elif isinstance(obj, LiParam):
            return False
        else:
            assert_never(obj)

    @override
    def key_to_weight(self, key: EpsilonKey) -> int:
        tag, payload = key
        if tag == PRODUCT_TAG:
            return key_length(payload, _CODE_DTYPE)
        return self.object_to_weight(self.key_to_object(key))

    @override
    def monom_tensor_product(self, lhs: EpsilonKey, rhs: EpsilonKey) -> EpsilonKey:
        if lhs[0] != PRODUCT_TAG or rhs[0] != PRODUCT_TAG:
            raise ContractViolation("Tensor product for formal symbols is not defined.")
        return (PRODUCT_TAG, concat_keys(lhs[1], rhs[1]))

    @override
    def key_to_vector(self, key: EpsilonKey) -> tuple[int, ...]:
        if key[0] != PRODUCT_TAG:
            raise ContractViolation("Vector form is not defined for formal symbols.")
        return unpack_codes(key[1], _CODE_DTYPE)

    @override
    def vector_to_key(self, vector: Sequence[int]) -> EpsilonKey:
        return (PRODUCT_TAG, pack_codes(vector, _CODE_DTYPE))

    @override
    def split_key(self, key: EpsilonKey, sizes: Sequence[int]) -> tuple[EpsilonKey, ...]:
        if key[0] != PRODUCT_TAG:
            raise ContractViolation("Formal symbols do not split into blocks.")
        return tuple((PRODUCT_TAG, block) for block in split_key(key[1], sizes, _CODE_DTYPE))


class EpsilonExpr(Linear[EpsilonPack, EpsilonKey]):
    __slots__ = ()
    param = EpsilonExprParam()


class EpsilonICoExpr(Linear):
    __slots__ = ()
    param = CoExprParam(
        EpsilonExpr.param,
        2,
        lie_algebra=False,
        iterated=True,
        ordering=OrderingPolicy.LEXICOGRAPHIC,
    )


register_coexpr_type(EpsilonExpr, CoproductFlavor.ITERATED, EpsilonICoExpr)


def EVar(idx: int) -> EpsilonExpr:
    return EpsilonExpr.single((EpsilonVar(idx),))


def EComplementIndexList(indices: Iterable[int]) -> EpsilonExpr:
    """``1 - prod(x_i)``. A repeated or empty index list gives zero."""
    return EpsilonExpr.single((EpsilonComplement(_CODEC.encode(indices)),))


def EFormalSymbolPositive(param: LiParam) -> EpsilonExpr:
    return EpsilonExpr.single(param)


def EUnity() -> EpsilonExpr:
    return EpsilonExpr.single(())


def is_unity(pack: EpsilonPack) -> bool:
    return isinstance(pack, tuple) and not pack
