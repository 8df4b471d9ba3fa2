from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Generic, Hashable, Sequence, TypeVar, override

from coalgebrax.codec.packed import concat_keys, key_length, pack_codes, split_key, unpack_codes
from coalgebrax.errors import ContractViolation

ObjT = TypeVar("ObjT")
KeyT = TypeVar("KeyT", bound=Hashable)
LetterT = TypeVar("LetterT")


class OrderingPolicy(Enum):
    """Total orders on the elements of a word (letters, or parts of a co-term).

    - ``LEXICOGRAPHIC``: elements compared by value.
    - ``LENGTH_FIRST``: shorter elements first, then by value. Used for
      co-terms, where parts must be compared by weight before content.
    - ``LENGTH_DESC``: longer elements first, then by value.
    """

    LEXICOGRAPHIC = "lexicographic"
    LENGTH_FIRST = "length_first"
    LENGTH_DESC = "length_desc"

    def element_key(self, element: Any, length: Callable[[Any], int] = len) -> Any:
        if self is OrderingPolicy.LEXICOGRAPHIC:
            return element
        if self is OrderingPolicy.LENGTH_FIRST:
            return (length(element), element)
        return (-length(element), element)

    def word_key(self, word: Sequence[Any], length: Callable[[Any], int] = len) -> tuple:
        if self is OrderingPolicy.LEXICOGRAPHIC:
            return tuple(word)
        return tuple(self.element_key(e, length) for e in word)


class ExprParam(ABC, Generic[ObjT, KeyT]):
    """Capability set a concrete algebra supplies to plug into ``Linear``.

    A param converts between domain terms (``ObjT``) and their packed keys
    (``KeyT``), reports weights and dimensions, and declares which coproduct
    flavor applies. Keys must be hashable and naturally ordered; their order
    is the default lexicographic order of the algebra.
    """

    ordering: OrderingPolicy = OrderingPolicy.LEXICOGRAPHIC
    coproduct_is_lie_algebra: bool = False
    coproduct_is_iterated: bool = True

    @abstractmethod
    def object_to_key(self, obj: ObjT) -> KeyT:
        """Packs a term. Must be the inverse of ``key_to_object``."""
        raise NotImplementedError

    @abstractmethod
    def key_to_object(self, key: KeyT) -> ObjT:
        raise NotImplementedError

    @abstractmethod
    def object_to_weight(self, obj: ObjT) -> int:
        """Total letter count, or the declared weight of a formal symbol."""
        raise NotImplementedError

    def object_to_string(self, obj: ObjT) -> str:
        return str(obj)

    def object_to_dimension(self, obj: ObjT) -> int | None:
        """Algebra-specific arity. ``None`` means the algebra has no such notion."""
        return None

    def is_nil(self, obj: ObjT) -> bool:
        """Whether the term contains a degenerate letter and hence vanishes."""
        return False

    def key_to_weight(self, key: KeyT) -> int:
        return self.object_to_weight(self.key_to_object(key))

    def key_to_dimension(self, key: KeyT) -> int | None:
        return self.object_to_dimension(self.key_to_object(key))

    def monom_tensor_product(self, lhs: KeyT, rhs: KeyT) -> KeyT:
        raise ContractViolation(f"Tensor product is not defined for {self}.")

    def key_to_vector(self, key: KeyT) -> tuple:
        """Key as a sequence of comparable elements (letter codes, or parts)."""
        raise ContractViolation(f"Vector form is not defined for {self}.")

    def vector_to_key(self, vector: Sequence[Any]) -> KeyT:
        raise ContractViolation(f"Vector form is not defined for {self}.")

    def split_key(self, key: KeyT, sizes: Sequence[int]) -> tuple[KeyT, ...]:
        """Cuts a term into contiguous blocks of the given lengths."""
        vector = self.key_to_vector(key)
        if sum(sizes) != len(vector):
            raise ContractViolation(
                f"Cannot split a term of length {len(vector)} into blocks {tuple(sizes)}."
            )
        blocks = []
        start = 0
        for size in sizes:
            blocks.append(self.vector_to_key(vector[start : start + size]))
            start += size
        return tuple(blocks)

    def sort_key(self, key: KeyT) -> Any:
        """Canonical order used for deterministic iteration and rendering."""
        return key

    def element_sort_key(self) -> Callable[[Any], Any] | None:
        """Key function on vector elements matching ``ordering``; ``None`` compares directly."""
        if self.ordering is OrderingPolicy.LEXICOGRAPHIC:
            return None
        return self.ordering.element_key

    @override
    def __str__(self) -> str:
        return f"{self.__class__.__name__}"


class WordParam(ExprParam[tuple[LetterT, ...], bytes]):
    """Param for algebras whose terms are plain tuples of letters.

    Subclasses map letters to non-negative integer codes whose order agrees
    with the letter order. Keys are the codes packed with ``code_dtype``.
    """

    code_dtype: str = ">u2"
    tensor_separator: str = " ⊗ "

    @abstractmethod
    def letter_to_code(self, letter: LetterT) -> int:
        raise NotImplementedError

    @abstractmethod
    def code_to_letter(self, code: int) -> LetterT:
        raise NotImplementedError

    def is_nil_letter(self, letter: LetterT) -> bool:
        return False

    def letter_to_string(self, letter: LetterT) -> str:
        return str(letter)

    @override
    def object_to_key(self, obj: tuple[LetterT, ...]) -> bytes:
        return pack_codes((self.letter_to_code(letter) for letter in obj), self.code_dtype)

    @override
    def key_to_object(self, key: bytes) -> tuple[LetterT, ...]:
        return tuple(self.code_to_letter(code) for code in unpack_codes(key, self.code_dtype))

    @override
    def object_to_weight(self, obj: tuple[LetterT, ...]) -> int:
        return len(obj)

    @override
    def key_to_weight(self, key: bytes) -> int:
        return key_length(key, self.code_dtype)

    @override
    def object_to_string(self, obj: tuple[LetterT, ...]) -> str:
        if not obj:
            return "1"
        return self.tensor_separator.join(self.letter_to_string(letter) for letter in obj)

    @override
    def is_nil(self, obj: tuple[LetterT, ...]) -> bool:
        return any(self.is_nil_letter(letter) for letter in obj)

    @override
    def monom_tensor_product(self, lhs: bytes, rhs: bytes) -> bytes:
        return concat_keys(lhs, rhs)

    @override
    def key_to_vector(self, key: bytes) -> tuple[int, ...]:
        return unpack_codes(key, self.code_dtype)

    @override
    def vector_to_key(self, vector: Sequence[int]) -> bytes:
        return pack_codes(vector, self.code_dtype)

    @override
    def split_key(self, key: bytes, sizes: Sequence[int]) -> tuple[bytes, ...]:
        return split_key(key, sizes, self.code_dtype)


class CoExprParam(ExprParam[tuple[Any, ...], tuple[Any, ...]]):
    """Param of a co-expression: terms are fixed-length tuples of part terms.

    Parameters
    ----------
    part_param : ExprParam
        Param of the algebra every part belongs to.
    num_parts : int
        Tensor power. Co-expressions with different part counts are
        different types.
    lie_algebra : bool
        Parts live in the Lie coalgebra of indecomposables.
    iterated : bool
        ``True`` for an iterated coproduct in a fixed tensor power (parts are
        never re-ordered), ``False`` for the symmetrized comultiplication
        (parts are sorted, picking up the sign of the permutation).
    ordering : OrderingPolicy
        Order on parts used for sorting and rendering.
    """

    def __init__(
        self,
        part_param: ExprParam,
        num_parts: int,
        *,
        lie_algebra: bool,
        iterated: bool,
        ordering: OrderingPolicy = OrderingPolicy.LENGTH_FIRST,
    ):
        if num_parts < 1:
            raise ContractViolation(f"A co-expression needs at least one part, got {num_parts}.")
        self.part_param = part_param
        self.num_parts = num_parts
        self.coproduct_is_lie_algebra = lie_algebra
        self.coproduct_is_iterated = iterated
        self.ordering = ordering

    def with_num_parts(self, num_parts: int) -> CoExprParam:
        return CoExprParam(
            self.part_param,
            num_parts,
            lie_algebra=self.coproduct_is_lie_algebra,
            iterated=self.coproduct_is_iterated,
            ordering=self.ordering,
        )

    @property
    def separator(self) -> str:
        if self.coproduct_is_lie_algebra and not self.coproduct_is_iterated:
            return " ∧ "
        return " ⊗ "

    def _check_arity(self, parts: Sequence[Any]) -> None:
        if len(parts) != self.num_parts:
            raise ContractViolation(
                f"Expected a co-term of {self.num_parts} parts, got {len(parts)}."
            )

    @override
    def object_to_key(self, obj: tuple[Any, ...]) -> tuple[Any, ...]:
        self._check_arity(obj)
        return tuple(self.part_param.object_to_key(part) for part in obj)

    @override
    def key_to_object(self, key: tuple[Any, ...]) -> tuple[Any, ...]:
        return tuple(self.part_param.key_to_object(part) for part in key)

    @override
    def object_to_weight(self, obj: tuple[Any, ...]) -> int:
        return sum(self.part_param.object_to_weight(part) for part in obj)

    @override
    def key_to_weight(self, key: tuple[Any, ...]) -> int:
        return sum(self.part_param.key_to_weight(part) for part in key)

    @override
    def object_to_dimension(self, obj: tuple[Any, ...]) -> int | None:
        dimensions = {self.part_param.object_to_dimension(part) for part in obj}
        if len(dimensions) > 1:
            raise ContractViolation(
                f"Co-term parts have different dimensions {sorted(dimensions, key=str)}: {obj!r}"
            )
        return dimensions.pop() if dimensions else None

    @override
    def object_to_string(self, obj: tuple[Any, ...]) -> str:
        return self.separator.join(
            f"({self.part_param.object_to_string(part)})" for part in obj
        )

    @override
    def is_nil(self, obj: tuple[Any, ...]) -> bool:
        return any(self.part_param.is_nil(part) for part in obj)

    @override
    def key_to_vector(self, key: tuple[Any, ...]) -> tuple[Any, ...]:
        return key

    @override
    def vector_to_key(self, vector: Sequence[Any]) -> tuple[Any, ...]:
        self._check_arity(vector)
        return tuple(vector)

    def part_sort_key(self, part_key: Any) -> Any:
        return self.ordering.element_key(part_key, self.part_param.key_to_weight)

    @override
    def sort_key(self, key: tuple[Any, ...]) -> Any:
        return tuple(self.part_sort_key(part) for part in key)

    @override
    def element_sort_key(self) -> Callable[[Any], Any] | None:
        if self.ordering is OrderingPolicy.LEXICOGRAPHIC:
            return None
        return self.part_sort_key

    @override
    def __str__(self) -> str:
        flavor = "iterated" if self.coproduct_is_iterated else "normal"
        return f"CoExprParam[{self.part_param}, {self.num_parts} parts, {flavor}]"
