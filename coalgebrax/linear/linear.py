"""Sparse integer-linear combinations of terms.

``Linear`` stores a mapping from packed key to a nonzero ``int`` coefficient.
It is generic over an ``ExprParam``: every concrete algebra subclasses
``Linear`` and binds its param as the ``param`` class attribute, e.g.

>>> class SimpleVectorExpr(Linear):
...     param = SimpleVectorParam()

Zero coefficients are never stored, so two expressions are equal exactly
when their key -> coefficient mappings are equal. An optional annotation
(itself a small label -> coefficient mapping) follows the expression through
arithmetic for diagnostics and never affects equality.
"""

from __future__ import annotations

import numbers
from typing import Any, Callable, ClassVar, Generic, Hashable, Iterable, Iterator, Self, TypeVar

from coalgebrax.errors import ContractViolation
from coalgebrax.linear.linear_types import ExprParam

ObjT = TypeVar("ObjT")
KeyT = TypeVar("KeyT", bound=Hashable)
LinearT = TypeVar("LinearT", bound="Linear")


def _check_coeff(coeff: Any) -> int:
    if not isinstance(coeff, numbers.Integral) or isinstance(coeff, bool):
        raise ContractViolation(f"Coefficients must be integers, got {coeff!r}.")
    return int(coeff)


class Linear(Generic[ObjT, KeyT]):
    """Formal integer-linear combination of terms of one algebra."""

    param: ClassVar[ExprParam]

    __slots__ = ("_data", "_annotations")

    def __init__(self) -> None:
        self._data: dict[KeyT, int] = {}
        self._annotations: dict[str, int] = {}

    # Construction -------------------------------------------------------------

    @classmethod
    def single(cls, obj: ObjT, coeff: int = 1) -> Self:
        """Expression with one term. A term containing a nil letter gives zero."""
        ret = cls()
        ret.add_to(obj, coeff)
        return ret

    @classmethod
    def single_key(cls, key: KeyT, coeff: int = 1) -> Self:
        ret = cls()
        ret.add_to_key(key, _check_coeff(coeff))
        return ret

    @classmethod
    def from_items(cls, items: Iterable[tuple[ObjT, int]]) -> Self:
        ret = cls()
        for obj, coeff in items:
            ret.add_to(obj, coeff)
        return ret

    def copy(self) -> Self:
        ret = type(self)()
        ret._data = dict(self._data)
        ret._annotations = dict(self._annotations)
        return ret

    # Queries ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._data)

    def is_zero(self) -> bool:
        return not self._data

    def coeff(self, obj: ObjT) -> int:
        if self.param.is_nil(obj):
            return 0
        return self._data.get(self.param.object_to_key(obj), 0)

    def coeff_for_key(self, key: KeyT) -> int:
        return self._data.get(key, 0)

    def keys(self) -> Iterator[KeyT]:
        return iter(self._data)

    def key_items(self) -> Iterator[tuple[KeyT, int]]:
        return iter(self._data.items())

    def items(self) -> Iterator[tuple[ObjT, int]]:
        for key, coeff in self._data.items():
            yield self.param.key_to_object(key), coeff

    def objects(self) -> Iterator[ObjT]:
        for key in self._data:
            yield self.param.key_to_object(key)

    def sorted_key_items(self) -> list[tuple[KeyT, int]]:
        return sorted(self._data.items(), key=lambda kv: self.param.sort_key(kv[0]))

    def sorted_items(self) -> list[tuple[ObjT, int]]:
        return [(self.param.key_to_object(key), coeff) for key, coeff in self.sorted_key_items()]

    def contains(self, predicate: Callable[[ObjT], bool]) -> bool:
        return any(predicate(obj) for obj in self.objects())

    def l1_norm(self) -> int:
        return sum(abs(coeff) for coeff in self._data.values())

    def weight(self) -> int:
        """Common weight of all terms. Raises if the expression is empty or mixed."""
        if not self._data:
            raise ContractViolation(f"Weight of an empty {type(self).__name__} is undefined.")
        weights = {self.param.key_to_weight(key) for key in self._data}
        if len(weights) > 1:
            raise ContractViolation(
                f"{type(self).__name__} mixes terms of weights {sorted(weights)}."
            )
        return weights.pop()

    def dimension(self) -> int | None:
        """Common dimension of all terms, ``None`` if empty or undefined for the algebra."""
        dimensions = {self.param.key_to_dimension(key) for key in self._data}
        if len(dimensions) > 1:
            raise ContractViolation(
                f"{type(self).__name__} mixes terms of dimensions {sorted(dimensions, key=str)}."
            )
        return dimensions.pop() if dimensions else None

    @property
    def annotations(self) -> dict[str, int]:
        return dict(self._annotations)

    # Mutation -----------------------------------------------------------------

    def add_to_key(self, key: KeyT, coeff: int) -> None:
        """Hot path: no validation beyond dropping zero results."""
        if not coeff:
            return
        new_coeff = self._data.get(key, 0) + coeff
        if new_coeff:
            self._data[key] = new_coeff
        else:
            del self._data[key]

    def add_to(self, obj: ObjT, coeff: int) -> None:
        """Adds one term. Raises if its weight or dimension differs from the stored terms."""
        coeff = _check_coeff(coeff)
        if self.param.is_nil(obj):
            return
        self.param.object_to_dimension(obj)
        key = self.param.object_to_key(obj)
        self._check_key(key, "add")
        self.add_to_key(key, coeff)

    def add_multiple(self, other: Linear, factor: int) -> None:
        """``self += factor * other`` in place, keeping annotations in sync."""
        self._check_same_algebra(other, "add")
        factor = _check_coeff(factor)
        if not factor or other.is_zero():
            return
        self._check_compatible(other, "add")
        for key, coeff in other._data.items():
            self.add_to_key(key, coeff * factor)
        for label, coeff in other._annotations.items():
            new_coeff = self._annotations.get(label, 0) + coeff * factor
            if new_coeff:
                self._annotations[label] = new_coeff
            else:
                self._annotations.pop(label, None)

    def _check_same_algebra(self, other: Any, op: str) -> None:
        if not isinstance(other, Linear) or other.param is not self.param:
            raise ContractViolation(
                f"Cannot {op} {type(other).__name__} and {type(self).__name__}: "
                "expressions belong to different algebras."
            )

    def _check_matches(self, ref_key: KeyT, keys: Iterable[KeyT], op: str) -> None:
        ref_weight = self.param.key_to_weight(ref_key)
        ref_dim = self.param.key_to_dimension(ref_key)
        for key in keys:
            weight = self.param.key_to_weight(key)
            if weight != ref_weight:
                raise ContractViolation(
                    f"Cannot {op} terms of weight {ref_weight} and {weight}: "
                    f"{self._describe_key(ref_key)} vs {self._describe_key(key)}"
                )
            dim = self.param.key_to_dimension(key)
            if dim != ref_dim:
                raise ContractViolation(
                    f"Cannot {op} terms of dimension {ref_dim} and {dim}: "
                    f"{self._describe_key(ref_key)} vs {self._describe_key(key)}"
                )

    def _check_key(self, key: KeyT, op: str) -> None:
        if self._data and key not in self._data:
            self._check_matches(next(iter(self._data)), (key,), op)

    def _check_compatible(self, other: Linear, op: str) -> None:
        """Every term of ``other`` must match the weight and dimension of ``self``.

        An empty ``self`` takes its reference from ``other``, so a mixed
        ``other`` is rejected either way.
        """
        if other.is_zero():
            return
        ref_key = next(iter(self._data)) if self._data else next(iter(other._data))
        self._check_matches(ref_key, other._data, op)

    def _describe_key(self, key: KeyT) -> str:
        return self.param.object_to_string(self.param.key_to_object(key))

    # Arithmetic ---------------------------------------------------------------

    def __add__(self, other: Any) -> Self:
        if not isinstance(other, Linear):
            return NotImplemented
        ret = self.copy()
        ret.add_multiple(other, 1)
        return ret

    def __radd__(self, other: Any) -> Self:
        # Lets ``sum(exprs)`` start from the integer 0.
        if isinstance(other, numbers.Integral) and other == 0:
            return self.copy()
        return NotImplemented

    def __sub__(self, other: Any) -> Self:
        if not isinstance(other, Linear):
            return NotImplemented
        ret = self.copy()
        ret.add_multiple(other, -1)
        return ret

    def __iadd__(self, other: Any) -> Self:
        if not isinstance(other, Linear):
            return NotImplemented
        self.add_multiple(other, 1)
        return self

    def __isub__(self, other: Any) -> Self:
        if not isinstance(other, Linear):
            return NotImplemented
        self.add_multiple(other, -1)
        return self

    def __neg__(self) -> Self:
        return self * -1

    def __pos__(self) -> Self:
        return self.copy()

    def __mul__(self, factor: Any) -> Self:
        if not isinstance(factor, numbers.Integral) or isinstance(factor, bool):
            return NotImplemented
        factor = int(factor)
        ret = type(self)()
        if factor:
            ret._data = {key: coeff * factor for key, coeff in self._data.items()}
            ret._annotations = {
                label: coeff * factor for label, coeff in self._annotations.items()
            }
        return ret

    def __rmul__(self, factor: Any) -> Self:
        return self.__mul__(factor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Linear):
            return NotImplemented
        return other.param is self.param and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    # Structural transforms ----------------------------------------------------

    def mapped(
        self,
        func: Callable[[ObjT], Any],
        result_type: type[LinearT] | None = None,
    ) -> LinearT:
        """Applies ``func`` to every term and sums like terms.

        Images must share one weight and dimension, as for ``add_to``.
        """
        target = result_type or type(self)
        ret = target()
        for key, coeff in self._data.items():
            ret.add_to(func(self.param.key_to_object(key)), coeff)
        return ret

    def mapped_key(
        self,
        func: Callable[[KeyT], Any],
        result_type: type[LinearT] | None = None,
    ) -> LinearT:
        target = result_type or type(self)
        ret = target()
        for key, coeff in self._data.items():
            new_key = func(key)
            ret._check_key(new_key, "map")
            ret.add_to_key(new_key, coeff)
        return ret

    def mapped_expanding(
        self,
        func: Callable[[ObjT], Linear],
        result_type: type[LinearT] | None = None,
    ) -> LinearT:
        """Like ``mapped``, but ``func`` returns a linear combination."""
        return self.mapped_expanding_key(
            lambda key: func(self.param.key_to_object(key)), result_type
        )

    def mapped_expanding_key(
        self,
        func: Callable[[KeyT], Linear],
        result_type: type[LinearT] | None = None,
    ) -> LinearT:
        target = result_type or type(self)
        ret = target()
        for key, coeff in self._data.items():
            image = func(key)
            ret._check_same_algebra(image, "expand into")
            ret._check_compatible(image, "expand into")
            for image_key, image_coeff in image._data.items():
                ret.add_to_key(image_key, image_coeff * coeff)
        return ret

    def filtered(self, predicate: Callable[[ObjT], bool]) -> Self:
        ret = type(self)()
        for key, coeff in self._data.items():
            if predicate(self.param.key_to_object(key)):
                ret._data[key] = coeff
        return ret

    def filtered_key(self, predicate: Callable[[KeyT], bool]) -> Self:
        ret = type(self)()
        ret._data = {key: coeff for key, coeff in self._data.items() if predicate(key)}
        return ret

    # Annotations --------------------------------------------------------------

    def annotate(self, label: str) -> Self:
        """Returns a copy whose annotation is replaced with ``label``."""
        ret = self.copy()
        ret._annotations = {label: 1}
        return ret

    def without_annotations(self) -> Self:
        ret = self.copy()
        ret._annotations = {}
        return ret

    def annotations_string(self) -> str:
        return "".join(
            f"{'+' if coeff > 0 else '-'}{'' if abs(coeff) == 1 else abs(coeff)}{label}"
            for label, coeff in sorted(self._annotations.items())
        )

    # Rendering ----------------------------------------------------------------

    def to_string(self) -> str:
        if not self._data:
            return "0"
        lines = []
        for key, coeff in self.sorted_key_items():
            sign = "+" if coeff > 0 else "-"
            magnitude = "" if abs(coeff) == 1 else f"{abs(coeff)} "
            lines.append(f"{sign}{magnitude}{self._describe_key(key)}")
        return "\n".join(lines)

    def __str__(self) -> str:
        if self._annotations and self._data:
            return f"# {self.annotations_string()}\n{self.to_string()}"
        return self.to_string()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} terms)"
