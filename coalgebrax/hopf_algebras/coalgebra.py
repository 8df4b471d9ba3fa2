"""Coproducts and comultiplication of linear expressions.

Co-expressions are ``Linear`` types whose terms are tuples of part terms. Each
algebra registers its two-part co-expression types per flavor:

- ``ITERATED``: iterated coproduct in a fixed tensor power. Parts are never
  re-ordered.
- ``NORMAL``: symmetrized comultiplication. For Lie coalgebras the parts are
  wedged: sorted by the co-expression's ordering policy, with the sign of the
  sorting permutation, and co-terms with two equal parts vanish.
- ``GLUED``: target of ``expand_into_glued_pairs``.

Types for other part counts are derived from the registered template on
first use, so co-expressions with different part counts are distinct types.
"""

from __future__ import annotations

import itertools
import threading
from collections import Counter
from enum import Enum
from functools import lru_cache
from math import prod
from typing import Any, Callable, Sequence

from coalgebrax.config import EngineConfig
from coalgebrax.errors import ContractViolation
from coalgebrax.hopf_algebras.lyndon import to_lyndon_basis
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam
from coalgebrax.linear.parallel import parallel_mapped_expanding_key
from coalgebrax.utils.log_config import logger


class CoproductFlavor(Enum):
    ITERATED = "iterated"
    NORMAL = "normal"
    GLUED = "glued"


_COEXPR_TYPES: dict[tuple[type[Linear], CoproductFlavor, int], type[Linear]] = {}
_COEXPR_TYPES_LOCK = threading.Lock()


def register_coexpr_type(
    expr_type: type[Linear], flavor: CoproductFlavor, coexpr_type: type[Linear]
) -> None:
    param = coexpr_type.param
    if not isinstance(param, CoExprParam) or param.part_param is not expr_type.param:
        raise ContractViolation(
            f"{coexpr_type.__name__} is not a co-expression over {expr_type.__name__}."
        )
    with _COEXPR_TYPES_LOCK:
        _COEXPR_TYPES[(expr_type, flavor, param.num_parts)] = coexpr_type


def has_coexpr_type(expr_type: type[Linear], flavor: CoproductFlavor) -> bool:
    with _COEXPR_TYPES_LOCK:
        return any(e is expr_type and f is flavor for e, f, _ in _COEXPR_TYPES)


def coexpr_type_for(
    expr_type: type[Linear], flavor: CoproductFlavor, num_parts: int
) -> type[Linear]:
    """Co-expression type of ``expr_type`` with the given flavor and part count."""
    with _COEXPR_TYPES_LOCK:
        cached = _COEXPR_TYPES.get((expr_type, flavor, num_parts))
        if cached is not None:
            return cached
        templates = [
            t for (e, f, _), t in _COEXPR_TYPES.items() if e is expr_type and f is flavor
        ]
        if not templates:
            raise ContractViolation(
                f"No {flavor.value} co-expression type is registered for {expr_type.__name__}."
            )
        template = templates[0]
        derived = type(
            f"{template.__name__}{num_parts}",
            (Linear,),
            {
                "param": template.param.with_num_parts(num_parts),
                "__module__": template.__module__,
                "__slots__": (),
            },
        )
        _COEXPR_TYPES[(expr_type, flavor, num_parts)] = derived
        return derived


def icoexpr_type_for(expr_type: type[Linear], num_parts: int = 2) -> type[Linear]:
    return coexpr_type_for(expr_type, CoproductFlavor.ITERATED, num_parts)


def ncoexpr_type_for(expr_type: type[Linear], num_parts: int = 2) -> type[Linear]:
    return coexpr_type_for(expr_type, CoproductFlavor.NORMAL, num_parts)


def _resolve_flavor(expr_type: type[Linear], flavor: CoproductFlavor | None) -> CoproductFlavor:
    if flavor is not None:
        return flavor
    if has_coexpr_type(expr_type, CoproductFlavor.NORMAL):
        return CoproductFlavor.NORMAL
    return CoproductFlavor.ITERATED


def permutation_sign(perm: Sequence[int]) -> int:
    inversions = sum(
        1 for i in range(len(perm)) for j in range(i + 1, len(perm)) if perm[i] > perm[j]
    )
    return -1 if inversions % 2 else 1


def _wedge_normalize(keys: tuple[Any, ...], param: CoExprParam) -> tuple[tuple[Any, ...], int]:
    order = sorted(range(len(keys)), key=lambda i: param.part_sort_key(keys[i]))
    sorted_keys = tuple(keys[i] for i in order)
    for lhs, rhs in zip(sorted_keys, sorted_keys[1:]):
        if lhs == rhs:
            return sorted_keys, 0
    return sorted_keys, permutation_sign(order)


# ============================================================================
# Coproduct of independent expressions
# ============================================================================


def coproduct(
    *exprs: Linear,
    flavor: CoproductFlavor | None = None,
    coexpr_type: type[Linear] | None = None,
) -> Linear:
    """External tensor product of independently built expressions.

    Every tuple of terms ``(a_1, ..., a_n)`` contributes with coefficient
    ``coeff(a_1) * ... * coeff(a_n)``. Without an explicit ``flavor`` the
    normal co-expression type is used when the algebra registers one.
    """
    if len(exprs) < 2:
        raise ContractViolation(f"coproduct needs at least two expressions, got {len(exprs)}.")
    expr_type = type(exprs[0])
    for expr in exprs[1:]:
        if type(expr) is not expr_type:
            raise ContractViolation(
                f"Cannot take coproduct of {expr_type.__name__} and {type(expr).__name__}."
            )
    if coexpr_type is None:
        coexpr_type = coexpr_type_for(expr_type, _resolve_flavor(expr_type, flavor), len(exprs))
    param = coexpr_type.param
    if not isinstance(param, CoExprParam) or param.part_param is not expr_type.param:
        raise ContractViolation(
            f"{coexpr_type.__name__} is not a co-expression over {expr_type.__name__}."
        )
    if param.num_parts != len(exprs):
        raise ContractViolation(
            f"{coexpr_type.__name__} has {param.num_parts} parts, got {len(exprs)} expressions."
        )
    dimensions = {expr.dimension() for expr in exprs if not expr.is_zero()}
    if len(dimensions) > 1:
        raise ContractViolation(
            f"Cannot take coproduct of terms with dimensions {sorted(dimensions, key=str)}."
        )

    normalize = param.coproduct_is_lie_algebra and not param.coproduct_is_iterated
    ret = coexpr_type()
    for combo in itertools.product(*(list(expr.key_items()) for expr in exprs)):
        keys = tuple(key for key, _ in combo)
        coeff = prod(c for _, c in combo)
        if normalize:
            keys, sign = _wedge_normalize(keys, param)
            if not sign:
                continue
            coeff *= sign
        ret.add_to_key(keys, coeff)
    return ret


def icoproduct(*exprs: Linear) -> Linear:
    return coproduct(*exprs, flavor=CoproductFlavor.ITERATED)


def ncoproduct(*exprs: Linear) -> Linear:
    return coproduct(*exprs, flavor=CoproductFlavor.NORMAL)


# ============================================================================
# Comultiplication
# ============================================================================


def _check_form(form: Sequence[int]) -> tuple[int, ...]:
    form = tuple(form)
    if len(form) < 2:
        raise ContractViolation(f"A composition needs at least two parts, got {form}.")
    for part in form:
        if not isinstance(part, int) or isinstance(part, bool) or part < 1:
            raise ContractViolation(f"Composition parts must be positive integers, got {form}.")
    return form


def comultiply(
    expr: Linear,
    form: Sequence[int],
    *,
    flavor: CoproductFlavor | None = None,
    n_workers: int | None = None,
    config: EngineConfig | None = None,
) -> Linear:
    """Splits every term of ``expr`` into blocks of the sizes given by ``form``.

    Lie coalgebra: ``expr`` is first reduced to the Lyndon basis, so the
    result depends only on its class modulo shuffle products. In the normal
    flavor every distinct ordering of ``form`` cuts each term into
    contiguous blocks; blocks are projected to the Lyndon basis and wedged,
    so symmetric images cancel with the sign of the interleaving.

    Iterated flavor: only the given order of ``form`` is used and parts are
    kept in place (still projected to the Lyndon basis for Lie coalgebras).

    Hopf algebra, normal flavor: every distinct ordering, raw blocks.

    ``form`` is validated once against ``expr.weight()``. Compositions with
    more than two parts follow the same rule: parts are wedged with the sign
    of the full sorting permutation.
    """
    form = _check_form(form)
    expr_type = type(expr)
    coexpr_type = coexpr_type_for(expr_type, _resolve_flavor(expr_type, flavor), len(form))
    if expr.is_zero():
        return coexpr_type()
    weight = expr.weight()
    if sum(form) != weight:
        raise ContractViolation(
            f"Cannot comultiply {expr_type.__name__} of weight {weight} into form {form}."
        )

    param: CoExprParam = coexpr_type.param
    lie = param.coproduct_is_lie_algebra
    iterated = param.coproduct_is_iterated
    if lie:
        expr = to_lyndon_basis(expr)
    orderings = [form] if iterated else sorted(set(itertools.permutations(form)))
    part_param = expr_type.param
    logger.debug(
        "comultiply %d terms of %s into %s (%s, lie=%s), %d orderings",
        len(expr),
        expr_type.__name__,
        form,
        "iterated" if iterated else "normal",
        lie,
        len(orderings),
    )

    @lru_cache(maxsize=None)
    def _part(block_key: Any) -> Linear:
        part = expr_type.single_key(block_key)
        return to_lyndon_basis(part) if lie else part

    def _comultiply_key(key: Any) -> Linear:
        ret = coexpr_type()
        for sizes in orderings:
            parts = [_part(block) for block in part_param.split_key(key, sizes)]
            if any(part.is_zero() for part in parts):
                continue
            ret.add_multiple(coproduct(*parts, coexpr_type=coexpr_type), 1)
        return ret

    return parallel_mapped_expanding_key(
        expr, _comultiply_key, coexpr_type, n_workers=n_workers, config=config
    )


# ============================================================================
# Utilities
# ============================================================================


def filter_coexpr_predicate(
    coexpr: Linear, slot_index: int, predicate: Callable[[Any], bool]
) -> Linear:
    """Keeps co-terms whose part at ``slot_index`` satisfies ``predicate``.

    For pack algebras the part is either a letter product or a formal
    symbol; ``predicate`` must handle both shapes.
    """
    param = coexpr.param
    if not isinstance(param, CoExprParam):
        raise ContractViolation(f"{type(coexpr).__name__} is not a co-expression.")
    if not 0 <= slot_index < param.num_parts:
        raise ContractViolation(
            f"Slot {slot_index} is out of range for a {param.num_parts}-part co-expression."
        )
    part_param = param.part_param
    return coexpr.filtered_key(lambda key: predicate(part_param.key_to_object(key[slot_index])))


def expand_into_glued_pairs(expr: Linear) -> Linear:
    """Converts each term ``x1 ⊗ ... ⊗ xn`` into

          (x1 x2) ⊗ x3 ⊗ ... ⊗ xn
        + x1 ⊗ (x2 x3) ⊗ ... ⊗ xn
        + ...
        + x1 ⊗ ... ⊗ (x{n-1} xn)

    in the algebra's glued co-expression type with ``n - 1`` parts.
    """
    expr_type = type(expr)
    if expr.is_zero():
        return coexpr_type_for(expr_type, CoproductFlavor.GLUED, 2)()
    weight = expr.weight()
    if weight < 2:
        raise ContractViolation(f"Cannot glue pairs in terms of weight {weight}.")
    coexpr_type = coexpr_type_for(expr_type, CoproductFlavor.GLUED, weight - 1)
    part_param = expr_type.param

    def _glue(key: Any) -> Linear:
        ret = coexpr_type()
        for i in range(weight - 1):
            sizes = [1] * i + [2] + [1] * (weight - i - 2)
            ret.add_to_key(part_param.split_key(key, sizes), 1)
        return ret

    return expr.mapped_expanding_key(_glue, coexpr_type)


def coproduct_weights(coexpr: Linear) -> Counter[tuple[int, ...]]:
    """How many co-terms carry each tuple of part weights."""
    param = coexpr.param
    if not isinstance(param, CoExprParam):
        raise ContractViolation(f"{type(coexpr).__name__} is not a co-expression.")
    return Counter(
        tuple(param.part_param.key_to_weight(part) for part in key) for key in coexpr.keys()
    )
