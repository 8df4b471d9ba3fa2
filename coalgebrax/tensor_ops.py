from __future__ import annotations

from collections import defaultdict
from functools import lru_cache, reduce
from itertools import combinations
from typing import Sequence, TypeVar

from coalgebrax.errors import ContractViolation
from coalgebrax.linear.linear import Linear

LinearT = TypeVar("LinearT", bound=Linear)


def tensor_product(x: LinearT, y: LinearT) -> LinearT:
    """Concatenation product of two expressions of the same algebra.

    Every pair of terms ``(a, b)`` contributes ``monom_tensor_product(a, b)``
    with coefficient ``coeff(a) * coeff(b)``.

    Args:
        x: Left factor.
        y: Right factor, same algebra and dimension as ``x``.

    Returns:
        The tensor product, an expression of the same type as ``x``.
    """
    if type(x) is not type(y):
        raise ContractViolation(
            f"Cannot tensor {type(x).__name__} with {type(y).__name__}."
        )
    param = x.param
    if not x.is_zero() and not y.is_zero():
        x_dim = x.dimension()
        y_dim = y.dimension()
        if x_dim != y_dim:
            raise ContractViolation(
                f"Cannot tensor terms of dimension {x_dim} and {y_dim}."
            )
    ret = type(x)()
    for x_key, x_coeff in x.key_items():
        for y_key, y_coeff in y.key_items():
            ret.add_to_key(param.monom_tensor_product(x_key, y_key), x_coeff * y_coeff)
    return ret


def tensor_product_many(exprs: Sequence[LinearT]) -> LinearT:
    """Tensor product of several expressions, left to right."""
    if not exprs:
        raise ContractViolation("tensor_product_many needs at least one expression.")
    return reduce(tensor_product, exprs)


def _shuffle_pair(u: tuple, v: tuple) -> list[tuple]:
    """All interleavings of ``u`` and ``v``, with repetitions."""
    n = len(u) + len(v)
    out: list[tuple] = []
    for positions in combinations(range(n), len(u)):
        word: list = [None] * n
        taken = set(positions)
        u_iter = iter(u)
        v_iter = iter(v)
        for i in range(n):
            word[i] = next(u_iter) if i in taken else next(v_iter)
        out.append(tuple(word))
    return out


@lru_cache(maxsize=4096)
def shuffle_words(*words: tuple) -> tuple[tuple[tuple, int], ...]:
    r"""Shuffle product of words as ``(word, multiplicity)`` pairs.

    $$u \,ш\, v = \sum_{\sigma} \sigma(uv)$$ over the
    $$\binom{|u|+|v|}{|u|}$$ order-preserving interleavings.
    """
    acc: dict[tuple, int] = {(): 1}
    for w in words:
        nxt: dict[tuple, int] = defaultdict(int)
        for u, c in acc.items():
            for s in _shuffle_pair(u, tuple(w)):
                nxt[s] += c
        acc = nxt
    return tuple(sorted(acc.items()))


def shuffle_product_expr(exprs: Sequence[LinearT]) -> LinearT:
    """Shuffle product of expressions of an algebra with a vector form."""
    if not exprs:
        raise ContractViolation("shuffle_product_expr needs at least one expression.")
    expr_type = type(exprs[0])
    for expr in exprs:
        if type(expr) is not expr_type:
            raise ContractViolation(
                f"Cannot shuffle {type(expr).__name__} with {expr_type.__name__}."
            )
    param = expr_type.param
    acc: dict[tuple, int] = {(): 1}
    for expr in exprs:
        nxt: dict[tuple, int] = defaultdict(int)
        for key, coeff in expr.key_items():
            vector = param.key_to_vector(key)
            for u, c in acc.items():
                for word, mult in shuffle_words(u, vector):
                    nxt[word] += c * coeff * mult
        acc = nxt
    ret = expr_type()
    for word, coeff in acc.items():
        ret.add_to_key(param.vector_to_key(word), coeff)
    return ret
