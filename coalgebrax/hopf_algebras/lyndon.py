"""Lyndon words and canonical ordering.

This module provides:
- Lyndon factorization (Duval) and Lyndon word tests under any letter order
- Least-rotation (necklace) canonicalization of cyclic words
- Lyndon word enumeration
- Reduction of an expression to the Lyndon basis modulo shuffle products
"""

from __future__ import annotations

from collections import Counter, defaultdict
from enum import Enum
from math import factorial, prod
from typing import Any, Callable, Sequence, TypeVar

from coalgebrax.errors import ContractViolation
from coalgebrax.linear.linear import Linear
from coalgebrax.tensor_ops import shuffle_words
from coalgebrax.utils.log_config import logger

LinearT = TypeVar("LinearT", bound=Linear)
SortKey = Callable[[Any], Any] | None


class NonPrimitivePolicy(Enum):
    """What a cyclic word equal to a proper power of a shorter word turns into."""

    ZERO = "zero"
    KEEP = "keep"


def _comparable(word: Sequence[Any], key: SortKey) -> list[Any]:
    return list(word) if key is None else [key(x) for x in word]


# ============================================================================
# Factorization and tests
# ============================================================================


def lyndon_factorize(word: Sequence[Any], key: SortKey = None) -> list[tuple]:
    """Duval's algorithm: the unique non-increasing factorization into Lyndon words.

    Runs in O(n). ``key`` maps letters to comparable values, as in ``sorted``.
    """
    w = _comparable(word, key)
    n = len(w)
    factors: list[tuple] = []
    i = 0
    while i < n:
        j = i + 1
        k = i
        while j < n and w[k] <= w[j]:
            k = i if w[k] < w[j] else k + 1
            j += 1
        while i <= k:
            factors.append(tuple(word[i : i + j - k]))
            i += j - k
    return factors


def is_lyndon(word: Sequence[Any], key: SortKey = None) -> bool:
    """Whether ``word`` is strictly smaller than all of its proper rotations."""
    return len(word) > 0 and len(lyndon_factorize(word, key)) == 1


def minimal_rotation(word: Sequence[Any], key: SortKey = None) -> int:
    """Start index of the lexicographically least rotation, in O(n)."""
    w = _comparable(word, key)
    n = len(w)
    if n == 0:
        return 0
    s = w + w
    i = 0
    ans = 0
    while i < n:
        ans = i
        j = i + 1
        k = i
        while j < 2 * n and s[k] <= s[j]:
            k = i if s[k] < s[j] else k + 1
            j += 1
        while i <= k:
            i += j - k
    return ans


def smallest_period(word: Sequence[Any], key: SortKey = None) -> int:
    """Length of the shortest ``u`` with ``word == u^m``; ``len(word)`` if primitive."""
    w = _comparable(word, key)
    n = len(w)
    if n == 0:
        return 0
    fail = [0] * n
    for i in range(1, n):
        k = fail[i - 1]
        while k and w[i] != w[k]:
            k = fail[k - 1]
        if w[i] == w[k]:
            k += 1
        fail[i] = k
    period = n - fail[-1]
    return period if n % period == 0 else n


def canonical_rotation(
    word: Sequence[Any],
    *,
    key: SortKey = None,
    alternating: bool = False,
    non_primitive: NonPrimitivePolicy = NonPrimitivePolicy.KEEP,
) -> tuple[tuple, int] | None:
    """Canonical representative of a cyclic word and the sign to apply.

    Rotating a word of length ``n`` by ``r`` positions is a cyclic
    permutation of sign ``(-1)^(r(n-1))``; the sign is tracked only for
    ``alternating`` algebras. A non-primitive word (a proper power) is
    handled by ``non_primitive``. Under ``alternating`` a power whose
    period rotation is odd equals its own negative and always vanishes.

    Returns ``None`` when the word vanishes.
    """
    n = len(word)
    word = tuple(word)
    if n == 0:
        return word, 1
    r = minimal_rotation(word, key)
    rotated = word[r:] + word[:r]
    sign = -1 if alternating and (r * (n - 1)) % 2 else 1
    period = smallest_period(word, key)
    if period < n:
        if non_primitive is NonPrimitivePolicy.ZERO:
            return None
        if alternating and (period * (n - 1)) % 2:
            return None
    return rotated, sign


# ============================================================================
# Enumeration
# ============================================================================


def enumerate_lyndon_basis(depth: int, dim: int) -> list[list[tuple[int, ...]]]:
    """Duval's generator. Lists Lyndon words over letters ``0..dim-1`` for each length
    up to ``depth``; ``result[level]`` holds the words of length ``level + 1`` in
    lexicographic order.
    Ref: https://www.lyndex.org/algo.php
    """
    if depth < 1:
        raise ContractViolation(f"depth must be >= 1, got {depth}.")
    if dim < 1:
        raise ContractViolation(f"dim must be >= 1, got {dim}.")
    if dim == 1:
        return [[(0,)]] + [[] for _ in range(1, depth)]

    list_of_words: dict[int, list[tuple[int, ...]]] = defaultdict(list)
    word: list[int] = [-1]
    while word:
        word[-1] += 1
        m = len(word)
        list_of_words[m - 1].append(tuple(word))
        while len(word) < depth:
            word.append(word[-m])
        while word and word[-1] == dim - 1:
            word.pop()

    return [sorted(list_of_words[level]) for level in range(depth)]


def lyndon_words(dim: int, length: int) -> list[tuple[int, ...]]:
    """Lyndon words of exactly ``length`` letters over ``0..dim-1``."""
    return enumerate_lyndon_basis(length, dim)[length - 1]


# ============================================================================
# Lyndon basis of the shuffle quotient
# ============================================================================


def to_lyndon_basis(expr: LinearT) -> LinearT:
    r"""Rewrites ``expr`` in the Lyndon basis modulo shuffle products.

    A non-Lyndon word $$w = l_1^{k_1} \cdots l_m^{k_m}$$ (Lyndon factors in
    non-increasing order) satisfies
    $$l_1 ш \cdots ш l_m = d\,w + \sum_{u < w} c_u u, \quad d = \prod k_i!,$$
    so modulo products $$w \equiv -\tfrac{1}{d} \sum_{u < w} c_u u$$. Every
    rewrite replaces a word by strictly smaller ones, which terminates.

    The letter order is the algebra's ``ordering`` policy.
    """
    param = expr.param
    element_key = param.element_sort_key()
    ret = type(expr)()
    pending: dict[Any, int] = dict(expr.key_items())
    rounds = 0
    while pending:
        rounds += 1
        nxt: dict[Any, int] = defaultdict(int)
        for key, coeff in pending.items():
            word = param.key_to_vector(key)
            factors = lyndon_factorize(word, element_key)
            if len(factors) <= 1:
                ret.add_to_key(key, coeff)
                continue
            denominator = prod(factorial(m) for m in Counter(factors).values())
            for u, c in shuffle_words(*factors):
                if u == word:
                    if c != denominator:
                        raise ContractViolation(
                            f"Shuffle of Lyndon factors of {word} has leading coefficient "
                            f"{c}, expected {denominator}."
                        )
                    continue
                numerator = coeff * c
                if numerator % denominator:
                    raise ContractViolation(
                        f"Lyndon reduction of {word} is not integral: {numerator}/{denominator}."
                    )
                nxt[param.vector_to_key(u)] -= numerator // denominator
        pending = {k: c for k, c in nxt.items() if c}
    logger.debug("Lyndon reduction of %d terms took %d rounds", len(expr), rounds)
    return ret


def to_cyclic_canonical(
    expr: LinearT,
    *,
    alternating: bool = False,
    non_primitive: NonPrimitivePolicy = NonPrimitivePolicy.KEEP,
) -> LinearT:
    """Replaces every term with the canonical rotation of its cyclic class."""
    param = expr.param
    element_key = param.element_sort_key()
    ret = type(expr)()
    for key, coeff in expr.key_items():
        canonical = canonical_rotation(
            param.key_to_vector(key),
            key=element_key,
            alternating=alternating,
            non_primitive=non_primitive,
        )
        if canonical is None:
            continue
        rotated, sign = canonical
        ret.add_to_key(param.vector_to_key(rotated), sign * coeff)
    return ret
