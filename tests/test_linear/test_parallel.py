"""Tests for parallel batch transforms.

Partial results are merged by key-wise addition, so the result must not
depend on how the terms are chunked or in which order the chunks finish.
"""

import itertools
import random

import pytest

from coalgebrax.config import EngineConfig
from coalgebrax.hopf_algebras.coalgebra import comultiply
from coalgebrax.letters.simple_vector import SV, SimpleVectorExpr
from coalgebrax.linear.parallel import (
    merge_partials,
    parallel_mapped_expanding,
    parallel_mapped_expanding_key,
)
from tests.conftest import random_simple_vector_expr


def _rotations(word: tuple[int, ...]) -> SimpleVectorExpr:
    ret = SimpleVectorExpr()
    for i in range(len(word)):
        ret += SV(word[i:] + word[:i])
    return ret


@pytest.mark.parametrize("n_workers", [1, 2, 3, 8])
def test_parallel_matches_serial(n_workers: int, rng: random.Random) -> None:
    expr = random_simple_vector_expr(rng, alphabet_size=4, weight=4, num_terms=60)
    serial = expr.mapped_expanding(_rotations)
    config = EngineConfig(n_workers=n_workers, parallel_min_terms=0)
    parallel = parallel_mapped_expanding(expr, _rotations, config=config)
    assert parallel == serial


def test_explicit_worker_count_overrides_config(rng: random.Random) -> None:
    expr = random_simple_vector_expr(rng, alphabet_size=3, weight=3, num_terms=30)
    config = EngineConfig(n_workers=1, parallel_min_terms=0)
    result = parallel_mapped_expanding(expr, _rotations, n_workers=4, config=config)
    assert result == expr.mapped_expanding(_rotations)


def test_merge_order_independence(rng: random.Random) -> None:
    expr = random_simple_vector_expr(rng, alphabet_size=4, weight=4, num_terms=40)
    whole = expr.mapped_expanding(_rotations)

    items = list(expr.key_items())
    rng.shuffle(items)
    cuts = sorted(rng.sample(range(1, len(items)), 3))
    groups = [items[i:j] for i, j in zip([0] + cuts, cuts + [len(items)])]
    partials = []
    for group in groups:
        part = SimpleVectorExpr()
        for key, coeff in group:
            part += coeff * _rotations(SimpleVectorExpr.param.key_to_object(key))
        partials.append(part)

    for order in itertools.permutations(partials):
        assert merge_partials(order, SimpleVectorExpr) == whole


def test_parallel_comultiply_matches_serial(rng: random.Random) -> None:
    expr = random_simple_vector_expr(rng, alphabet_size=5, weight=4, num_terms=80)
    serial = comultiply(expr, (2, 2), n_workers=1)
    config = EngineConfig(n_workers=4, parallel_min_terms=0)
    assert comultiply(expr, (2, 2), config=config) == serial
    assert comultiply(expr, (1, 3), config=config) == comultiply(expr, (1, 3), n_workers=1)


def test_small_inputs_stay_serial() -> None:
    calls = []

    def _func(key: bytes) -> SimpleVectorExpr:
        calls.append(key)
        return SimpleVectorExpr.single_key(key)

    expr = SV([1]) + SV([2])
    config = EngineConfig(n_workers=4, parallel_min_terms=256)
    assert parallel_mapped_expanding_key(expr, _func, config=config) == expr
    assert len(calls) == 2


def test_empty_input() -> None:
    config = EngineConfig(n_workers=4, parallel_min_terms=0)
    assert parallel_mapped_expanding(SimpleVectorExpr(), _rotations, config=config).is_zero()
