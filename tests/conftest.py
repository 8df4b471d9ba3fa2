import random
from typing import Callable

import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from coalgebrax.config import get_config, set_config
from coalgebrax.letters.simple_vector import SV, SimpleVectorExpr

_test_rng = random.Random(42)

BENCH_COMULTIPLY_CASES: list = [
    pytest.param(4, 4, (2, 2), id="alphabet-4-weight-4-form-2-2"),
    pytest.param(6, 5, (2, 3), id="alphabet-6-weight-5-form-2-3"),
    pytest.param(6, 6, (3, 3), id="alphabet-6-weight-6-form-3-3"),
]

BENCH_LYNDON_CASES: list = [
    pytest.param(3, 4, id="alphabet-3-weight-4"),
    pytest.param(4, 5, id="alphabet-4-weight-5"),
    pytest.param(5, 6, id="alphabet-5-weight-6"),
]


def benchmark_wrapper(
    benchmark: BenchmarkFixture,
    func: Callable,
    *args,
    **kwargs,
):
    # Warm-up: fills the shuffle cache before timing
    warmed = func(*args, **kwargs)

    def run():
        func(*args, **kwargs)

    benchmark(run)
    return warmed


def random_simple_vector_expr(
    rng: random.Random,
    alphabet_size: int,
    weight: int,
    num_terms: int,
    max_coeff: int = 5,
) -> SimpleVectorExpr:
    """Sum of ``num_terms`` random words with random nonzero coefficients."""
    ret = SimpleVectorExpr()
    for _ in range(num_terms):
        word = [rng.randint(1, alphabet_size) for _ in range(weight)]
        coeff = rng.choice([c for c in range(-max_coeff, max_coeff + 1) if c])
        ret += coeff * SV(word)
    return ret


@pytest.fixture
def rng() -> random.Random:
    """Fresh deterministic generator per test."""
    return random.Random(_test_rng.randint(0, 2**31))


@pytest.fixture
def restore_config():
    """Restores the process default configuration after the test."""
    previous = get_config()
    yield previous
    set_config(previous)
