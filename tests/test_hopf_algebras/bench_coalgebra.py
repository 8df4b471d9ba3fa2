import random

import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from coalgebrax.hopf_algebras.coalgebra import comultiply
from coalgebrax.hopf_algebras.lyndon import is_lyndon, to_lyndon_basis
from tests.conftest import (
    BENCH_COMULTIPLY_CASES,
    BENCH_LYNDON_CASES,
    benchmark_wrapper,
    random_simple_vector_expr,
)


@pytest.mark.benchmark(group="comultiply")
@pytest.mark.parametrize("alphabet_size,weight,form", BENCH_COMULTIPLY_CASES)
def test_comultiply_benchmark(
    benchmark: BenchmarkFixture,
    alphabet_size: int,
    weight: int,
    form: tuple[int, ...],
) -> None:
    """Benchmark Lie comultiplication of a random expression."""
    expr = random_simple_vector_expr(random.Random(0), alphabet_size, weight, num_terms=200)
    result = benchmark_wrapper(benchmark, comultiply, expr, form)
    assert result.is_zero() or result.param.num_parts == len(form)


@pytest.mark.benchmark(group="lyndon")
@pytest.mark.parametrize("alphabet_size,weight", BENCH_LYNDON_CASES)
def test_to_lyndon_basis_benchmark(
    benchmark: BenchmarkFixture,
    alphabet_size: int,
    weight: int,
) -> None:
    """Benchmark reduction of a random expression to the Lyndon basis."""
    expr = random_simple_vector_expr(random.Random(1), alphabet_size, weight, num_terms=200)
    result = benchmark_wrapper(benchmark, to_lyndon_basis, expr)
    assert all(is_lyndon(word) for word in result.objects())
