import random

import pytest
from pytest_benchmark.fixture import BenchmarkFixture

from coalgebrax.config import EngineConfig
from coalgebrax.hopf_algebras.coalgebra import comultiply
from coalgebrax.letters.simple_vector import SimpleVectorExpr
from coalgebrax.tensor_ops import shuffle_product_expr
from tests.conftest import random_simple_vector_expr


@pytest.mark.benchmark(group="arithmetic")
@pytest.mark.parametrize("num_terms", [100, 1000])
def test_add_benchmark(benchmark: BenchmarkFixture, num_terms: int) -> None:
    """Benchmark key-wise addition of two random expressions."""
    rng = random.Random(2)
    lhs = random_simple_vector_expr(rng, 6, 5, num_terms)
    rhs = random_simple_vector_expr(rng, 6, 5, num_terms)
    result = benchmark(lambda: lhs + rhs)
    assert isinstance(result, SimpleVectorExpr)


@pytest.mark.benchmark(group="shuffle")
@pytest.mark.parametrize("weight", [2, 3, 4])
def test_shuffle_product_benchmark(benchmark: BenchmarkFixture, weight: int) -> None:
    """Benchmark shuffle of two random expressions."""
    rng = random.Random(3)
    lhs = random_simple_vector_expr(rng, 4, weight, 10)
    rhs = random_simple_vector_expr(rng, 4, weight, 10)
    result = benchmark(shuffle_product_expr, [lhs, rhs])
    assert result.is_zero() or result.weight() == 2 * weight


@pytest.mark.benchmark(group="parallel")
@pytest.mark.parametrize("n_workers", [1, 4])
def test_parallel_comultiply_benchmark(benchmark: BenchmarkFixture, n_workers: int) -> None:
    """Benchmark comultiplication spread over worker threads."""
    expr = random_simple_vector_expr(random.Random(4), 6, 6, 500)
    config = EngineConfig(n_workers=n_workers, parallel_min_terms=64)
    result = benchmark(comultiply, expr, (3, 3), config=config)
    assert result.is_zero() or result.param.num_parts == 2
