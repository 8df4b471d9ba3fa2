"""Batch transforms over the terms of large expressions.

Every term is transformed independently, so the key set can be partitioned
across worker threads. Each worker accumulates into its own local
expression; partial results are merged by key-wise addition, which is
commutative and associative, so the result does not depend on chunking or
on the order in which workers finish.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Hashable, Iterable, Sequence, TypeVar

import numpy as np

from coalgebrax.config import EngineConfig, get_config
from coalgebrax.linear.linear import Linear
from coalgebrax.utils.log_config import logger

LinearT = TypeVar("LinearT", bound=Linear)


def _apply_chunk(
    items: Sequence[tuple[Hashable, int]],
    func: Callable[[Hashable], Linear],
    result_type: type[LinearT],
) -> LinearT:
    ret = result_type()
    for key, coeff in items:
        ret.add_multiple(func(key), coeff)
    return ret


def merge_partials(parts: Iterable[Linear], result_type: type[LinearT]) -> LinearT:
    """Sums partial results. Order of ``parts`` does not matter."""
    ret = result_type()
    for part in parts:
        ret.add_multiple(part, 1)
    return ret


def parallel_mapped_expanding_key(
    expr: Linear,
    func: Callable[[Hashable], Linear],
    result_type: type[LinearT] | None = None,
    *,
    n_workers: int | None = None,
    config: EngineConfig | None = None,
) -> LinearT:
    """``expr.mapped_expanding_key(func)`` spread over worker threads.

    ``func`` maps a packed key to an expression of ``result_type`` and must
    not mutate shared state.
    """
    cfg = config or get_config()
    n_workers = cfg.n_workers if n_workers is None else n_workers
    target = result_type or type(expr)
    items = list(expr.key_items())

    if n_workers <= 1 or len(items) < max(cfg.parallel_min_terms, 2):
        return _apply_chunk(items, func, target)

    chunks = np.array_split(np.arange(len(items)), min(n_workers, len(items)))
    logger.debug(
        "Transforming %d terms of %s on %d workers", len(items), type(expr).__name__, len(chunks)
    )

    def _worker(idx_arr: np.ndarray) -> LinearT:
        return _apply_chunk([items[i] for i in idx_arr.tolist()], func, target)

    parts: list[LinearT] = []
    with ThreadPoolExecutor(max_workers=n_workers) as ex:
        futs = [ex.submit(_worker, idxs) for idxs in chunks if len(idxs)]
        for fut in as_completed(futs):
            parts.append(fut.result())
    return merge_partials(parts, target)


def parallel_mapped_expanding(
    expr: Linear,
    func: Callable[[Any], Linear],
    result_type: type[LinearT] | None = None,
    *,
    n_workers: int | None = None,
    config: EngineConfig | None = None,
) -> LinearT:
    """Object-level counterpart of ``parallel_mapped_expanding_key``."""
    param = expr.param
    return parallel_mapped_expanding_key(
        expr,
        lambda key: func(param.key_to_object(key)),
        result_type,
        n_workers=n_workers,
        config=config,
    )
