"""Linear expression engine.

Exports
- ``Linear``: sparse integer-linear combination keyed by packed terms.
- ``ExprParam`` / ``WordParam`` / ``CoExprParam``: the capability contract
  a concrete algebra implements to plug into ``Linear``.
- ``OrderingPolicy``: orders on letters and co-term parts.
- ``parallel_mapped_expanding`` / ``merge_partials``: batch transforms.
"""

from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, ExprParam, OrderingPolicy, WordParam
from coalgebrax.linear.parallel import (
    merge_partials,
    parallel_mapped_expanding,
    parallel_mapped_expanding_key,
)

__all__ = [
    "Linear",
    "CoExprParam",
    "ExprParam",
    "OrderingPolicy",
    "WordParam",
    "merge_partials",
    "parallel_mapped_expanding",
    "parallel_mapped_expanding_key",
]
