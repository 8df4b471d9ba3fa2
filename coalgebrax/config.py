"""Process-wide engine configuration."""

from __future__ import annotations

import dataclasses
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from coalgebrax.errors import ContractViolation


@dataclass(frozen=True)
class EngineConfig:
    """Tunable knobs of the expression engine.

    Parameters
    ----------
    max_bitset_variables : int, default=16
        Largest index that a bitset-packed letter can hold (indices are
        1-based). Codecs built without an explicit bound use this value.
        Must not exceed 32, the width of the widest packed code.
    n_workers : int, default=1
        Number of worker threads used by batch transforms. ``1`` keeps
        everything on the calling thread.
    parallel_min_terms : int, default=256
        Expressions with fewer terms are always transformed serially.
    """

    max_bitset_variables: int = 16
    n_workers: int = 1
    parallel_min_terms: int = 256

    def __post_init__(self) -> None:
        if not 1 <= self.max_bitset_variables <= 32:
            raise ContractViolation(
                f"max_bitset_variables must be in [1, 32], got {self.max_bitset_variables}."
            )
        if self.n_workers < 1:
            raise ContractViolation(f"n_workers must be >= 1, got {self.n_workers}.")
        if self.parallel_min_terms < 0:
            raise ContractViolation(
                f"parallel_min_terms must be >= 0, got {self.parallel_min_terms}."
            )


_config = EngineConfig()


def get_config() -> EngineConfig:
    return _config


def set_config(config: EngineConfig) -> None:
    global _config
    _config = config


@contextmanager
def configured(**changes: int) -> Iterator[EngineConfig]:
    """Temporarily replace fields of the process default configuration."""
    previous = get_config()
    updated = dataclasses.replace(previous, **changes)
    set_config(updated)
    try:
        yield updated
    finally:
        set_config(previous)
