"""Top level types for Coalgebrax.

Public API:
- Engine: Linear, ExprParam, WordParam, CoExprParam, OrderingPolicy
- Coalgebra: CoproductFlavor, NonPrimitivePolicy
- Configuration and errors: EngineConfig, CoalgebraxError, ContractViolation
"""

from coalgebrax.config import EngineConfig
from coalgebrax.errors import CoalgebraxError, ContractViolation
from coalgebrax.hopf_algebras.coalgebra import CoproductFlavor
from coalgebrax.hopf_algebras.lyndon import NonPrimitivePolicy
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, ExprParam, OrderingPolicy, WordParam

__all__ = [
    # Engine
    "Linear",
    "ExprParam",
    "WordParam",
    "CoExprParam",
    "OrderingPolicy",
    # Coalgebra
    "CoproductFlavor",
    "NonPrimitivePolicy",
    # Configuration and errors
    "EngineConfig",
    "CoalgebraxError",
    "ContractViolation",
]
