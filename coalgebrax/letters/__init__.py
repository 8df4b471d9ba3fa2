"""Concrete letter alphabets plugged into the expression engine.

Exports
- ``SV`` / ``CoSV``: words over integer letters (Lie coalgebra).
- ``G``: Plücker minors packed as bitsets (Lie coalgebra with glued co-expressions).
- ``EVar`` / ``EComplementIndexList`` / ``EFormalSymbolPositive`` / ``EUnity``: epsilon
  products mixed with formal ``Li`` symbols (Hopf algebra).
"""

from coalgebrax.letters.epsilon import (
    EComplementIndexList,
    EFormalSymbolPositive,
    EpsilonComplement,
    EpsilonExpr,
    EpsilonICoExpr,
    EpsilonVar,
    EUnity,
    EVar,
    LiParam,
)
from coalgebrax.letters.gamma import (
    G,
    Gamma,
    GammaACoExpr,
    GammaExpr,
    GammaICoExpr,
    GammaNCoExpr,
)
from coalgebrax.letters.simple_vector import (
    CoSV,
    SV,
    SimpleVectorCoExpr,
    SimpleVectorExpr,
    SimpleVectorICoExpr,
)

__all__ = [
    "EComplementIndexList",
    "EFormalSymbolPositive",
    "EpsilonComplement",
    "EpsilonExpr",
    "EpsilonICoExpr",
    "EpsilonVar",
    "EUnity",
    "EVar",
    "LiParam",
    "G",
    "Gamma",
    "GammaACoExpr",
    "GammaExpr",
    "GammaICoExpr",
    "GammaNCoExpr",
    "CoSV",
    "SV",
    "SimpleVectorCoExpr",
    "SimpleVectorExpr",
    "SimpleVectorICoExpr",
]
