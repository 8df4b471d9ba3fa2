"""Lyndon words and coalgebra operations on linear expressions.

Exports
- ``to_lyndon_basis`` / ``to_cyclic_canonical``: normal forms of expressions.
- ``lyndon_factorize`` / ``minimal_rotation`` / ``canonical_rotation``: word-level helpers.
- ``coproduct`` / ``comultiply``: co-expressions in iterated, normal and glued flavors.
- ``filter_coexpr_predicate`` / ``expand_into_glued_pairs``: co-expression utilities.
"""

from coalgebrax.hopf_algebras.coalgebra import (
    CoproductFlavor,
    coexpr_type_for,
    comultiply,
    coproduct,
    coproduct_weights,
    expand_into_glued_pairs,
    filter_coexpr_predicate,
    icoexpr_type_for,
    icoproduct,
    ncoexpr_type_for,
    ncoproduct,
    register_coexpr_type,
)
from coalgebrax.hopf_algebras.lyndon import (
    NonPrimitivePolicy,
    canonical_rotation,
    enumerate_lyndon_basis,
    is_lyndon,
    lyndon_factorize,
    lyndon_words,
    minimal_rotation,
    smallest_period,
    to_cyclic_canonical,
    to_lyndon_basis,
)

__all__ = [
    "CoproductFlavor",
    "coexpr_type_for",
    "comultiply",
    "coproduct",
    "coproduct_weights",
    "expand_into_glued_pairs",
    "filter_coexpr_predicate",
    "icoexpr_type_for",
    "icoproduct",
    "ncoexpr_type_for",
    "ncoproduct",
    "register_coexpr_type",
    "NonPrimitivePolicy",
    "canonical_rotation",
    "enumerate_lyndon_basis",
    "is_lyndon",
    "lyndon_factorize",
    "lyndon_words",
    "minimal_rotation",
    "smallest_period",
    "to_cyclic_canonical",
    "to_lyndon_basis",
]
