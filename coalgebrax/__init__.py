"""Coalgebrax: symbolic linear algebra over graded Hopf algebras.

## Features

### Expressions
- Sparse integer-linear combinations keyed by packed terms
- Tensor and shuffle products
- Parallel batch transforms

### Canonical forms
- Lyndon factorization and Lyndon basis modulo shuffles
- Necklace canonicalization with rotation signs

### Coalgebra
- Coproducts of independent expressions
- Comultiplication into a composition of part weights (iterated and normal)
- Slot filters and glued pairs

### Letters
- Integer words, Plücker minors, epsilon products with formal symbols
"""

__version__ = "0.1.0"
__license__ = "MIT"
