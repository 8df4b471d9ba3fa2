"""
Custom exceptions for coalgebrax.

Only ill-typed programs raise. Degenerate algebra (nil letters, cancelling
terms) is modelled as an additive zero and never reaches this module.
"""


class CoalgebraxError(Exception):
    """Base exception for coalgebrax errors.

    Parameters
    ----------
    message : str
        The error message.
    """

    def __init__(self, message: str):
        super().__init__(message)


class ContractViolation(CoalgebraxError, ValueError):
    """Raised when an operation is applied to algebraically ill-typed input.

    Examples are combining terms of different weight or dimension, a
    composition that does not sum to the term weight, or a letter code that
    does not fit into its packed width.

    Parameters
    ----------
    message : str
        The error message. Should name the operation and the offending terms.
    """

    def __init__(self, message: str):
        super().__init__(message)
