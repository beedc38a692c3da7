"""Base exception class for all anode-eval-specific errors."""


class AnodeEvalError(Exception):
    """Base class for all anode-eval errors.

    The class name is part of the user-visible failure message, so subclasses
    should be named after the failure kind rather than the module raising it.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
