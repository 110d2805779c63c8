"""
Error types raised by the permutation engine
"""

from typing import Any, Dict, Optional


class AssocFlowError(Exception):
    """Base class for engine errors.

    Carries a ``context`` dictionary that callers higher up the stack
    (sweep, replicate aggregation) extend before re-raising, so the final
    message says which fraction, sample size or replicate failed.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = dict(context or {})

    def with_context(self, **context: Any) -> "AssocFlowError":
        """Add context keys (existing keys win) and return self"""
        for key, value in context.items():
            self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({details})"

    def __reduce__(self):
        # Subclasses take extra constructor arguments; rebuild from state so
        # errors raised in worker processes survive the trip back.
        return (_restore_error, (self.__class__, self.message, self.__dict__.copy()))


def _restore_error(cls, message, state):
    error = cls.__new__(cls)
    Exception.__init__(error, message)
    error.__dict__.update(state)
    return error


class InvalidArgument(AssocFlowError, ValueError):
    """Malformed input: bad sizes, too few iterations, empty schedules"""


class SamplerExhaustion(InvalidArgument):
    """Requested sample size exceeds the universe it is drawn from"""


class DegenerateDistribution(AssocFlowError):
    """The null distribution has zero standard deviation; ZS is undefined"""

    def __init__(
        self,
        message: str,
        observed: float,
        null_mean: float,
        sample_size: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.observed = observed
        self.null_mean = null_mean
        self.sample_size = sample_size
