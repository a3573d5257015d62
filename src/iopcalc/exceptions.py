"""
Errors raised while deriving a protocol configuration.

Every failure is a mistake in the caller's parameters or an
infeasible security target. Nothing here is retried or recovered from.
"""


class IOPCalcError(Exception):
    """Base class for all estimator errors."""


class ConfigurationError(IOPCalcError, ValueError):
    """Input parameters violate a protocol precondition."""


class InfeasibleSecurityError(IOPCalcError, RuntimeError):
    """No admissible parameter choice reaches the requested security level."""


class ProtocolBuilderError(IOPCalcError, RuntimeError):
    """Illegal transition of the transcript builder."""


class DigestSizeMismatchError(ProtocolBuilderError):
    """A prover message commits with a digest size other than the protocol's."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Digest size mismatch: protocol uses {expected} bits, message uses {actual} bits"
        )
