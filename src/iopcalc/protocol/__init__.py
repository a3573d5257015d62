"""
Abstract protocol transcripts and their builder.
"""

from .transcript import (
    Message,
    Protocol,
    ProverMessage,
    RbRError,
    Round,
    VerifierMessage,
)
from .builder import BuilderState, ProtocolBuilder

__all__ = [
    'Message',
    'Protocol',
    'ProverMessage',
    'RbRError',
    'Round',
    'VerifierMessage',
    'BuilderState',
    'ProtocolBuilder',
]
