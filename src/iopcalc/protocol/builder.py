"""
Protocol Builder

Assembles a Protocol one message at a time. The builder is a two-state
machine:

    IDLE ──start_round──▶ ROUND_OPEN ──end_round──▶ IDLE
                            │    ▲
                            └────┘ prover_message / verifier_message

Every other transition raises ProtocolBuilderError. `build()` is only
legal from IDLE.
"""

from enum import Enum
from typing import List, Optional
import logging

from ..exceptions import DigestSizeMismatchError, ProtocolBuilderError
from .transcript import Message, Protocol, ProverMessage, Round, VerifierMessage


logger = logging.getLogger(__name__)


class BuilderState(Enum):
    IDLE = "idle"
    ROUND_OPEN = "round_open"


class ProtocolBuilder:
    """
    Incremental transcript construction.

    Usage:
        builder = ProtocolBuilder("FRI protocol", digest_size_bits=256)
        builder.start_round("query_round")
        builder.verifier_message(VerifierMessage([RbRError("query_error", 80.0)], 20.0))
        builder.prover_message(ProverMessage(ProofElement.field_elements(...)))
        builder.end_round()
        protocol = builder.build()
    """

    def __init__(self, name: str, digest_size_bits: int):
        self.name = name
        self.digest_size_bits = digest_size_bits
        self._rounds: List[Round] = []
        self._round_name: Optional[str] = None
        self._messages: List[Message] = []

    @property
    def state(self) -> BuilderState:
        if self._round_name is None:
            return BuilderState.IDLE
        return BuilderState.ROUND_OPEN

    @property
    def num_rounds(self) -> int:
        """Number of rounds closed so far."""
        return len(self._rounds)

    def start_round(self, name: str) -> 'ProtocolBuilder':
        if self.state is BuilderState.ROUND_OPEN:
            raise ProtocolBuilderError(
                f"Cannot start round '{name}': round '{self._round_name}' is still open"
            )
        logger.debug("%s: opening round '%s'", self.name, name)
        self._round_name = name
        self._messages = []
        return self

    def prover_message(self, message: ProverMessage) -> 'ProtocolBuilder':
        self._require_open("prover message")
        digest_size = message.element.digest_size
        if digest_size is not None and digest_size != self.digest_size_bits:
            raise DigestSizeMismatchError(self.digest_size_bits, digest_size)
        self._messages.append(message)
        return self

    def verifier_message(self, message: VerifierMessage) -> 'ProtocolBuilder':
        self._require_open("verifier message")
        self._messages.append(message)
        return self

    def end_round(self) -> 'ProtocolBuilder':
        if self.state is BuilderState.IDLE:
            raise ProtocolBuilderError("Cannot end a round: no round is open")
        if self._messages:
            self._rounds.append(Round(self._round_name, self._messages))
            logger.debug(
                "%s: closed round '%s' with %d messages",
                self.name, self._round_name, len(self._messages),
            )
        else:
            logger.debug("%s: dropped empty round '%s'", self.name, self._round_name)
        self._round_name = None
        self._messages = []
        return self

    def build(self) -> Protocol:
        if self.state is BuilderState.ROUND_OPEN:
            raise ProtocolBuilderError(
                f"Cannot build '{self.name}': round '{self._round_name}' was never ended"
            )
        return Protocol(self.name, self.digest_size_bits, self._rounds)

    def _require_open(self, what: str):
        if self.state is BuilderState.IDLE:
            raise ProtocolBuilderError(f"Cannot add {what}: no round is open")
