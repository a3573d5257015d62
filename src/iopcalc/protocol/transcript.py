"""
Protocol Transcripts

An abstract transcript of an interactive oracle proof:

    Protocol → ordered Rounds → ordered Messages

Prover messages carry a proof element whose size counts towards the
proof. Verifier messages carry the named round-by-round (RBR) error terms
of the challenge they stand for, plus the grinding bits spent on it.

A verifier message's RBR error is the *minimum* of its terms plus its PoW
bits. This approximates the union bound over the terms, which loses
precision in floating point when terms are close. The per-term breakdown
is kept next to the aggregate.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple, Union
import math

from ..proof_size import ProofElement
from ..utils import display_size, format_bits


LOG2_3 = math.log2(3)

DEFAULT_ROM_QUERIES_BITS = 64


@dataclass(frozen=True)
class RbRError:
    """A named error term, in bits."""
    label: str
    error: float


@dataclass(frozen=True)
class ProverMessage:
    element: ProofElement

    def size_bits(self) -> int:
        return self.element.size_bits()


@dataclass(frozen=True)
class VerifierMessage:
    """A verifier challenge with the error terms it is charged with."""
    errors: Tuple[RbRError, ...]
    pow_bits: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'errors', tuple(self.errors))
        if not self.errors:
            raise ValueError("A verifier message needs at least one error term")

    @property
    def min_error(self) -> float:
        return min(term.error for term in self.errors)

    @property
    def rbr_error(self) -> float:
        return self.min_error + self.pow_bits


Message = Union[ProverMessage, VerifierMessage]


@dataclass(frozen=True)
class Round:
    name: str
    messages: Tuple[Message, ...]

    def __post_init__(self):
        object.__setattr__(self, 'messages', tuple(self.messages))
        if not self.messages:
            raise ValueError(f"Round '{self.name}' has no messages")

    def prover_messages(self) -> Iterator[ProverMessage]:
        return (m for m in self.messages if isinstance(m, ProverMessage))

    def verifier_messages(self) -> Iterator[VerifierMessage]:
        return (m for m in self.messages if isinstance(m, VerifierMessage))

    def size_bits(self) -> int:
        return sum(m.size_bits() for m in self.prover_messages())


@dataclass(frozen=True)
class Protocol:
    """A finished transcript. Built by ProtocolBuilder, read-only afterwards."""
    name: str
    digest_size_bits: int
    rounds: Tuple[Round, ...]

    def __post_init__(self):
        object.__setattr__(self, 'rounds', tuple(self.rounds))

    # ==========================================================================
    # Aggregates
    # ==========================================================================

    def proof_size_bits(self) -> int:
        return sum(r.size_bits() for r in self.rounds)

    def verifier_messages(self) -> Iterator[Tuple[Round, VerifierMessage]]:
        for r in self.rounds:
            for message in r.verifier_messages():
                yield r, message

    def rbr_errors(self) -> List[float]:
        """RBR error of every verifier message, in transcript order."""
        return [message.rbr_error for _, message in self.verifier_messages()]

    def rbr_error(self) -> float:
        """Round-by-round soundness error of the whole protocol."""
        return min(self.rbr_errors(), default=math.inf)

    def compiled_classical_security(self, rom_queries_bits: float = DEFAULT_ROM_QUERIES_BITS) -> float:
        """
        Security after Fiat-Shamir against a classical adversary making
        2^rom_queries_bits random oracle queries.
        """
        q = rom_queries_bits
        return min(self.rbr_error() - q, self.digest_size_bits - (LOG2_3 + 2 * q))

    def compiled_quantum_security(self, rom_queries_bits: float = DEFAULT_ROM_QUERIES_BITS) -> float:
        """Same as compiled_classical_security for a quantum adversary."""
        q = rom_queries_bits
        return min(self.rbr_error() - 2 * q, self.digest_size_bits - 3 * q)

    # ==========================================================================
    # Rendering
    # ==========================================================================

    def rbr_summary(self) -> str:
        lines = [
            "------------------------------------",
            "Round by round soundness analysis:",
            "------------------------------------",
        ]
        for r, message in self.verifier_messages():
            terms = ", ".join(f"{t.label}: {format_bits(t.error)}" for t in message.errors)
            lines.append(
                f"{format_bits(message.rbr_error)} bits -- [{r.name}] {terms}, pow: {format_bits(message.pow_bits)}"
            )
        lines.append(f"RBR soundness error: {format_bits(self.rbr_error())} bits")
        return "\n".join(lines)

    def proof_size_summary(self) -> str:
        lines = [
            "------------------------------------",
            "Proof size breakdown:",
            "------------------------------------",
        ]
        for i, r in enumerate(self.rounds):
            lines.append(f"Round {i} ({r.name}): {display_size(r.size_bits())}")
            for message in r.prover_messages():
                lines.append(f"  {message.element.describe()}: {display_size(message.size_bits())}")
        lines.append(f"Total proof size: {display_size(self.proof_size_bits())}")
        return "\n".join(lines)

    def security_summary(self, rom_queries_bits: float = DEFAULT_ROM_QUERIES_BITS) -> str:
        return (
            f"Compiled security (2^{format_bits(rom_queries_bits)} RO queries): "
            f"classical {format_bits(self.compiled_classical_security(rom_queries_bits))} bits, "
            f"quantum {format_bits(self.compiled_quantum_security(rom_queries_bits))} bits"
        )

    def __str__(self) -> str:
        return "\n".join([
            f"{self.name} (digest: {self.digest_size_bits} bits)",
            self.rbr_summary(),
            self.proof_size_summary(),
            self.security_summary(),
        ])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'digest_size_bits': self.digest_size_bits,
            'proof_size_bits': self.proof_size_bits(),
            'rbr_error': self.rbr_error(),
            'rounds': [_round_to_dict(r) for r in self.rounds],
        }


def _round_to_dict(r: Round) -> Dict[str, Any]:
    messages: List[Dict[str, Any]] = []
    for message in r.messages:
        if isinstance(message, ProverMessage):
            messages.append({
                'sender': 'prover',
                'element': message.element.element_type,
                'size_bits': message.size_bits(),
            })
        else:
            messages.append({
                'sender': 'verifier',
                'errors': {t.label: t.error for t in message.errors},
                'pow_bits': message.pow_bits,
                'rbr_error': message.rbr_error,
            })
    return {'name': r.name, 'messages': messages}
