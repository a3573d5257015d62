"""
Derived Protocol Configurations

FRI, STIR, WHIR and Basefold all produce the same kind of flat summary: a
starting point, a list of per-round parameters and a final round. They
only differ in which fields are meaningful, which is what ProtocolShape
records.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .assumptions import SecurityAssumption
from .field import LowDegreeParameters
from .proof_size import DEFAULT_DIGEST_SIZE_BITS
from .utils import format_bits, format_float_list


@dataclass(frozen=True)
class ProtocolShape:
    """Which optional features a protocol's configuration carries."""
    name: str
    has_ood: bool
    has_constraint_folding: bool
    vector_pow: bool
    per_round_queries: bool


FRI_SHAPE = ProtocolShape(
    name="FRI", has_ood=False, has_constraint_folding=False, vector_pow=False, per_round_queries=False,
)
STIR_SHAPE = ProtocolShape(
    name="STIR", has_ood=True, has_constraint_folding=False, vector_pow=False, per_round_queries=True,
)
WHIR_SHAPE = ProtocolShape(
    name="WHIR", has_ood=True, has_constraint_folding=True, vector_pow=True, per_round_queries=True,
)
BASEFOLD_SHAPE = ProtocolShape(
    name="Basefold", has_ood=False, has_constraint_folding=True, vector_pow=True, per_round_queries=False,
)


@dataclass(frozen=True)
class RoundConfig:
    """
    Parameters of one post-initial round.

    `evaluation_domain_log_size` is the domain of the oracle committed in
    this round. `log_inv_rate` is the rate the round's queries are made at,
    i.e. the rate of the previously committed oracle. `pow_bits` holds one
    value per grinding challenge of the round.
    """
    folding_factor: int
    evaluation_domain_log_size: int
    log_inv_rate: int
    pow_bits: Tuple[float, ...]
    num_queries: int = 0
    ood_samples: int = 0

    def __post_init__(self):
        object.__setattr__(self, 'pow_bits', tuple(self.pow_bits))

    def render(self, shape: ProtocolShape) -> str:
        parts = [
            f"Folding factor: {self.folding_factor}",
            f"domain_size: 2^{self.evaluation_domain_log_size}",
        ]
        if shape.per_round_queries:
            parts.append(f"num_queries: {self.num_queries}")
            parts.append(f"rate: 2^-{self.log_inv_rate}")
        if shape.has_ood:
            parts.append(f"ood_samples: {self.ood_samples}")
        if shape.vector_pow:
            parts.append(f"pow_bits: {format_float_list(self.pow_bits)}")
        else:
            parts.append(f"pow_bits: {format_bits(self.pow_bits[0])}")
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'folding_factor': self.folding_factor,
            'evaluation_domain_log_size': self.evaluation_domain_log_size,
            'log_inv_rate': self.log_inv_rate,
            'num_queries': self.num_queries,
            'ood_samples': self.ood_samples,
            'pow_bits': list(self.pow_bits),
        }


@dataclass(frozen=True)
class IOPConfig:
    """Fully expanded configuration of one protocol instance."""
    shape: ProtocolShape
    ldt_parameters: LowDegreeParameters
    security_assumption: SecurityAssumption
    security_level: int
    max_pow_bits: int

    starting_log_inv_rate: int
    starting_folding_factor: int
    starting_domain_log_size: int
    starting_folding_pow_bits: Tuple[float, ...]

    round_parameters: Tuple[RoundConfig, ...]

    final_log_degree: int
    final_queries: int
    final_pow_bits: float
    final_log_inv_rate: int

    batching_pow_bits: float = 0.0
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS

    def __post_init__(self):
        object.__setattr__(self, 'starting_folding_pow_bits', tuple(self.starting_folding_pow_bits))
        object.__setattr__(self, 'round_parameters', tuple(self.round_parameters))

    @property
    def num_rounds(self) -> int:
        return len(self.round_parameters)

    def all_pow_bits(self) -> Tuple[float, ...]:
        """Every grinding value of the configuration, in protocol order."""
        values = []
        if self.ldt_parameters.batch_size > 1:
            values.append(self.batching_pow_bits)
        values.extend(self.starting_folding_pow_bits)
        for r in self.round_parameters:
            values.extend(r.pow_bits)
        values.append(self.final_pow_bits)
        return tuple(values)

    def max_pow(self) -> float:
        return max(self.all_pow_bits())

    def summary(self) -> str:
        shape = self.shape
        lines = [
            str(self.ldt_parameters),
            f"Security level: {self.security_level} bits using {self.security_assumption} "
            f"security and {self.max_pow_bits} bits of PoW",
        ]

        initial = (
            f"Initial domain size: 2^{self.starting_domain_log_size}, "
            f"initial rate 2^-{self.starting_log_inv_rate}"
        )
        if not shape.per_round_queries:
            initial += f", queries: {self.final_queries}, pow_bits: {format_bits(self.final_pow_bits)}"
        lines.append(initial)

        if self.ldt_parameters.batch_size > 1:
            lines.append(
                f"Batch size: {self.ldt_parameters.batch_size}, "
                f"batching_pow_bits: {format_bits(self.batching_pow_bits)}"
            )

        if shape.vector_pow:
            starting_pow = format_float_list(self.starting_folding_pow_bits)
        else:
            starting_pow = format_bits(self.starting_folding_pow_bits[0])
        lines.append(
            f"Initial folding factor: {self.starting_folding_factor}, "
            f"initial_folding_pow_bits: {starting_pow}"
        )

        for r in self.round_parameters:
            lines.append(r.render(shape))

        final = f"final_queries: {self.final_queries}, final polynomial: {self.final_log_degree}"
        if shape.per_round_queries:
            final += (
                f", final_rate: 2^-{self.final_log_inv_rate}, "
                f"final_pow_bits: {format_bits(self.final_pow_bits)}"
            )
        lines.append(final)
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.summary()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'protocol': self.shape.name,
            'ldt_parameters': self.ldt_parameters.to_dict(),
            'security_assumption': str(self.security_assumption),
            'security_level': self.security_level,
            'max_pow_bits': self.max_pow_bits,
            'starting_log_inv_rate': self.starting_log_inv_rate,
            'starting_folding_factor': self.starting_folding_factor,
            'starting_domain_log_size': self.starting_domain_log_size,
            'starting_folding_pow_bits': list(self.starting_folding_pow_bits),
            'batching_pow_bits': self.batching_pow_bits,
            'round_parameters': [r.to_dict() for r in self.round_parameters],
            'final_log_degree': self.final_log_degree,
            'final_queries': self.final_queries,
            'final_pow_bits': self.final_pow_bits,
            'final_log_inv_rate': self.final_log_inv_rate,
            'digest_size_bits': self.digest_size_bits,
        }
