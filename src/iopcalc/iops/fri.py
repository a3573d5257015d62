"""
FRI (Fast Reed-Solomon IOP of Proximity)

The rate stays fixed. Every round folds the current function by 2^k and
commits to the result, so each round pays one proximity-gaps error. All
queries are made at the end, against every committed oracle.
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from ..assumptions import SecurityAssumption
from ..config import FRI_SHAPE, IOPConfig, RoundConfig
from ..field import LowDegreeParameters
from ..proof_size import DEFAULT_DIGEST_SIZE_BITS
from .base import Derivation, IOPInstance, validate_folding, validate_rate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FriParameters:
    """Knobs of a FRI instance; the rest is derived by FriProtocol.new."""

    starting_log_inv_rate: int
    starting_folding_factor: int
    folding_factors: Tuple[int, ...]
    security_assumption: SecurityAssumption
    security_level: int
    pow_bits: int
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS

    def __post_init__(self):
        object.__setattr__(self, 'folding_factors', tuple(self.folding_factors))

    @classmethod
    def fixed_folding(
        cls,
        log_inv_rate: int,
        folding_factor: int,
        num_rounds: int,
        security_assumption: SecurityAssumption,
        security_level: int,
        pow_bits: int,
        digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS,
    ) -> 'FriParameters':
        """Fold by the same factor in the first and in every subsequent round."""
        return cls(
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=folding_factor,
            folding_factors=(folding_factor,) * num_rounds,
            security_assumption=security_assumption,
            security_level=security_level,
            pow_bits=pow_bits,
            digest_size_bits=digest_size_bits,
        )


@dataclass(frozen=True)
class FriProtocol(IOPInstance):

    @classmethod
    def new(cls, ldt_parameters: LowDegreeParameters, parameters: FriParameters) -> 'FriProtocol':
        final_log_degree = validate_folding(
            ldt_parameters, parameters.starting_folding_factor, parameters.folding_factors,
        )
        validate_rate(parameters.starting_log_inv_rate)

        d = Derivation(
            "FRI protocol",
            ldt_parameters,
            parameters.security_assumption,
            parameters.security_level,
            parameters.pow_bits,
            parameters.digest_size_bits,
        )
        assumption = parameters.security_assumption
        log_inv_rate = parameters.starting_log_inv_rate
        starting_folding_factor = parameters.starting_folding_factor
        starting_domain_log_size = ldt_parameters.log_degree + log_inv_rate

        batching_pow_bits = 0.0
        if ldt_parameters.batch_size > 1:
            batching_pow_bits = d.batching_round(log_inv_rate)

        commitments = [d.initial_tree(starting_domain_log_size, starting_folding_factor)]

        # Degree of the function after the initial fold
        current_log_degree = ldt_parameters.log_degree - starting_folding_factor

        starting_error = assumption.prox_gaps_error(
            current_log_degree, log_inv_rate, d.field_bits, 1 << starting_folding_factor,
        )
        starting_folding_pow_bits = d.pow("initial fold", starting_error)

        d.builder.start_round("initial_fold")
        d.challenge([("folding_error", starting_error)], starting_folding_pow_bits)
        d.builder.end_round()

        round_parameters = []
        for folding_factor in parameters.folding_factors:
            evaluation_domain_log_size = current_log_degree + log_inv_rate
            tree = d.round_tree(evaluation_domain_log_size, folding_factor)
            commitments.append(tree)

            folding_error = assumption.prox_gaps_error(
                current_log_degree - folding_factor, log_inv_rate, d.field_bits, 1 << folding_factor,
            )
            pow_bits = d.pow("fold", folding_error)

            d.builder.start_round("fri_round")
            d.send_root(tree)
            d.challenge([("folding_error", folding_error)], pow_bits)
            d.builder.end_round()

            round_parameters.append(RoundConfig(
                folding_factor=folding_factor,
                evaluation_domain_log_size=evaluation_domain_log_size,
                log_inv_rate=log_inv_rate,
                pow_bits=(pow_bits,),
            ))
            logger.debug(
                "FRI round %d: domain 2^%d, degree 2^%d -> 2^%d",
                len(round_parameters), evaluation_domain_log_size,
                current_log_degree, current_log_degree - folding_factor,
            )
            current_log_degree -= folding_factor

        final_queries, final_pow_bits = d.final_round(
            "query_round", log_inv_rate, final_log_degree, commitments,
        )

        config = IOPConfig(
            shape=FRI_SHAPE,
            ldt_parameters=ldt_parameters,
            security_assumption=assumption,
            security_level=parameters.security_level,
            max_pow_bits=parameters.pow_bits,
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=starting_folding_factor,
            starting_domain_log_size=starting_domain_log_size,
            starting_folding_pow_bits=(starting_folding_pow_bits,),
            round_parameters=round_parameters,
            final_log_degree=final_log_degree,
            final_queries=final_queries,
            final_pow_bits=final_pow_bits,
            final_log_inv_rate=log_inv_rate,
            batching_pow_bits=batching_pow_bits,
            digest_size_bits=parameters.digest_size_bits,
        )
        return cls(config=config, protocol=d.builder.build())
