"""
Basefold

FRI-style folding at a fixed rate where each single-variable fold is also
a sumcheck round. Like FRI, all queries are made in one final round
against every committed oracle; like WHIR, grinding is per fold.
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from ..assumptions import SecurityAssumption
from ..config import BASEFOLD_SHAPE, IOPConfig, RoundConfig
from ..exceptions import ConfigurationError
from ..field import LowDegreeParameters
from ..proof_size import DEFAULT_DIGEST_SIZE_BITS
from .base import Derivation, IOPInstance, validate_folding, validate_rate


logger = logging.getLogger(__name__)

# Batched Basefold only supports linear or quadratic constraints
MAX_BATCHED_CONSTRAINT_DEGREE = 2


@dataclass(frozen=True)
class BasefoldParameters:
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
    ) -> 'BasefoldParameters':
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
class BasefoldProtocol(IOPInstance):

    @classmethod
    def new(cls, ldt_parameters: LowDegreeParameters, parameters: BasefoldParameters) -> 'BasefoldProtocol':
        final_log_degree = validate_folding(
            ldt_parameters, parameters.starting_folding_factor, parameters.folding_factors,
        )
        validate_rate(parameters.starting_log_inv_rate)
        constraint_degree = ldt_parameters.constraint_degree
        if ldt_parameters.batch_size > 1 and constraint_degree > MAX_BATCHED_CONSTRAINT_DEGREE:
            raise ConfigurationError(
                f"Batched Basefold needs constraint_degree <= {MAX_BATCHED_CONSTRAINT_DEGREE}, "
                f"got {constraint_degree}"
            )

        d = Derivation(
            "Basefold protocol",
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
        current_log_degree = ldt_parameters.log_degree

        d.builder.start_round("initial_sumcheck")
        starting_folding_pow_bits = []
        for _ in range(starting_folding_factor):
            starting_folding_pow_bits.append(
                d.sumcheck_fold(current_log_degree, log_inv_rate, constraint_degree)
            )
            current_log_degree -= 1
        d.builder.end_round()

        round_parameters = []
        for folding_factor in parameters.folding_factors:
            evaluation_domain_log_size = current_log_degree + log_inv_rate
            tree = d.round_tree(evaluation_domain_log_size, folding_factor)
            commitments.append(tree)

            d.builder.start_round("basefold_iteration")
            d.send_root(tree)
            pow_bits = []
            for _ in range(folding_factor):
                pow_bits.append(d.sumcheck_fold(current_log_degree, log_inv_rate, constraint_degree))
                current_log_degree -= 1
            d.builder.end_round()

            round_parameters.append(RoundConfig(
                folding_factor=folding_factor,
                evaluation_domain_log_size=evaluation_domain_log_size,
                log_inv_rate=log_inv_rate,
                pow_bits=pow_bits,
            ))
            logger.debug(
                "Basefold round %d: domain 2^%d, degree now 2^%d",
                len(round_parameters), evaluation_domain_log_size, current_log_degree,
            )

        final_queries, final_pow_bits = d.final_round(
            "query_round", log_inv_rate, final_log_degree, commitments,
        )

        config = IOPConfig(
            shape=BASEFOLD_SHAPE,
            ldt_parameters=ldt_parameters,
            security_assumption=assumption,
            security_level=parameters.security_level,
            max_pow_bits=parameters.pow_bits,
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=starting_folding_factor,
            starting_domain_log_size=starting_domain_log_size,
            starting_folding_pow_bits=starting_folding_pow_bits,
            round_parameters=round_parameters,
            final_log_degree=final_log_degree,
            final_queries=final_queries,
            final_pow_bits=final_pow_bits,
            final_log_inv_rate=log_inv_rate,
            batching_pow_bits=batching_pow_bits,
            digest_size_bits=parameters.digest_size_bits,
        )
        return cls(config=config, protocol=d.builder.build())
