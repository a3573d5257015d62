"""
WHIR (Weights Help Improving Rate)

WHIR replaces STIR's polynomial folding by a sumcheck over a weighted
constraint: each single-variable fold is a sumcheck round, charged both
with the folding error and with the sumcheck error of the constraint.
Query and OOD answers become new constraint terms that are combined with
one random challenge, which is where the batching error of an iteration
comes from.

Grinding is therefore per single-variable fold, and each iteration
carries a vector of PoW values.
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from ..assumptions import SecurityAssumption
from ..config import WHIR_SHAPE, IOPConfig, RoundConfig
from ..field import LowDegreeParameters
from ..proof_size import DEFAULT_DIGEST_SIZE_BITS
from .base import Derivation, IOPInstance, validate_folding, validate_parallel, validate_rate


logger = logging.getLogger(__name__)

# Sumcheck rounds after the first iteration fold a product with the weight polynomial
MIN_INNER_SUMCHECK_DEGREE = 2


@dataclass(frozen=True)
class WhirParameters:
    """
    Knobs of a WHIR instance.

    Folding factors are in log form: a factor of 2 reduces the degree by 4.
    `log_inv_rates[i]` is the rate of the oracle committed in iteration i.
    `pow_bits` is the grinding budget for the query phases; it does not cap
    the grinding spent on proximity gaps.
    """

    starting_log_inv_rate: int
    starting_folding_factor: int
    folding_factors: Tuple[int, ...]
    log_inv_rates: Tuple[int, ...]
    security_assumption: SecurityAssumption
    security_level: int
    pow_bits: int
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS

    def __post_init__(self):
        object.__setattr__(self, 'folding_factors', tuple(self.folding_factors))
        object.__setattr__(self, 'log_inv_rates', tuple(self.log_inv_rates))

    @classmethod
    def fixed_rate_folding(
        cls,
        log_inv_rate: int,
        folding_factor: int,
        num_rounds: int,
        security_assumption: SecurityAssumption,
        security_level: int,
        pow_bits: int,
        digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS,
    ) -> 'WhirParameters':
        """Constant rate in every iteration."""
        return cls(
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=folding_factor,
            folding_factors=(folding_factor,) * num_rounds,
            log_inv_rates=(log_inv_rate,) * num_rounds,
            security_assumption=security_assumption,
            security_level=security_level,
            pow_bits=pow_bits,
            digest_size_bits=digest_size_bits,
        )

    @classmethod
    def fixed_domain_shift(
        cls,
        log_inv_rate: int,
        folding_factor: int,
        num_rounds: int,
        security_assumption: SecurityAssumption,
        security_level: int,
        pow_bits: int,
        digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS,
    ) -> 'WhirParameters':
        """
        The domain halves in each iteration while the degree drops by
        2^folding_factor, as in the WHIR paper.
        """
        return cls(
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=folding_factor,
            folding_factors=(folding_factor,) * num_rounds,
            log_inv_rates=tuple(log_inv_rate + (i + 1) * (folding_factor - 1) for i in range(num_rounds)),
            security_assumption=security_assumption,
            security_level=security_level,
            pow_bits=pow_bits,
            digest_size_bits=digest_size_bits,
        )


@dataclass(frozen=True)
class WhirProtocol(IOPInstance):

    @classmethod
    def new(cls, ldt_parameters: LowDegreeParameters, parameters: WhirParameters) -> 'WhirProtocol':
        validate_parallel(
            "folding_factors", parameters.folding_factors,
            "log_inv_rates", parameters.log_inv_rates,
        )
        final_log_degree = validate_folding(
            ldt_parameters, parameters.starting_folding_factor, parameters.folding_factors,
        )
        validate_rate(parameters.starting_log_inv_rate)
        for rate in parameters.log_inv_rates:
            validate_rate(rate, "log_inv_rates entry")

        d = Derivation(
            "WHIR protocol",
            ldt_parameters,
            parameters.security_assumption,
            parameters.security_level,
            parameters.pow_bits,
            parameters.digest_size_bits,
        )
        assumption = parameters.security_assumption
        constraint_degree = ldt_parameters.constraint_degree
        inner_sumcheck_degree = max(constraint_degree, MIN_INNER_SUMCHECK_DEGREE)
        log_inv_rate = parameters.starting_log_inv_rate
        starting_folding_factor = parameters.starting_folding_factor
        starting_domain_log_size = ldt_parameters.log_degree + log_inv_rate

        batching_pow_bits = 0.0
        if ldt_parameters.batch_size > 1:
            batching_pow_bits = d.batching_round(log_inv_rate)

        current_tree = d.initial_tree(starting_domain_log_size, starting_folding_factor)
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
        for folding_factor, next_rate in zip(parameters.folding_factors, parameters.log_inv_rates):
            evaluation_domain_log_size = current_log_degree + next_rate
            next_tree = d.round_tree(evaluation_domain_log_size, folding_factor)

            d.builder.start_round("whir_iteration")
            d.send_root(next_tree)

            ood_samples = assumption.determine_ood_samples(
                parameters.security_level, current_log_degree, next_rate, d.field_bits,
            )
            if ood_samples > 0:
                ood_error = assumption.ood_error(current_log_degree, next_rate, d.field_bits, ood_samples)
                d.challenge([("ood_error", ood_error)])
                d.send_field_elements(ood_samples)

            num_queries = assumption.queries(d.protocol_security_level, log_inv_rate)
            query_error = assumption.queries_error(log_inv_rate, num_queries)

            batching_error = assumption.constraint_folding_error(
                current_log_degree, log_inv_rate, d.field_bits, num_queries + ood_samples,
            )
            query_pow_bits = d.pow("iteration queries", min(query_error, batching_error))

            d.challenge(
                [("query_error", query_error), ("batching_error", batching_error)],
                query_pow_bits,
            )
            d.send_queries(current_tree, num_queries)

            pow_bits = [query_pow_bits]
            for _ in range(folding_factor):
                pow_bits.append(d.sumcheck_fold(current_log_degree, next_rate, inner_sumcheck_degree))
                current_log_degree -= 1
            d.builder.end_round()

            round_parameters.append(RoundConfig(
                folding_factor=folding_factor,
                evaluation_domain_log_size=evaluation_domain_log_size,
                log_inv_rate=log_inv_rate,
                pow_bits=pow_bits,
                num_queries=num_queries,
                ood_samples=ood_samples,
            ))
            logger.debug(
                "WHIR iteration %d: domain 2^%d, rate 2^-%d -> 2^-%d, %d queries, %d OOD samples",
                len(round_parameters), evaluation_domain_log_size,
                log_inv_rate, next_rate, num_queries, ood_samples,
            )

            current_tree = next_tree
            log_inv_rate = next_rate

        final_queries, final_pow_bits = d.final_round(
            "final_round", log_inv_rate, final_log_degree, [current_tree],
        )

        config = IOPConfig(
            shape=WHIR_SHAPE,
            ldt_parameters=ldt_parameters,
            security_assumption=assumption,
            security_level=parameters.security_level,
            max_pow_bits=parameters.pow_bits,
            starting_log_inv_rate=parameters.starting_log_inv_rate,
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
