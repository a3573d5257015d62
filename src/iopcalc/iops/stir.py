"""
STIR (Shift To Improve Rate)

Each iteration folds by 2^k but shrinks the evaluation domain by less, so
the rate of the committed oracles improves round over round and later
rounds need fewer queries. Every iteration:

    - commits to the folded function over a fresh domain
    - binds it with out-of-domain samples
    - queries the previous oracle at the previous rate
    - combines query answers (degree correction) and folds again

The PoW of an iteration covers the weakest of its query error and its two
proximity-gaps errors.
"""

from dataclasses import dataclass
from typing import Tuple
import logging

from ..assumptions import SecurityAssumption
from ..config import STIR_SHAPE, IOPConfig, RoundConfig
from ..exceptions import ConfigurationError
from ..field import LowDegreeParameters
from ..proof_size import DEFAULT_DIGEST_SIZE_BITS
from .base import Derivation, IOPInstance, validate_folding, validate_parallel, validate_rate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StirParameters:
    """
    Knobs of a STIR instance.

    `evaluation_domain_log_sizes[i]` is the domain of the oracle committed
    in iteration i; the rate of that oracle follows from it.
    """

    starting_log_inv_rate: int
    starting_folding_factor: int
    folding_factors: Tuple[int, ...]
    evaluation_domain_log_sizes: Tuple[int, ...]
    security_assumption: SecurityAssumption
    security_level: int
    pow_bits: int
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS

    def __post_init__(self):
        object.__setattr__(self, 'folding_factors', tuple(self.folding_factors))
        object.__setattr__(self, 'evaluation_domain_log_sizes', tuple(self.evaluation_domain_log_sizes))

    @classmethod
    def fixed_domain_shift(
        cls,
        log_degree: int,
        log_inv_rate: int,
        folding_factor: int,
        num_rounds: int,
        security_assumption: SecurityAssumption,
        security_level: int,
        pow_bits: int,
        digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS,
    ) -> 'StirParameters':
        """The domain halves in every iteration while the degree drops by 2^folding_factor."""
        starting_domain_log_size = log_degree + log_inv_rate
        return cls(
            starting_log_inv_rate=log_inv_rate,
            starting_folding_factor=folding_factor,
            folding_factors=(folding_factor,) * num_rounds,
            evaluation_domain_log_sizes=tuple(starting_domain_log_size - (i + 1) for i in range(num_rounds)),
            security_assumption=security_assumption,
            security_level=security_level,
            pow_bits=pow_bits,
            digest_size_bits=digest_size_bits,
        )


@dataclass(frozen=True)
class StirProtocol(IOPInstance):

    @classmethod
    def new(cls, ldt_parameters: LowDegreeParameters, parameters: StirParameters) -> 'StirProtocol':
        validate_parallel(
            "folding_factors", parameters.folding_factors,
            "evaluation_domain_log_sizes", parameters.evaluation_domain_log_sizes,
        )
        final_log_degree = validate_folding(
            ldt_parameters, parameters.starting_folding_factor, parameters.folding_factors,
        )
        validate_rate(parameters.starting_log_inv_rate)

        d = Derivation(
            "STIR protocol",
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

        current_tree = d.initial_tree(starting_domain_log_size, starting_folding_factor)
        current_log_degree = ldt_parameters.log_degree - starting_folding_factor

        starting_error = assumption.prox_gaps_error(
            current_log_degree, log_inv_rate, d.field_bits, 1 << starting_folding_factor,
        )
        starting_folding_pow_bits = d.pow("initial fold", starting_error)

        d.builder.start_round("initial_fold")
        d.challenge([("folding_error", starting_error)], starting_folding_pow_bits)
        d.builder.end_round()

        round_parameters = []
        for folding_factor, evaluation_domain_log_size in zip(
            parameters.folding_factors, parameters.evaluation_domain_log_sizes
        ):
            if evaluation_domain_log_size <= current_log_degree:
                raise ConfigurationError(
                    f"Evaluation domain 2^{evaluation_domain_log_size} cannot encode "
                    f"degree 2^{current_log_degree}"
                )
            # The committed oracle still has degree current_log_degree; it is folded after the queries
            next_rate = evaluation_domain_log_size - current_log_degree
            next_tree = d.round_tree(evaluation_domain_log_size, folding_factor)

            d.builder.start_round("stir_iteration")
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

            combination_error = assumption.prox_gaps_error(
                current_log_degree, next_rate, d.field_bits, max(1, num_queries + ood_samples),
            )
            folding_error = assumption.prox_gaps_error(
                current_log_degree - folding_factor, next_rate, d.field_bits, 1 << folding_factor,
            )

            pow_bits = d.pow("iteration", min(query_error, combination_error, folding_error))

            d.challenge(
                [
                    ("query_error", query_error),
                    ("combination_error", combination_error),
                    ("folding_error", folding_error),
                ],
                pow_bits,
            )
            d.send_queries(current_tree, num_queries)
            d.builder.end_round()

            round_parameters.append(RoundConfig(
                folding_factor=folding_factor,
                evaluation_domain_log_size=evaluation_domain_log_size,
                log_inv_rate=log_inv_rate,
                pow_bits=(pow_bits,),
                num_queries=num_queries,
                ood_samples=ood_samples,
            ))
            logger.debug(
                "STIR iteration %d: rate 2^-%d -> 2^-%d, %d queries, %d OOD samples",
                len(round_parameters), log_inv_rate, next_rate, num_queries, ood_samples,
            )

            current_tree = next_tree
            log_inv_rate = next_rate
            current_log_degree -= folding_factor

        final_queries, final_pow_bits = d.final_round(
            "final_round", log_inv_rate, final_log_degree, [current_tree],
        )

        config = IOPConfig(
            shape=STIR_SHAPE,
            ldt_parameters=ldt_parameters,
            security_assumption=assumption,
            security_level=parameters.security_level,
            max_pow_bits=parameters.pow_bits,
            starting_log_inv_rate=parameters.starting_log_inv_rate,
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
