"""
Shared machinery of the protocol instantiators.

All four protocols walk the same state machine over
(current_log_degree, current_log_inv_rate):

    1. validate the folding schedule
    2. optional batching round
    3. initial fold
    4. one iteration per configured round
    5. final query round

Derivation holds the pieces every protocol needs: the transcript builder,
the error model bound to the field size, and the grinding bookkeeping.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple
import logging

from ..assumptions import SecurityAssumption, pow_util
from ..config import IOPConfig
from ..exceptions import ConfigurationError
from ..field import LowDegreeParameters
from ..proof_size import FieldElements, MerkleQueries, MerkleTree, ProofElement
from ..protocol import Protocol, ProtocolBuilder, ProverMessage, RbRError, VerifierMessage
from ..protocol.transcript import DEFAULT_ROM_QUERIES_BITS


logger = logging.getLogger(__name__)


def validate_folding(
    ldt_parameters: LowDegreeParameters,
    starting_folding_factor: int,
    folding_factors: Sequence[int],
) -> int:
    """
    Check a folding schedule against the degree.

    Returns the log-degree of the final polynomial.
    """
    if starting_folding_factor <= 0 or any(k <= 0 for k in folding_factors):
        raise ConfigurationError(
            f"Folding factors must be positive, got starting={starting_folding_factor}, "
            f"rounds={list(folding_factors)}"
        )

    if starting_folding_factor > ldt_parameters.log_degree:
        raise ConfigurationError(
            f"Starting folding factor {starting_folding_factor} exceeds log_degree {ldt_parameters.log_degree}"
        )

    total_reduction = starting_folding_factor + sum(folding_factors)
    if total_reduction > ldt_parameters.log_degree:
        raise ConfigurationError(
            f"Total folding {total_reduction} exceeds log_degree {ldt_parameters.log_degree}"
        )

    return ldt_parameters.log_degree - total_reduction


def validate_parallel(name_a: str, a: Sequence, name_b: str, b: Sequence):
    if len(a) != len(b):
        raise ConfigurationError(f"{name_a} has {len(a)} entries but {name_b} has {len(b)}")


def validate_rate(log_inv_rate: int, what: str = "log_inv_rate"):
    if log_inv_rate <= 0:
        raise ConfigurationError(f"{what} must be positive, got {log_inv_rate}")


@dataclass(frozen=True)
class IOPInstance:
    """A derived configuration together with its transcript."""
    config: IOPConfig
    protocol: Protocol

    def proof_size_bits(self) -> int:
        return self.protocol.proof_size_bits()

    def rbr_error(self) -> float:
        return self.protocol.rbr_error()

    def compiled_classical_security(self, rom_queries_bits: float = DEFAULT_ROM_QUERIES_BITS) -> float:
        return self.protocol.compiled_classical_security(rom_queries_bits)

    def compiled_quantum_security(self, rom_queries_bits: float = DEFAULT_ROM_QUERIES_BITS) -> float:
        return self.protocol.compiled_quantum_security(rom_queries_bits)

    def to_dict(self) -> dict:
        return {'config': self.config.to_dict(), 'protocol': self.protocol.to_dict()}

    def __str__(self) -> str:
        return f"{self.config.summary()}\n{self.protocol}"


class Derivation:
    """
    One run of an instantiator.

    Owns the transcript builder for the duration of the run; only the
    finished Protocol leaves it.
    """

    def __init__(
        self,
        protocol_name: str,
        ldt_parameters: LowDegreeParameters,
        security_assumption: SecurityAssumption,
        security_level: int,
        pow_bits: int,
        digest_size_bits: int,
    ):
        self.ldt = ldt_parameters
        self.field = ldt_parameters.field
        self.field_bits = ldt_parameters.field.extension_bit_size
        self.assumption = security_assumption
        self.security_level = security_level
        self.max_pow_bits = pow_bits
        # Queries only need to reach the level left over after grinding
        self.protocol_security_level = max(0, security_level - pow_bits)
        self.digest_size_bits = digest_size_bits
        self.builder = ProtocolBuilder(protocol_name, digest_size_bits)

    # ==========================================================================
    # Grinding
    # ==========================================================================

    def pow(self, label: str, error: float) -> float:
        """PoW bits needed to lift `error` to the security level."""
        bits = pow_util(self.security_level, error)
        if bits > self.max_pow_bits:
            logger.warning(
                "%s: %s needs %.1f bits of PoW, above the budget of %d bits",
                self.builder.name, label, bits, self.max_pow_bits,
            )
        return bits

    # ==========================================================================
    # Proof Elements
    # ==========================================================================

    def merkle_tree(self, tree_depth: int, leaf_size: int, is_extension: bool) -> MerkleTree:
        return MerkleTree.new(
            tree_depth, self.field, leaf_size, is_extension, digest_size=self.digest_size_bits,
        )

    def initial_tree(self, starting_domain_log_size: int, starting_folding_factor: int) -> MerkleTree:
        """The committed input: cosets of the initial fold, every batched function per leaf, base field."""
        return self.merkle_tree(
            starting_domain_log_size - starting_folding_factor,
            (1 << starting_folding_factor) * self.ldt.batch_size,
            is_extension=False,
        )

    def round_tree(self, evaluation_domain_log_size: int, folding_factor: int) -> MerkleTree:
        return self.merkle_tree(
            evaluation_domain_log_size - folding_factor,
            1 << folding_factor,
            is_extension=True,
        )

    def send_root(self, tree: MerkleTree):
        self.builder.prover_message(ProverMessage(ProofElement.merkle_root(tree)))

    def send_field_elements(self, num_elements: int, is_extension: bool = True):
        elements = FieldElements(field=self.field, num_elements=num_elements, is_extension=is_extension)
        self.builder.prover_message(ProverMessage(ProofElement.field_elements(elements)))

    def send_queries(self, tree: MerkleTree, num_openings: int):
        queries = MerkleQueries(merkle_tree=tree, num_openings=num_openings)
        self.builder.prover_message(ProverMessage(ProofElement.merkle_queries(queries)))

    def challenge(self, errors: Iterable[Tuple[str, float]], pow_bits: float = 0.0):
        terms = [RbRError(label, error) for label, error in errors]
        self.builder.verifier_message(VerifierMessage(terms, pow_bits))

    # ==========================================================================
    # Shared Rounds
    # ==========================================================================

    def batching_round(self, starting_log_inv_rate: int) -> float:
        """Combine `batch_size` functions into one. Returns the PoW bits spent."""
        error = self.assumption.prox_gaps_error(
            self.ldt.log_degree,
            starting_log_inv_rate,
            self.field_bits,
            self.ldt.batch_size,
        )
        pow_bits = self.pow("batching", error)

        self.builder.start_round("batching_round")
        self.challenge([("batching_error", error)], pow_bits)
        self.builder.end_round()
        return pow_bits

    def sumcheck_fold(self, log_degree: int, log_inv_rate: int, sumcheck_degree: int) -> float:
        """
        One single-variable fold interleaved with a sumcheck round.

        The prover sends the round polynomial, the verifier's challenge is
        charged with the folding error at the reduced degree and with the
        sumcheck error of a degree `sumcheck_degree` polynomial.
        """
        folding_error = self.assumption.fold_prox_gaps_error(
            log_degree - 1, log_inv_rate, self.field_bits,
        )
        sumcheck_error = self.assumption.constraint_folding_error(
            log_degree, log_inv_rate, self.field_bits, sumcheck_degree,
        )
        pow_bits = self.pow("sumcheck fold", min(folding_error, sumcheck_error))

        self.send_field_elements(sumcheck_degree + 1)
        self.challenge(
            [("folding_error", folding_error), ("sumcheck_error", sumcheck_error)],
            pow_bits,
        )
        return pow_bits

    def final_queries(self, log_inv_rate: int) -> Tuple[int, float, float]:
        """Returns (num_queries, query_error, pow_bits) at the final rate."""
        num_queries = self.assumption.queries(self.protocol_security_level, log_inv_rate)
        query_error = self.assumption.queries_error(log_inv_rate, num_queries)
        return num_queries, query_error, self.pow("final queries", query_error)

    def final_round(
        self,
        name: str,
        log_inv_rate: int,
        final_log_degree: int,
        trees: List[MerkleTree],
    ) -> Tuple[int, float]:
        """
        Query phase: the final polynomial in the clear plus openings of
        every tree in `trees`. Returns (num_queries, pow_bits).
        """
        num_queries, query_error, pow_bits = self.final_queries(log_inv_rate)

        self.builder.start_round(name)
        self.challenge([("query_error", query_error)], pow_bits)
        self.send_field_elements(1 << final_log_degree)
        for tree in trees:
            self.send_queries(tree, num_queries)
        self.builder.end_round()
        return num_queries, pow_bits
