"""
Security Assumptions and Error Model

Every sub-argument of FRI, STIR, WHIR and Basefold loses some soundness.
The functions here express that loss in bits (log2 scale): an error of
`e` bits means an adversary succeeds with probability at most 2^-e.
Negative values are possible and mean the term is overspent.

The three assumptions differ in the distance up to which the Reed-Solomon
code is assumed to be (list-)decodable:

    UniqueDecoding   δ = (1 - ρ) / 2        proven, most conservative
    JohnsonBound     δ = 1 - √ρ - η         proven
    CapacityBound    δ = 1 - ρ - η          conjectured, most aggressive

Arguments follow one convention throughout:
    log_degree       log2 of the degree bound of the code
    log_inv_rate     log2(1/ρ)
    field_bits       bit size of the field challenges are drawn from
"""

from enum import Enum
import math

from .exceptions import InfeasibleSecurityError


LOG2_10 = math.log2(10)

MAX_OOD_SAMPLES = 64


def pow_util(security_level: float, error: float) -> float:
    """Grinding bits needed to lift an error of `error` bits to `security_level`."""
    return max(0.0, security_level - error)


class SecurityAssumption(Enum):
    """Proximity-gap and list-decoding regime used to size the protocol."""

    UNIQUE_DECODING = "UniqueDecoding"
    JOHNSON_BOUND = "JohnsonBound"
    CAPACITY_BOUND = "CapacityBound"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_str(cls, name: str) -> 'SecurityAssumption':
        """Parse the display name of an assumption."""
        for assumption in cls:
            if assumption.value == name:
                return assumption
        raise ValueError(f"Invalid soundness specification: {name}")

    # ==========================================================================
    # Distance and List Size
    # ==========================================================================

    def log_eta(self, log_inv_rate: int) -> float:
        """Slack below the decoding radius, chosen as a function of the rate."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0.0
        if self is SecurityAssumption.JOHNSON_BOUND:
            return -(0.5 * log_inv_rate + LOG2_10 + 1.0)
        return -(log_inv_rate + 1.0)

    def list_size_bits(self, log_degree: int, log_inv_rate: int) -> float:
        """log2 of the list size of the code at the assumption's distance."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0.0
        log_eta = self.log_eta(log_inv_rate)
        if self is SecurityAssumption.JOHNSON_BOUND:
            return log_inv_rate / 2.0 - (1.0 + log_eta)
        return (log_degree + log_inv_rate) - log_eta

    # ==========================================================================
    # Proximity Gaps
    # ==========================================================================

    def _prox_gaps_term(self, log_degree: int, log_inv_rate: int) -> float:
        if self is SecurityAssumption.UNIQUE_DECODING:
            return float(log_degree + log_inv_rate)
        if self is SecurityAssumption.JOHNSON_BOUND:
            return LOG2_10 + 3.5 * log_inv_rate + 2.0 * log_degree
        return (log_degree + log_inv_rate) - self.log_eta(log_inv_rate)

    def prox_gaps_error(
        self,
        log_degree: int,
        log_inv_rate: int,
        field_bits: int,
        num_functions: int,
    ) -> float:
        """
        Error of a random linear combination of `num_functions` functions.

        Returns field_bits - (term + log2(num_functions)).
        """
        return field_bits - (self._prox_gaps_term(log_degree, log_inv_rate) + math.log2(num_functions))

    def fold_prox_gaps_error(
        self,
        log_degree: int,
        log_inv_rate: int,
        field_bits: int,
        num_functions: int = 2,
    ) -> float:
        """
        Error of a combination with powers of a single challenge.

        Returns field_bits - (term + log2(num_functions - 1)). A single
        variable fold combines two functions and pays no multiplicity.
        """
        if num_functions < 2:
            raise ValueError(f"A fold combines at least two functions, got {num_functions}")
        return field_bits - (self._prox_gaps_term(log_degree, log_inv_rate) + math.log2(num_functions - 1))

    # ==========================================================================
    # Queries
    # ==========================================================================

    def log_1_delta(self, log_inv_rate: int) -> float:
        """log2(1 - δ): bits of error a single query leaves."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            rate = 2.0 ** -log_inv_rate
            return math.log2(0.5 * (1.0 + rate))
        if self is SecurityAssumption.JOHNSON_BOUND:
            return -0.5 * log_inv_rate
        return -float(log_inv_rate)

    def queries(self, security_level: float, log_inv_rate: int) -> int:
        """Smallest t with (1 - δ)^t <= 2^-security_level."""
        if security_level <= 0:
            return 0
        num_queries = math.ceil(-security_level / self.log_1_delta(log_inv_rate))
        # ceil of a rounded quotient can land one short
        while self.queries_error(log_inv_rate, num_queries) < security_level:
            num_queries += 1
        return num_queries

    def queries_error(self, log_inv_rate: int, num_queries: int) -> float:
        return -num_queries * self.log_1_delta(log_inv_rate)

    # ==========================================================================
    # Out-of-Domain Sampling
    # ==========================================================================

    def ood_error(
        self,
        log_degree: int,
        log_inv_rate: int,
        field_bits: int,
        ood_samples: int,
    ) -> float:
        """Error of `ood_samples` out-of-domain samples in pinning down a list element."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0.0
        list_size_bits = self.list_size_bits(log_degree, log_inv_rate)
        error = 2.0 * list_size_bits + log_degree * ood_samples
        return ood_samples * field_bits + 1.0 - error

    def determine_ood_samples(
        self,
        security_level: float,
        log_degree: int,
        log_inv_rate: int,
        field_bits: int,
    ) -> int:
        """Fewest out-of-domain samples reaching `security_level`."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0

        for ood_samples in range(1, MAX_OOD_SAMPLES + 1):
            if self.ood_error(log_degree, log_inv_rate, field_bits, ood_samples) >= security_level:
                return ood_samples

        raise InfeasibleSecurityError(
            f"No number of OOD samples up to {MAX_OOD_SAMPLES} reaches {security_level} bits "
            f"(log_degree={log_degree}, log_inv_rate={log_inv_rate}, field_bits={field_bits})"
        )

    # ==========================================================================
    # Constraint Folding
    # ==========================================================================

    def constraint_folding_error(
        self,
        log_degree: int,
        log_inv_rate: int,
        field_bits: int,
        num_terms: int,
    ) -> float:
        """
        Error of folding `num_terms` constraint terms with one challenge.

        Covers a sumcheck round over a polynomial of degree `num_terms` and
        the combination of `num_terms` query/OOD constraints, each union
        bounded over every codeword in the decoding list. Without any term
        there is nothing to cheat on and the error is infinite.
        """
        if num_terms <= 0:
            return math.inf
        list_size_bits = self.list_size_bits(log_degree, log_inv_rate)
        return field_bits - (list_size_bits + math.log2(num_terms))

    ood_samples = determine_ood_samples
