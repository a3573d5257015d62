"""
iopcalc: Security and Proof-Size Estimation for Hash-Based IOPs

Derives concrete parameters for FRI, STIR, WHIR and Basefold from a target
security level and a proximity-gaps assumption, and estimates the size
and round-by-round soundness of the resulting non-interactive proof.

Usage:
    from iopcalc import (
        GOLDILOCKS_2, LowDegreeParameters, SecurityAssumption,
        FriParameters, FriProtocol,
    )

    ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=26)
    params = FriParameters.fixed_folding(
        log_inv_rate=1, folding_factor=4, num_rounds=4,
        security_assumption=SecurityAssumption.CAPACITY_BOUND,
        security_level=100, pow_bits=20,
    )
    fri = FriProtocol.new(ldt, params)
    print(fri)

The library only logs through the `iopcalc` logger hierarchy; configure
handlers in the application.
"""

# Errors
from .exceptions import (
    IOPCalcError,
    ConfigurationError,
    InfeasibleSecurityError,
    ProtocolBuilderError,
    DigestSizeMismatchError,
)

# Fields and error model
from .field import (
    Field,
    LowDegreeParameters,
    default_max_pow,
    GOLDILOCKS_2,
    GOLDILOCKS_3,
    BABYBEAR_4,
    BABYBEAR_5,
    KOALABEAR_4,
    MERSENNE31_4,
)
from .assumptions import SecurityAssumption, pow_util

# Proof size
from .proof_size import (
    FieldElements,
    MerkleTree,
    MerkleQueries,
    ProofElement,
    ProofElementKind,
)
from .utils import display_size

# Transcripts
from .protocol import (
    Protocol,
    ProtocolBuilder,
    BuilderState,
    ProverMessage,
    VerifierMessage,
    RbRError,
    Round,
)

# Configurations and instantiators
from .config import ProtocolShape, RoundConfig, IOPConfig
from .iops import (
    IOPInstance,
    FriParameters,
    FriProtocol,
    StirParameters,
    StirProtocol,
    WhirParameters,
    WhirProtocol,
    BasefoldParameters,
    BasefoldProtocol,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Errors
    "IOPCalcError",
    "ConfigurationError",
    "InfeasibleSecurityError",
    "ProtocolBuilderError",
    "DigestSizeMismatchError",
    # Fields and error model
    "Field",
    "LowDegreeParameters",
    "default_max_pow",
    "GOLDILOCKS_2",
    "GOLDILOCKS_3",
    "BABYBEAR_4",
    "BABYBEAR_5",
    "KOALABEAR_4",
    "MERSENNE31_4",
    "SecurityAssumption",
    "pow_util",
    # Proof size
    "FieldElements",
    "MerkleTree",
    "MerkleQueries",
    "ProofElement",
    "ProofElementKind",
    "display_size",
    # Transcripts
    "Protocol",
    "ProtocolBuilder",
    "BuilderState",
    "ProverMessage",
    "VerifierMessage",
    "RbRError",
    "Round",
    # Configurations and instantiators
    "ProtocolShape",
    "RoundConfig",
    "IOPConfig",
    "IOPInstance",
    "FriParameters",
    "FriProtocol",
    "StirParameters",
    "StirProtocol",
    "WhirParameters",
    "WhirProtocol",
    "BasefoldParameters",
    "BasefoldProtocol",
]
