"""
Field and Low-Degree-Test Descriptors

The estimator never performs field arithmetic. A field is only described
by the size of its base field and the degree of the extension that
verifier challenges are sampled from.
"""

from dataclasses import dataclass

from .exceptions import ConfigurationError


@dataclass(frozen=True)
class Field:
    """
    Immutable field descriptor.

    Elements of the base field take `base_bit_size` bits, elements of the
    extension take `extension_degree` times as much.
    """

    name: str
    base_bit_size: int
    extension_degree: int

    def __post_init__(self):
        if self.base_bit_size <= 0:
            raise ConfigurationError(f"Field base bit size must be positive, got {self.base_bit_size}")
        if self.extension_degree <= 0:
            raise ConfigurationError(f"Extension degree must be positive, got {self.extension_degree}")

    @property
    def extension_bit_size(self) -> int:
        """Bits needed for one extension field element."""
        return self.base_bit_size * self.extension_degree

    def __str__(self) -> str:
        return f"{self.extension_degree}-extension of {self.name} - {self.base_bit_size} bits base"


@dataclass(frozen=True)
class LowDegreeParameters:
    """
    Parameters of a (batched) low-degree test.

    `batch_size` is the number of functions tested (not in log form).
    `constraint_degree` is the degree of the constraints proven on the
    committed words, 0 for plain proximity testing.
    """

    field: Field
    log_degree: int
    batch_size: int = 1
    constraint_degree: int = 0

    def __post_init__(self):
        if self.log_degree <= 0:
            raise ConfigurationError(f"log_degree must be positive, got {self.log_degree}")
        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.constraint_degree < 0:
            raise ConfigurationError(f"constraint_degree must be non-negative, got {self.constraint_degree}")

    def __str__(self) -> str:
        return f"Field: {self.field}, Degree: 2^{self.log_degree}, batch_size: {self.batch_size}"

    def to_dict(self) -> dict:
        return {
            'field': self.field.name,
            'base_bit_size': self.field.base_bit_size,
            'extension_degree': self.field.extension_degree,
            'log_degree': self.log_degree,
            'batch_size': self.batch_size,
            'constraint_degree': self.constraint_degree,
        }


def default_max_pow(num_variables: int, log_inv_rate: int) -> int:
    """Default grinding budget: anything above it points at a misconfiguration."""
    return num_variables + log_inv_rate - 3


# =============================================================================
# Preset Fields
# =============================================================================

GOLDILOCKS_2 = Field(name="Goldilocks", base_bit_size=64, extension_degree=2)
GOLDILOCKS_3 = Field(name="Goldilocks", base_bit_size=64, extension_degree=3)

BABYBEAR_4 = Field(name="BabyBear", base_bit_size=31, extension_degree=4)
BABYBEAR_5 = Field(name="BabyBear", base_bit_size=31, extension_degree=5)

KOALABEAR_4 = Field(name="KoalaBear", base_bit_size=31, extension_degree=4)

MERSENNE31_4 = Field(name="Mersenne31", base_bit_size=31, extension_degree=4)
