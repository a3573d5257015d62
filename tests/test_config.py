"""
Tests for the Unified Configuration

Checks that shared across all four instantiators: the round parameters
line up with the committed trees and iterations of the transcript, the
shape decides what gets rendered, and derivation is deterministic.
"""

import json

import pytest
from hypothesis import given, settings, strategies as st

from iopcalc import (
    GOLDILOCKS_3,
    BasefoldParameters,
    BasefoldProtocol,
    FriParameters,
    FriProtocol,
    LowDegreeParameters,
    ProofElementKind,
    SecurityAssumption,
    StirParameters,
    StirProtocol,
    WhirParameters,
    WhirProtocol,
)
from iopcalc.proof_size import DEFAULT_DIGEST_SIZE_BITS
from iopcalc.config import (
    BASEFOLD_SHAPE,
    FRI_SHAPE,
    STIR_SHAPE,
    WHIR_SHAPE,
    IOPConfig,
    RoundConfig,
)


ITERATION_NAMES = {
    "FRI": "fri_round",
    "STIR": "stir_iteration",
    "WHIR": "whir_iteration",
    "Basefold": "basefold_iteration",
}


def build(protocol, log_degree, log_inv_rate, folding_factor, num_rounds, assumption):
    ldt = LowDegreeParameters(GOLDILOCKS_3, log_degree=log_degree)
    common = dict(
        folding_factor=folding_factor,
        num_rounds=num_rounds,
        security_assumption=assumption,
        security_level=100,
        pow_bits=20,
    )
    if protocol == "FRI":
        return FriProtocol.new(ldt, FriParameters.fixed_folding(log_inv_rate=log_inv_rate, **common))
    if protocol == "STIR":
        params = StirParameters.fixed_domain_shift(log_degree=log_degree, log_inv_rate=log_inv_rate, **common)
        return StirProtocol.new(ldt, params)
    if protocol == "WHIR":
        return WhirProtocol.new(ldt, WhirParameters.fixed_domain_shift(log_inv_rate=log_inv_rate, **common))
    return BasefoldProtocol.new(ldt, BasefoldParameters.fixed_folding(log_inv_rate=log_inv_rate, **common))


@st.composite
def instances(draw):
    """Small but valid parameter sets for every protocol."""
    protocol = draw(st.sampled_from(sorted(ITERATION_NAMES)))
    folding_factor = draw(st.integers(min_value=1, max_value=4))
    num_rounds = draw(st.integers(min_value=0, max_value=3))
    min_degree = folding_factor * (num_rounds + 1)
    log_degree = draw(st.integers(min_value=min_degree, max_value=min_degree + 8))
    log_inv_rate = draw(st.integers(min_value=1, max_value=4))
    assumption = draw(st.sampled_from(list(SecurityAssumption)))
    return build(protocol, log_degree, log_inv_rate, folding_factor, num_rounds, assumption)


class TestRoundCorrespondence:

    @given(instances())
    @settings(max_examples=60, deadline=None)
    def test_one_iteration_per_round_config(self, instance):
        config = instance.config
        iteration_name = ITERATION_NAMES[config.shape.name]
        iterations = [r for r in instance.protocol.rounds if r.name == iteration_name]
        assert len(iterations) == config.num_rounds

        for round_config, r in zip(config.round_parameters, iterations):
            roots = [m.element.value for m in r.prover_messages() if m.element.kind is ProofElementKind.MERKLE_ROOT]
            assert len(roots) == 1
            assert roots[0].tree_depth == round_config.evaluation_domain_log_size - round_config.folding_factor

    @given(instances())
    @settings(max_examples=60, deadline=None)
    def test_pow_never_negative(self, instance):
        assert all(bits >= 0 for bits in instance.config.all_pow_bits())

    @given(instances())
    @settings(max_examples=60, deadline=None)
    def test_final_degree(self, instance):
        config = instance.config
        folded = config.starting_folding_factor + sum(r.folding_factor for r in config.round_parameters)
        assert config.final_log_degree == config.ldt_parameters.log_degree - folded


class TestShapes:

    def test_shape_flags(self):
        assert not FRI_SHAPE.has_ood and not FRI_SHAPE.vector_pow
        assert STIR_SHAPE.has_ood and not STIR_SHAPE.has_constraint_folding
        assert WHIR_SHAPE.has_ood and WHIR_SHAPE.has_constraint_folding and WHIR_SHAPE.vector_pow
        assert BASEFOLD_SHAPE.has_constraint_folding and not BASEFOLD_SHAPE.per_round_queries

    def test_render_scalar_pow(self):
        r = RoundConfig(4, 23, 1, (0.5,))
        assert r.render(FRI_SHAPE) == "Folding factor: 4, domain_size: 2^23, pow_bits: 0.5"

    def test_render_vector_pow(self):
        r = RoundConfig(2, 20, 3, [19.0, 0.0, 0.0], num_queries=27, ood_samples=1)
        assert r.render(WHIR_SHAPE) == (
            "Folding factor: 2, domain_size: 2^20, num_queries: 27, rate: 2^-3, "
            "ood_samples: 1, pow_bits: [19.0, 0.0, 0.0]"
        )

    def test_pow_bits_stored_as_tuple(self):
        assert RoundConfig(2, 20, 3, [1.0, 2.0]).pow_bits == (1.0, 2.0)


class TestExport:

    @pytest.mark.parametrize("protocol", sorted(ITERATION_NAMES))
    def test_to_dict_is_json(self, protocol):
        instance = build(protocol, 24, 2, 3, 2, SecurityAssumption.JOHNSON_BOUND)
        data = json.loads(json.dumps(instance.to_dict()))
        assert data['config']['protocol'] == protocol
        assert data['config']['security_assumption'] == "JohnsonBound"
        assert len(data['config']['round_parameters']) == 2
        assert data['protocol']['proof_size_bits'] == instance.proof_size_bits()

    @pytest.mark.parametrize("protocol", sorted(ITERATION_NAMES))
    def test_rendering_is_deterministic(self, protocol):
        a = build(protocol, 24, 2, 3, 2, SecurityAssumption.CAPACITY_BOUND)
        b = build(protocol, 24, 2, 3, 2, SecurityAssumption.CAPACITY_BOUND)
        assert a == b
        assert str(a) == str(b)
        assert "Round by round soundness analysis" in str(a)

    def test_default_digest_size(self):
        instance = build("FRI", 24, 2, 3, 2, SecurityAssumption.CAPACITY_BOUND)
        assert instance.config.digest_size_bits == DEFAULT_DIGEST_SIZE_BITS
        assert instance.protocol.digest_size_bits == DEFAULT_DIGEST_SIZE_BITS
        assert IOPConfig.__dataclass_fields__['digest_size_bits'].default == DEFAULT_DIGEST_SIZE_BITS
