"""
Tests for the WHIR Instantiator
"""

import math

import pytest

from iopcalc import (
    GOLDILOCKS_2,
    ConfigurationError,
    LowDegreeParameters,
    ProofElementKind,
    SecurityAssumption,
    WhirParameters,
    WhirProtocol,
)


CB = SecurityAssumption.CAPACITY_BOUND
JB = SecurityAssumption.JOHNSON_BOUND


def whir(constraint_degree=0, batch_size=1, assumption=CB, shift=False):
    ldt = LowDegreeParameters(
        GOLDILOCKS_2, log_degree=20, batch_size=batch_size, constraint_degree=constraint_degree,
    )
    preset = WhirParameters.fixed_domain_shift if shift else WhirParameters.fixed_rate_folding
    params = preset(
        log_inv_rate=1,
        folding_factor=4,
        num_rounds=2,
        security_assumption=assumption,
        security_level=100,
        pow_bits=20,
    )
    return WhirProtocol.new(ldt, params)


class TestWhirParameters:

    def test_fixed_rate_folding(self):
        params = WhirParameters.fixed_rate_folding(2, 3, 3, CB, 100, 20)
        assert params.log_inv_rates == (2, 2, 2)
        assert params.folding_factors == (3, 3, 3)

    def test_fixed_domain_shift(self):
        params = WhirParameters.fixed_domain_shift(1, 4, 3, CB, 100, 20)
        assert params.log_inv_rates == (4, 7, 10)


class TestWhirConfig:

    def test_shape(self):
        config = whir().config
        assert config.final_log_degree == 8
        assert len(config.starting_folding_pow_bits) == 4
        assert [len(r.pow_bits) for r in config.round_parameters] == [5, 5]

    def test_domains_follow_rates(self):
        config = whir(shift=True).config
        assert [r.evaluation_domain_log_size for r in config.round_parameters] == [16 + 4, 12 + 7]
        assert [r.log_inv_rate for r in config.round_parameters] == [1, 4]
        assert config.final_log_inv_rate == 7

    def test_query_pow_first(self):
        config = whir().config
        # 80 queries at rate 1/2 leave 20 bits for grinding
        assert config.round_parameters[0].num_queries == 80
        assert config.round_parameters[0].pow_bits[0] == pytest.approx(20.0)

    def test_summary_lists_pow_vectors(self):
        summary = whir().config.summary()
        assert "initial_folding_pow_bits: [" in summary
        assert "ood_samples: 2, pow_bits: [20.0, " in summary


class TestWhirTranscript:

    def test_round_layout(self):
        names = [r.name for r in whir().protocol.rounds]
        assert names == ["initial_sumcheck", "whir_iteration", "whir_iteration", "final_round"]

    def test_initial_sumcheck_polynomials(self):
        initial = whir(constraint_degree=3).protocol.rounds[0]
        sizes = [m.element.value.num_elements for m in initial.prover_messages()]
        assert sizes == [4] * 4
        for message in initial.verifier_messages():
            assert [t.label for t in message.errors] == ["folding_error", "sumcheck_error"]

    def test_plain_proximity_has_no_sumcheck_error(self):
        initial = whir().protocol.rounds[0]
        for message in initial.verifier_messages():
            sumcheck = [t.error for t in message.errors if t.label == "sumcheck_error"]
            assert sumcheck == [math.inf]

    def test_inner_sumcheck_is_at_least_quadratic(self):
        iteration = whir().protocol.rounds[1]
        sumcheck_polys = [
            m.element.value.num_elements
            for m in iteration.prover_messages()
            if m.element.kind is ProofElementKind.FIELD_ELEMENTS
        ]
        # OOD answers first, then one degree-2 polynomial per fold
        assert sumcheck_polys == [2, 3, 3, 3, 3]

    def test_iteration_labels(self):
        iteration = whir().protocol.rounds[1]
        labels = [[t.label for t in m.errors] for m in iteration.verifier_messages()]
        assert labels[0] == ["ood_error"]
        assert labels[1] == ["query_error", "batching_error"]
        assert labels[2:] == [["folding_error", "sumcheck_error"]] * 4

    def test_final_round_opens_last_tree_only(self):
        instance = whir()
        final = instance.protocol.rounds[-1]
        last_root = next(instance.protocol.rounds[2].prover_messages()).element.value
        queries = [m.element.value for m in final.prover_messages() if m.element.kind is ProofElementKind.MERKLE_QUERIES]
        assert [q.merkle_tree for q in queries] == [last_root]

    def test_johnson_bound(self):
        instance = whir(assumption=JB)
        assert instance.config.final_queries == 160
        assert instance.rbr_error() >= 100 - 1e-9

    def test_deterministic(self):
        assert whir(constraint_degree=2).to_dict() == whir(constraint_degree=2).to_dict()


class TestWhirValidation:

    def test_parallel_lists(self):
        ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=20)
        params = WhirParameters(1, 4, (4, 4), (1,), CB, 100, 20)
        with pytest.raises(ConfigurationError):
            WhirProtocol.new(ldt, params)

    def test_rates_positive(self):
        ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=20)
        params = WhirParameters(1, 4, (4,), (0,), CB, 100, 20)
        with pytest.raises(ConfigurationError):
            WhirProtocol.new(ldt, params)
