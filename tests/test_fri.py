"""
Tests for the FRI Instantiator
"""

import logging

import pytest

from iopcalc import (
    GOLDILOCKS_2,
    ConfigurationError,
    FriParameters,
    FriProtocol,
    LowDegreeParameters,
    ProofElementKind,
    SecurityAssumption,
)


CB = SecurityAssumption.CAPACITY_BOUND


def fri(log_degree=26, batch_size=1, num_rounds=4, folding_factor=4, pow_bits=20, level=100):
    ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=log_degree, batch_size=batch_size)
    params = FriParameters.fixed_folding(
        log_inv_rate=1,
        folding_factor=folding_factor,
        num_rounds=num_rounds,
        security_assumption=CB,
        security_level=level,
        pow_bits=pow_bits,
    )
    return FriProtocol.new(ldt, params)


class TestFriConfig:

    def test_reference_instance(self):
        config = fri().config
        assert config.final_log_degree == 6
        assert config.num_rounds == 4
        assert config.starting_domain_log_size == 27
        assert [r.evaluation_domain_log_size for r in config.round_parameters] == [23, 19, 15, 11]

    def test_queries_and_pow(self):
        config = fri().config
        # 80 bits left after 20 bits of grinding, one bit per query at rate 1/2
        assert config.final_queries == 80
        assert config.final_pow_bits == pytest.approx(20.0)
        assert config.starting_folding_pow_bits == pytest.approx((1.0,))
        assert all(r.pow_bits == (0.0,) for r in config.round_parameters)
        assert config.max_pow() == pytest.approx(20.0)

    def test_rate_is_fixed(self):
        config = fri().config
        assert {r.log_inv_rate for r in config.round_parameters} == {1}
        assert config.final_log_inv_rate == 1

    def test_summary(self):
        summary = fri().config.summary()
        assert "Field: 2-extension of Goldilocks - 64 bits base, Degree: 2^26, batch_size: 1" in summary
        assert "Security level: 100 bits using CapacityBound security and 20 bits of PoW" in summary
        assert "queries: 80, pow_bits: 20.0" in summary
        assert "Folding factor: 4, domain_size: 2^23, pow_bits: 0.0" in summary
        assert "final_queries: 80, final polynomial: 6" in summary


class TestFriTranscript:

    def test_round_layout(self):
        protocol = fri().protocol
        names = [r.name for r in protocol.rounds]
        assert names == ["initial_fold"] + ["fri_round"] * 4 + ["query_round"]

    def test_round_parameters_match_committed_trees(self):
        instance = fri()
        rounds = [r for r in instance.protocol.rounds if r.name == "fri_round"]
        for round_config, r in zip(instance.config.round_parameters, rounds):
            (root,) = r.prover_messages()
            tree = root.element.value
            assert tree.tree_depth == round_config.evaluation_domain_log_size - round_config.folding_factor

    def test_query_round_reopens_every_tree(self):
        query_round = fri().protocol.rounds[-1]
        kinds = [m.element.kind for m in query_round.prover_messages()]
        assert kinds == [ProofElementKind.FIELD_ELEMENTS] + [ProofElementKind.MERKLE_QUERIES] * 5

        final_poly = next(query_round.prover_messages()).element.value
        assert final_poly.num_elements == 64
        assert final_poly.is_extension

    def test_initial_tree_holds_base_field_cosets(self):
        query_round = fri(batch_size=3).protocol.rounds[-1]
        initial = list(query_round.prover_messages())[1].element.value.merkle_tree
        assert initial.tree_depth == 23
        assert initial.leaf.num_elements == 16 * 3
        assert not initial.leaf.is_extension

    def test_rbr_error(self):
        instance = fri()
        assert instance.rbr_error() == pytest.approx(100.0)
        assert instance.compiled_classical_security() == pytest.approx(36.0)

    def test_batching_round(self):
        instance = fri(batch_size=4)
        assert instance.protocol.rounds[0].name == "batching_round"
        (message,) = instance.protocol.rounds[0].verifier_messages()
        assert message.errors[0].label == "batching_error"
        assert instance.config.batching_pow_bits == pytest.approx(max(0.0, 100 - message.errors[0].error))
        assert "Batch size: 4" in instance.config.summary()

    def test_deterministic(self):
        assert fri() == fri()
        assert str(fri()) == str(fri())


class TestFriValidation:

    def test_total_folding_exceeds_degree(self):
        with pytest.raises(ConfigurationError):
            fri(log_degree=19)

    def test_starting_folding_exceeds_degree(self):
        with pytest.raises(ConfigurationError):
            fri(log_degree=3, num_rounds=0)

    def test_non_positive_folding(self):
        ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=20)
        params = FriParameters(1, 4, (4, 0), CB, 100, 20)
        with pytest.raises(ConfigurationError):
            FriProtocol.new(ldt, params)

    def test_non_positive_rate(self):
        ldt = LowDegreeParameters(GOLDILOCKS_2, log_degree=20)
        params = FriParameters(0, 4, (4,), CB, 100, 20)
        with pytest.raises(ConfigurationError):
            FriProtocol.new(ldt, params)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            fri(log_degree=19)


class TestPowWarnings:

    def test_over_budget_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="iopcalc"):
            config = fri(pow_bits=0).config
        assert config.starting_folding_pow_bits == pytest.approx((1.0,))
        assert any("initial fold" in record.getMessage() for record in caplog.records)

    def test_within_budget_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING, logger="iopcalc"):
            fri()
        assert not caplog.records
