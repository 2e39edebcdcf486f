"""
Unit tests for the HMM parameter store.

Tests cover construction, stochastic validation, linear/log conversion,
parameter access and model comparison.
"""

import numpy as np
import pytest

from seq_hmm.exceptions import DegenerateDistributionError, ModelStateError
from seq_hmm.hmm.first_order import FirstOrderHMM
from seq_hmm.hmm.model import HiddenMarkovModel


class TestConstruction:
    """Test model construction paths."""
    
    def test_construct_from_parameters_is_log_mode(self, health_parameters):
        model = FirstOrderHMM(*health_parameters)
        
        assert model.is_log
        assert model.n_states == 2
        assert model.n_symbols == 3
        np.testing.assert_allclose(model.pi, np.log(health_parameters[0]))
        np.testing.assert_allclose(model.A, np.log(health_parameters[1]))
        np.testing.assert_allclose(model.B, np.log(health_parameters[2]))
    
    def test_emission_is_log_transformed(self, health_model, health_parameters):
        """All three tensors share one representation."""
        np.testing.assert_allclose(np.exp(health_model.B), health_parameters[2])
    
    def test_construct_from_lists(self):
        model = FirstOrderHMM([1.0], [[1.0]], [[0.25, 0.75]])
        assert model.n_states == 1
        assert model.n_symbols == 2
    
    def test_caller_arrays_not_aliased(self, health_parameters):
        pi, A, B = health_parameters
        model = FirstOrderHMM(pi, A, B)
        pi[0] = 0.0
        assert model.pi[0] == pytest.approx(np.log(0.6))
    
    def test_empty_model(self):
        model = FirstOrderHMM()
        
        assert model.is_empty
        assert model.n_states == 0
        assert model.n_symbols == 0
        assert not model.is_log
    
    def test_partial_parameters_rejected(self, health_parameters):
        with pytest.raises(ValueError, match="given together"):
            FirstOrderHMM(health_parameters[0], health_parameters[1])
    
    def test_abstract_base_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            HiddenMarkovModel()
    
    def test_repr(self, health_model):
        assert repr(health_model) == "FirstOrderHMM(n_states=2, n_symbols=3, mode=log)"


class TestValidation:
    """Test stochastic validation of supplied parameters."""
    
    def test_pi_not_summing_to_one(self, health_parameters):
        _, A, B = health_parameters
        with pytest.raises(DegenerateDistributionError, match="Initial probabilities sum to"):
            FirstOrderHMM([0.5, 0.4], A, B)
    
    def test_negative_transition(self, health_parameters):
        pi, _, B = health_parameters
        with pytest.raises(DegenerateDistributionError, match="Transition matrix contains negative"):
            FirstOrderHMM(pi, [[-0.1, 1.1], [0.5, 0.5]], B)
    
    def test_emission_row_not_stochastic(self, health_parameters):
        pi, A, _ = health_parameters
        with pytest.raises(DegenerateDistributionError, match="Emission matrix rows"):
            FirstOrderHMM(pi, A, [[0.5, 0.5, 0.5], [0.1, 0.3, 0.6]])
    
    def test_transition_shape_mismatch(self, health_parameters):
        pi, _, B = health_parameters
        with pytest.raises(DegenerateDistributionError, match="A shape"):
            FirstOrderHMM(pi, np.eye(3), B)
    
    def test_emission_shape_mismatch(self, health_parameters):
        pi, A, _ = health_parameters
        with pytest.raises(DegenerateDistributionError, match="B shape"):
            FirstOrderHMM(pi, A, [[1.0]])
    
    def test_zero_entries_allowed(self):
        model = FirstOrderHMM([1.0, 0.0], [[0.0, 1.0], [1.0, 0.0]], [[1.0, 0.0], [0.0, 1.0]])
        assert model.pi[1] == -np.inf
    
    def test_failed_set_parameters_keeps_old_values(self, health_model):
        before = health_model.get_parameters()
        with pytest.raises(DegenerateDistributionError):
            health_model.set_parameters([0.9, 0.9], np.eye(2), np.eye(2))
        after = health_model.get_parameters()
        for b, a in zip(before, after):
            np.testing.assert_array_equal(b, a)
    
    def test_validate_stochastic_matrices(self, health_model):
        assert health_model.validate_stochastic_matrices() is True


class TestModeConversion:
    """Test linear/log mode toggles."""
    
    def test_round_trip(self, health_model, health_parameters):
        health_model.un_log()
        assert not health_model.is_log
        for actual, expected in zip((health_model.pi, health_model.A, health_model.B), health_parameters):
            np.testing.assert_allclose(actual, expected, atol=1e-5)
        
        health_model.to_log()
        health_model.un_log()
        for actual, expected in zip((health_model.pi, health_model.A, health_model.B), health_parameters):
            np.testing.assert_allclose(actual, expected, atol=1e-5)
    
    def test_linear_rows_sum_to_one(self, health_model):
        health_model.un_log()
        assert health_model.pi.sum() == pytest.approx(1.0, abs=1e-4)
        np.testing.assert_allclose(health_model.A.sum(axis=1), 1.0, atol=1e-4)
        np.testing.assert_allclose(health_model.B.sum(axis=1), 1.0, atol=1e-4)
    
    def test_to_log_twice_rejected(self, health_model):
        with pytest.raises(ModelStateError, match="already in log mode"):
            health_model.to_log()
    
    def test_un_log_twice_rejected(self, health_model):
        health_model.un_log()
        with pytest.raises(ModelStateError, match="not in log mode"):
            health_model.un_log()
    
    def test_to_log_on_empty_model_is_noop(self):
        model = FirstOrderHMM()
        model.to_log()
        assert model.is_empty
        assert not model.is_log
    
    def test_un_log_on_empty_model_rejected(self):
        with pytest.raises(ModelStateError):
            FirstOrderHMM().un_log()
    
    def test_zero_probability_becomes_negative_infinity(self):
        model = FirstOrderHMM([1.0, 0.0], [[0.5, 0.5], [0.5, 0.5]], [[1.0], [1.0]])
        assert model.pi[1] == -np.inf
        model.un_log()
        assert model.pi[1] == 0.0


class TestParameterAccess:
    """Test parameter getters and setters."""
    
    def test_get_parameters_linear_copies(self, health_model, health_parameters):
        pi, A, B = health_model.get_parameters()
        np.testing.assert_allclose(pi, health_parameters[0])
        np.testing.assert_allclose(A, health_parameters[1])
        np.testing.assert_allclose(B, health_parameters[2])
        
        pi[0] = 999
        assert health_model.pi[0] != 999
    
    def test_get_parameters_log(self, health_model):
        log_pi, _, _ = health_model.get_parameters(log=True)
        log_pi[0] = 999
        assert health_model.pi[0] == pytest.approx(np.log(0.6))
    
    def test_get_parameters_in_linear_mode(self, health_model, health_parameters):
        health_model.un_log()
        _, _, B = health_model.get_parameters()
        np.testing.assert_allclose(B, health_parameters[2])
        _, _, log_B = health_model.get_parameters(log=True)
        np.testing.assert_allclose(log_B, np.log(health_parameters[2]))
    
    def test_get_parameters_empty_model(self):
        with pytest.raises(ModelStateError):
            FirstOrderHMM().get_parameters()
    
    def test_set_parameters_resizes(self, health_model):
        health_model.set_parameters([1 / 3] * 3, np.full((3, 3), 1 / 3), np.full((3, 4), 0.25))
        assert health_model.n_states == 3
        assert health_model.n_symbols == 4
        assert health_model.is_log


class TestSimilar:
    """Test approximate model comparison."""
    
    def test_similar_to_itself(self, health_model):
        assert health_model.similar(health_model)
    
    def test_similar_is_symmetric(self, health_parameters):
        pi, A, B = health_parameters
        model_a = FirstOrderHMM(pi, A, B)
        model_b = FirstOrderHMM([0.605, 0.395], A, B)
        assert model_a.similar(model_b)
        assert model_b.similar(model_a)
    
    def test_difference_beyond_tolerance(self, health_parameters):
        pi, A, B = health_parameters
        other = FirstOrderHMM(pi, A, [[0.5, 0.38, 0.12], [0.1, 0.3, 0.6]])
        model = FirstOrderHMM(pi, A, B)
        assert not model.similar(other)
        assert not other.similar(model)
    
    def test_custom_tolerance(self, health_parameters):
        pi, A, B = health_parameters
        other = FirstOrderHMM([0.65, 0.35], A, B)
        model = FirstOrderHMM(pi, A, B)
        assert not model.similar(other)
        assert model.similar(other, tolerance=0.1)
    
    def test_independent_of_mode(self, health_parameters):
        model_a = FirstOrderHMM(*health_parameters)
        model_b = FirstOrderHMM(*health_parameters)
        model_b.un_log()
        assert model_a.similar(model_b)
    
    def test_shape_mismatch(self, health_model):
        other = FirstOrderHMM([1.0], [[1.0]], [[0.5, 0.5]])
        assert not health_model.similar(other)
    
    def test_empty_models(self, health_model):
        assert FirstOrderHMM().similar(FirstOrderHMM())
        assert not FirstOrderHMM().similar(health_model)
        assert not health_model.similar(FirstOrderHMM())
