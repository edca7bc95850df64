import numpy as np
import pytest

from replynet.core.activations import sigmoid, sigmoid_deriv, squared_error, squared_error_deriv
from replynet.core.update import momentum_step


def test_zero_momentum_does_not_accumulate():
    param = np.array([[0.5, -0.5]])
    velocity = np.zeros_like(param)
    gradient = np.array([[0.2, -0.4]])

    first = momentum_step(param, velocity, gradient, 0.1, 0.0).copy()
    second = momentum_step(param, velocity, gradient, 0.1, 0.0).copy()

    assert np.array_equal(first, 0.1 * gradient)
    assert np.array_equal(second, first)
    assert np.allclose(param, np.array([[0.5, -0.5]]) - 2 * 0.1 * gradient)


@pytest.mark.parametrize("momentum", [0.1, 0.5, 0.9])
def test_positive_momentum_grows_steps_for_constant_gradient(momentum):
    param = np.zeros(3)
    velocity = np.zeros(3)
    gradient = np.array([0.3, -0.1, 0.05])

    first = momentum_step(param, velocity, gradient, 0.5, momentum).copy()
    second = momentum_step(param, velocity, gradient, 0.5, momentum).copy()

    assert np.all(np.abs(second) > np.abs(first))
    assert np.allclose(second, 0.5 * gradient * (1.0 + momentum))


def test_momentum_step_rejects_mismatched_shapes():
    with pytest.raises(ValueError):
        momentum_step(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((2, 3)), 0.1, 0.9)


def test_activation_and_cost_primitives():
    x = np.array([-2.0, 0.0, 2.0])
    a = sigmoid(x)
    assert np.allclose(a, [0.11920292, 0.5, 0.88079708])
    assert np.allclose(sigmoid_deriv(a), a * (1.0 - a))
    assert sigmoid_deriv(np.array([0.5]))[0] == 0.25
    assert np.allclose(squared_error(np.array([1.0, 0.0]), np.array([0.0, 0.0])), [0.5, 0.0])
    assert np.array_equal(squared_error_deriv(np.array([0.75]), np.array([1.0])), [-0.25])
