import math

import pytest

from black_analytics import implied_strike, implied_strike_adjoint, strike_for_delta
from black_analytics.models import black


@pytest.mark.parametrize("strike", [70.0, 95.0, 100.0, 120.0, 150.0])
@pytest.mark.parametrize("put_call", ["call", "put"])
def test_strike_for_delta_recovers_strike(strike, put_call):
    forward, time_to_expiry, volatility = 100.0, 1.5, 0.3
    forward_delta = black.delta(forward, strike, time_to_expiry, volatility, put_call)
    out = strike_for_delta(forward, forward_delta, time_to_expiry, volatility, put_call)
    assert out == pytest.approx(strike, rel=1e-10)


@pytest.mark.parametrize(
    ("forward_delta", "put_call"),
    [(0.0, "call"), (1.0, "call"), (-0.25, "call"), (0.0, "put"), (-1.0, "put"), (0.25, "put")],
)
def test_strike_for_delta_rejects_deltas_out_of_range(forward_delta, put_call):
    with pytest.raises(ValueError, match="delta out of range"):
        strike_for_delta(100.0, forward_delta, 1.0, 0.2, put_call)


def test_strike_for_delta_at_zero_volatility_is_the_forward():
    assert strike_for_delta(100.0, 0.3, 1.0, 0.0, "call") == pytest.approx(100.0)


def test_strike_for_delta_with_ambiguous_deviation_uses_unit_variance():
    # delta 0.5 puts d1 at 0, leaving only the unit variance term
    expected = 100.0 * math.exp(0.5)
    assert strike_for_delta(100.0, 0.5, math.inf, 0.0, "call") == pytest.approx(expected)


@pytest.mark.parametrize(
    ("strike", "put_call"),
    [(85.0, "call"), (120.0, "call"), (90.0, "put"), (130.0, "put")],
)
def test_implied_strike_recovers_strike(strike, put_call):
    forward, time_to_expiry, volatility = 100.0, 0.8, 0.35
    forward_delta = black.delta(forward, strike, time_to_expiry, volatility, put_call)
    out = implied_strike(forward_delta, put_call, forward, time_to_expiry, volatility)
    assert out == pytest.approx(strike, rel=1e-10)


@pytest.mark.parametrize("put_call", ["call", "put"])
def test_implied_strike_derivatives_match_finite_differences(put_call):
    delta = 0.3 if put_call == "call" else -0.3
    point = [delta, 100.0, 0.8, 0.35]
    steps = [1e-6, 1e-4, 1e-6, 1e-6]
    out = implied_strike_adjoint(delta, put_call, *point[1:])

    assert out.value == pytest.approx(implied_strike(delta, put_call, *point[1:]), rel=1e-14)
    assert out.size == 4
    for index, h in enumerate(steps):
        up, down = list(point), list(point)
        up[index] += h
        down[index] -= h
        bumped_up = implied_strike(up[0], put_call, *up[1:])
        bumped_down = implied_strike(down[0], put_call, *down[1:])
        fd = (bumped_up - bumped_down) / (2.0 * h)
        assert out.derivative(index) == pytest.approx(fd, rel=1e-6)


@pytest.mark.parametrize(
    ("delta", "put_call", "forward", "match"),
    [
        (1.0, "call", 100.0, "delta must be in"),
        (-1.2, "put", 100.0, "delta must be in"),
        (-0.3, "call", 100.0, "delta sign"),
        (0.3, "put", 100.0, "delta sign"),
        (0.3, "call", 0.0, "forward must be > 0"),
    ],
)
def test_implied_strike_rejects_invalid_inputs(delta, put_call, forward, match):
    with pytest.raises(ValueError, match=match):
        implied_strike(delta, put_call, forward, 1.0, 0.2)
    with pytest.raises(ValueError, match=match):
        implied_strike_adjoint(delta, put_call, forward, 1.0, 0.2)
