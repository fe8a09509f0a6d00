import math

import pytest

from black_analytics import PutCall
from black_analytics.distribution import cdf
from black_analytics.models import black


def test_price_matches_reference_value():
    out = black.price(104.0, 85.0, 4.5, 0.1, PutCall.CALL)
    assert out == pytest.approx(20.816241352493662, rel=1e-13)


@pytest.mark.parametrize("strike", [60.0, 95.0, 100.0, 105.0, 160.0])
@pytest.mark.parametrize("volatility", [0.05, 0.25, 0.8])
def test_put_call_parity(strike, volatility):
    forward, time_to_expiry = 100.0, 1.5
    call = black.price(forward, strike, time_to_expiry, volatility, "call")
    put = black.price(forward, strike, time_to_expiry, volatility, "put")
    assert call - put == pytest.approx(forward - strike, abs=1e-10)


@pytest.mark.parametrize("put_call", [PutCall.CALL, PutCall.PUT])
@pytest.mark.parametrize("strike", [80.0, 100.0, 120.0])
def test_zero_volatility_and_zero_time_give_intrinsic_value(put_call, strike):
    forward = 100.0
    intrinsic = max(put_call.sign * (forward - strike), 0.0)
    assert black.price(forward, strike, 1.0, 0.0, put_call) == pytest.approx(intrinsic)
    assert black.price(forward, strike, 0.0, 0.3, put_call) == pytest.approx(intrinsic)


def test_price_limits_in_strike_and_forward():
    assert black.price(100.0, 0.0, 1.0, 0.2, "call") == pytest.approx(100.0)
    assert black.price(100.0, 0.0, 1.0, 0.2, "put") == 0.0
    assert black.price(0.0, 100.0, 1.0, 0.2, "call") == 0.0
    assert black.price(0.0, 100.0, 1.0, 0.2, "put") == pytest.approx(100.0)


def test_infinite_volatility_prices_the_underlying():
    assert black.price(100.0, 90.0, 1.0, math.inf, "call") == pytest.approx(100.0)
    assert black.price(100.0, 90.0, 1.0, math.inf, "put") == pytest.approx(90.0)


def test_infinite_forward_call_is_infinite():
    assert black.price(math.inf, 100.0, 1.0, 0.2, "call") == math.inf
    assert black.price(math.inf, 100.0, 1.0, 0.2, "put") == 0.0


def test_zero_volatility_times_infinite_time_uses_unit_deviation():
    out = black.price(100.0, 100.0, math.inf, 0.0, "call")
    assert out == pytest.approx(100.0 * (cdf(0.5) - cdf(-0.5)))


def test_both_forward_and_strike_large():
    assert black.price(1e14, 2e14, 1.0, 0.2, "call") == 0.0
    assert black.price(1e14, 2e14, 1.0, 0.2, "put") == pytest.approx(2e14)
    assert black.price(3e14, 2e14, 1.0, 0.2, "call") == pytest.approx(3e14)


@pytest.mark.parametrize(
    ("tiny", "zero"),
    [
        ((100.0, 90.0, 1.0, 1e-15), (100.0, 90.0, 1.0, 0.0)),
        ((100.0, 90.0, 1e-30, 0.2), (100.0, 90.0, 0.0, 0.2)),
        ((100.0, 1e-20, 1.0, 0.2), (100.0, 0.0, 1.0, 0.2)),
        ((1e-20, 90.0, 1.0, 0.2), (0.0, 90.0, 1.0, 0.2)),
    ],
)
@pytest.mark.parametrize("put_call", ["call", "put"])
def test_price_is_continuous_at_zero_limits(tiny, zero, put_call):
    assert black.price(*tiny, put_call) == pytest.approx(black.price(*zero, put_call), abs=1e-12)


@pytest.mark.parametrize("put_call", ["call", "put"])
def test_price_is_continuous_at_infinite_volatility(put_call):
    huge = black.price(100.0, 90.0, 1.0, 1e15, put_call)
    assert huge == pytest.approx(black.price(100.0, 90.0, 1.0, math.inf, put_call))


@pytest.mark.parametrize(
    ("args", "name"),
    [
        ((-1.0, 100.0, 1.0, 0.2), "forward"),
        ((100.0, -1.0, 1.0, 0.2), "strike"),
        ((100.0, 100.0, -1.0, 0.2), "time_to_expiry"),
        ((100.0, 100.0, 1.0, -0.2), "volatility"),
        ((100.0, 100.0, 1.0, math.nan), "volatility"),
    ],
)
def test_negative_or_nan_inputs_are_rejected(args, name):
    with pytest.raises(ValueError, match=f"negative/NaN {name}"):
        black.price(*args)


def test_put_call_labels_are_interchangeable():
    ref = black.price(100.0, 110.0, 1.0, 0.3, PutCall.PUT)
    assert black.price(100.0, 110.0, 1.0, 0.3, "put") == ref
    assert black.price(100.0, 110.0, 1.0, 0.3, "P") == ref
    assert black.price(100.0, 110.0, 1.0, 0.3, False) == ref
