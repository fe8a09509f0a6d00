import math

import pytest
from scipy.stats import norm

from black_analytics.models.black_scholes import (
    bs_delta,
    bs_forward,
    bs_gamma,
    bs_greeks,
    bs_price,
    bs_rho,
    bs_theta,
    bs_vega,
)

S, K, T, SIGMA, R, Q = 101.0, 100.0, 30 / 365.0, 0.22, 0.03, 0.015


def _textbook(option_type):
    d1 = (math.log(S / K) + (R - Q + 0.5 * SIGMA**2) * T) / (SIGMA * math.sqrt(T))
    d2 = d1 - SIGMA * math.sqrt(T)
    disc_q, disc_r = math.exp(-Q * T), math.exp(-R * T)
    if option_type == "call":
        price = S * disc_q * norm.cdf(d1) - K * disc_r * norm.cdf(d2)
        delta = disc_q * norm.cdf(d1)
        theta = (
            -S * disc_q * norm.pdf(d1) * SIGMA / (2 * math.sqrt(T))
            + Q * S * disc_q * norm.cdf(d1)
            - R * K * disc_r * norm.cdf(d2)
        )
        rho = K * T * disc_r * norm.cdf(d2)
    else:
        price = K * disc_r * norm.cdf(-d2) - S * disc_q * norm.cdf(-d1)
        delta = disc_q * (norm.cdf(d1) - 1.0)
        theta = (
            -S * disc_q * norm.pdf(d1) * SIGMA / (2 * math.sqrt(T))
            - Q * S * disc_q * norm.cdf(-d1)
            + R * K * disc_r * norm.cdf(-d2)
        )
        rho = -K * T * disc_r * norm.cdf(-d2)
    return {
        "price": price,
        "delta": delta,
        "gamma": disc_q * norm.pdf(d1) / (S * SIGMA * math.sqrt(T)),
        "vega": S * disc_q * norm.pdf(d1) * math.sqrt(T),
        "theta": theta,
        "rho": rho,
    }


@pytest.mark.parametrize("option_type", ["call", "put"])
def test_engine_matches_textbook_closed_forms(option_type):
    out = bs_greeks(S, K, T, SIGMA, R, Q, option_type)
    ref = _textbook(option_type)
    for name, value in ref.items():
        assert out[name] == pytest.approx(value, rel=1e-10), name


def test_functional_api_matches_greeks_dict():
    out = bs_greeks(S, K, T, SIGMA, R, Q, "P")
    assert out["price"] == bs_price(S, K, T, SIGMA, R, Q, "P")
    assert out["delta"] == bs_delta(S, K, T, SIGMA, R, Q, "P")
    assert out["gamma"] == bs_gamma(S, K, T, SIGMA, R, Q)
    assert out["vega"] == bs_vega(S, K, T, SIGMA, R, Q)
    assert out["theta"] == bs_theta(S, K, T, SIGMA, R, Q, "P")
    assert out["rho"] == bs_rho(S, K, T, SIGMA, R, Q, "P")


def test_forward_includes_carry():
    assert bs_forward(100.0, 2.0, 0.05, 0.02) == pytest.approx(100.0 * math.exp(0.06))


def test_expired_option_is_worth_intrinsic_value():
    assert bs_price(110.0, 100.0, 0.0, 0.2, 0.05, 0.0, "call") == pytest.approx(10.0)
    assert bs_delta(110.0, 100.0, 0.0, 0.2, 0.05, 0.0, "call") == pytest.approx(1.0)
    assert bs_gamma(110.0, 100.0, 0.0, 0.2, 0.05, 0.0) == 0.0


def test_engine_rejects_nan_rates():
    with pytest.raises(ValueError, match="NaN"):
        bs_price(S, K, T, SIGMA, math.nan)


def test_extreme_carry_overflows_to_infinite_forward():
    assert bs_forward(100.0, 1.0, 800.0) == math.inf
    assert bs_delta(100.0, 100.0, 1.0, 0.2, 800.0, 0.0, "call") == 1.0
    assert bs_delta(100.0, 100.0, 1.0, 0.2, 800.0, 0.0, "put") == 0.0
    assert bs_price(100.0, 100.0, 1.0, 0.2, 800.0, 0.0, "put") == 0.0
