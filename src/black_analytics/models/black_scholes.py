"""Spot Black-Scholes pricing and Greeks, expressed through the Black forward formulas.

With F = S exp((r - q) T) and discount factor D = exp(-r T) the spot price is
D * Black(F, K, T, sigma), so every degenerate input is handled by the same
limit policy as the forward formulas.
"""

from __future__ import annotations

import math

from black_analytics.distribution import exp
from black_analytics.models import black
from black_analytics.types import PutCall, PutCallInput


def _check_rates(r: float, q: float) -> None:
    if math.isnan(r) or math.isnan(q):
        raise ValueError(f"rates must not be NaN; have r={r}, q={q}")


def bs_forward(S: float, T: float, r: float = 0.0, q: float = 0.0) -> float:
    """Forward of the spot with continuous rate r and dividend yield q."""
    _check_rates(r, q)
    return S * exp((r - q) * T)


def bs_price(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: PutCallInput = PutCall.CALL,
) -> float:
    """Black-Scholes price with continuous dividend yield."""
    forward = bs_forward(S, T, r, q)
    return exp(-r * T) * black.price(forward, K, T, sigma, option_type)


def bs_delta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: PutCallInput = PutCall.CALL,
) -> float:
    """Black-Scholes spot delta."""
    forward = bs_forward(S, T, r, q)
    return exp(-q * T) * black.delta(forward, K, T, sigma, option_type)


def bs_gamma(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> float:
    """Black-Scholes spot gamma."""
    forward = bs_forward(S, T, r, q)
    return exp(-q * T) * exp((r - q) * T) * black.gamma(forward, K, T, sigma)


def bs_vega(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
) -> float:
    """Black-Scholes vega per +1.0 volatility."""
    forward = bs_forward(S, T, r, q)
    return exp(-r * T) * black.vega(forward, K, T, sigma)


def bs_theta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: PutCallInput = PutCall.CALL,
) -> float:
    """Black-Scholes theta per +1.0 calendar year."""
    forward = bs_forward(S, T, r, q)
    undiscounted = black.price(forward, K, T, sigma, option_type)
    carry = (r - q) * forward * black.delta(forward, K, T, sigma, option_type)
    driftless = black.driftless_theta(forward, K, T, sigma)
    return exp(-r * T) * (r * undiscounted - carry + driftless)


def bs_rho(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: PutCallInput = PutCall.CALL,
) -> float:
    """Black-Scholes rho per +1.0 rate."""
    forward = bs_forward(S, T, r, q)
    undiscounted = black.price(forward, K, T, sigma, option_type)
    forward_delta = black.delta(forward, K, T, sigma, option_type)
    return T * exp(-r * T) * (forward * forward_delta - undiscounted)


def bs_greeks(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    q: float = 0.0,
    option_type: PutCallInput = PutCall.CALL,
) -> dict[str, float]:
    """Return Black-Scholes price and Greeks for one option."""
    return {
        "price": bs_price(S, K, T, sigma, r, q, option_type),
        "delta": bs_delta(S, K, T, sigma, r, q, option_type),
        "gamma": bs_gamma(S, K, T, sigma, r, q),
        "vega": bs_vega(S, K, T, sigma, r, q),
        "theta": bs_theta(S, K, T, sigma, r, q, option_type),
        "rho": bs_rho(S, K, T, sigma, r, q, option_type),
    }
