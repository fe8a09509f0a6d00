"""Black (lognormal forward) price and Greeks for European options.

All values are forward values, i.e. the market value divided by the numeraire.
Every function is defined on the closed domain F, K, T, sigma in [0, +inf];
degenerate inputs are resolved by the limit tables of `_edges`.
"""

from __future__ import annotations

import logging
import math

from black_analytics.config import LARGE, SMALL
from black_analytics.distribution import PDF_AT_ZERO, cdf, divide, exp, pdf
from black_analytics.models._edges import (
    PRICE_RULES,
    BlackInputs,
    both_large_price,
    evaluate,
    greek_rules,
    is_tied_zero_deviation,
    weighted,
)
from black_analytics.types import PutCall, PutCallInput

logger = logging.getLogger(__name__)


def _price(x: BlackInputs) -> float:
    first = weighted(x.forward, cdf(x.sign * x.d1()))
    second = weighted(x.strike, cdf(x.sign * x.d2()))
    return max(0.0, x.sign * (first - second))


def price(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Black forward price.

    Reduces to the intrinsic value max(w(F - K), 0) when sigma * sqrt(T) is 0,
    to F (call) / K (put) when it is infinite, and to the larger of forward and
    strike on the in-the-money leg when both are infinite.
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    return evaluate(x, PRICE_RULES, _price)


# --- deltas ------------------------------------------------------------------

_DELTA_RULES = greek_rules(
    large=lambda x: 0.5 * (1.0 + x.sign),
    separated=lambda x: x.sign if x.in_the_money else 0.0,
    tied=lambda x: 0.5 * x.sign,
)

_DUAL_DELTA_RULES = greek_rules(
    large=lambda x: 0.5 * (1.0 - x.sign),
    separated=lambda x: -x.sign if x.in_the_money else 0.0,
    tied=lambda x: -0.5 * x.sign,
)

_SIMPLE_DELTA_RULES = greek_rules(
    large=lambda x: 0.5 * x.sign,
    separated=lambda x: x.sign if x.in_the_money else 0.0,
    tied=lambda x: 0.5 * x.sign,
)


def delta(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Forward driftless delta, w * N(w * d1)."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    return evaluate(x, _DELTA_RULES, lambda x: x.sign * cdf(x.sign * x.d1()))


def dual_delta(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Driftless dual delta: first derivative of the price with respect to strike."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    return evaluate(x, _DUAL_DELTA_RULES, lambda x: -x.sign * cdf(x.sign * x.d2()))


def _simple_delta(x: BlackInputs) -> float:
    d = 0.0 if x.tied else x.log_moneyness() / x.sigma_root_t
    return x.sign * cdf(x.sign * d)


def simple_delta(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Simple delta.

    Not the usual delta: the argument of the normal CDF is only
    log(F / K) / (sigma * sqrt(T)), without the convexity term.
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    return evaluate(x, _SIMPLE_DELTA_RULES, _simple_delta)


# --- gammas ------------------------------------------------------------------


def _density_over(density: float, level: float, x: BlackInputs) -> float:
    return 0.0 if density == 0.0 else divide(divide(density, level), x.sigma_root_t)


_GAMMA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: PDF_AT_ZERO if x.large_forward else _density_over(PDF_AT_ZERO, x.forward, x),
)

_DUAL_GAMMA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: PDF_AT_ZERO if x.large_strike else _density_over(PDF_AT_ZERO, x.strike, x),
)

_CROSS_GAMMA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: -PDF_AT_ZERO if x.large_forward else -_density_over(PDF_AT_ZERO, x.forward, x),
)


def gamma(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Forward driftless gamma, the second derivative of the price with respect to forward."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)
    return evaluate(x, _GAMMA_RULES, lambda x: _density_over(pdf(x.d1()), x.forward, x))


def dual_gamma(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless dual gamma, the second derivative of the price with respect to strike."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)
    return evaluate(x, _DUAL_GAMMA_RULES, lambda x: _density_over(pdf(x.d2()), x.strike, x))


def cross_gamma(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless cross gamma, the sensitivity of delta to strike."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)
    return evaluate(x, _CROSS_GAMMA_RULES, lambda x: -_density_over(pdf(x.d2()), x.forward, x))


# --- volatility Greeks -------------------------------------------------------

_VEGA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: (
        PDF_AT_ZERO
        if x.root_t < SMALL and x.large_forward
        else x.forward * x.root_t * PDF_AT_ZERO
    ),
)

_VANNA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: (
        divide(-PDF_AT_ZERO, x.volatility) if x.volatility < SMALL else PDF_AT_ZERO * x.root_t
    ),
)

_DUAL_VANNA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=lambda x: (
        divide(-PDF_AT_ZERO, x.volatility) if x.volatility < SMALL else -PDF_AT_ZERO * x.root_t
    ),
)


def _vomma_tied(x: BlackInputs) -> float:
    if x.large_forward:
        if x.root_t < SMALL:
            return divide(PDF_AT_ZERO, x.volatility)
        return divide(x.forward * PDF_AT_ZERO * x.root_t, x.volatility)
    if x.volatility < SMALL:
        return divide(x.forward * PDF_AT_ZERO * x.root_t, x.volatility)
    return -x.forward * PDF_AT_ZERO * x.time_to_expiry * x.volatility / 4.0


_VOMMA_RULES = greek_rules(large=0.0, separated=0.0, tied=_vomma_tied)


def vega(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Forward vega, F * sqrt(T) * N'(d1); identical for calls and puts."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)

    def _vega(x: BlackInputs) -> float:
        density = pdf(x.d1())
        return 0.0 if density == 0.0 else x.forward * x.root_t * density

    return evaluate(x, _VEGA_RULES, _vega)


def vanna(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless vanna, the cross derivative of the price in forward and volatility."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)

    def _vanna(x: BlackInputs) -> float:
        density = pdf(x.d1())
        return 0.0 if density == 0.0 else -divide(density * x.d2(), x.volatility)

    return evaluate(x, _VANNA_RULES, _vanna)


def dual_vanna(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless dual vanna, the cross derivative of the price in strike and volatility."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)

    def _dual_vanna(x: BlackInputs) -> float:
        density = pdf(x.d2())
        return 0.0 if density == 0.0 else divide(density * x.d1(), x.volatility)

    return evaluate(x, _DUAL_VANNA_RULES, _dual_vanna)


def vomma(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless vomma, the second derivative of the price with respect to volatility."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)

    def _vomma(x: BlackInputs) -> float:
        density = pdf(x.d1())
        if density == 0.0:
            return 0.0
        return divide(x.forward * density * x.root_t * x.d1() * x.d2(), x.volatility)

    return evaluate(x, _VOMMA_RULES, _vomma)


def volga(forward: float, strike: float, time_to_expiry: float, volatility: float) -> float:
    """Driftless volga (aka vomma)."""
    return vomma(forward, strike, time_to_expiry, volatility)


# --- thetas ------------------------------------------------------------------


def _driftless_theta_tied(x: BlackInputs) -> float:
    sigma = x.volatility
    if x.root_t < SMALL:
        if x.forward < SMALL:
            return -PDF_AT_ZERO * sigma / 2.0
        if sigma < SMALL:
            return -x.forward * PDF_AT_ZERO / 2.0
        return divide(-x.forward * PDF_AT_ZERO * sigma / 2.0, x.root_t)
    if x.large_forward:
        return divide(-PDF_AT_ZERO / 2.0, x.root_t)
    return divide(-x.forward * PDF_AT_ZERO * sigma / 2.0, x.root_t)


_DRIFTLESS_THETA_RULES = greek_rules(
    large=0.0,
    separated=0.0,
    tied=_driftless_theta_tied,
    # Tied inputs with both sqrt(T) and sigma above SMALL keep the closed form.
    tied_applies=lambda x: (
        is_tied_zero_deviation(x) and (x.root_t < SMALL or x.volatility < SMALL)
    ),
)


def _driftless_theta(x: BlackInputs) -> float:
    density = pdf(x.d1())
    if density == 0.0:
        return 0.0
    return divide(-x.forward * density * x.volatility / 2.0, x.root_t)


def driftless_theta(
    forward: float, strike: float, time_to_expiry: float, volatility: float
) -> float:
    """Forward driftless theta, -F * N'(d1) * sigma / (2 * sqrt(T))."""
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility)
    return evaluate(x, _DRIFTLESS_THETA_RULES, _driftless_theta)


def _check_rate(interest_rate: float) -> None:
    if math.isnan(interest_rate):
        raise ValueError("interest_rate is NaN")


def _rate_time(interest_rate: float, time_to_expiry: float) -> float:
    """r * T, with the 0 * inf of an instantaneous infinite rate taken as +/-1."""
    if time_to_expiry < SMALL and abs(interest_rate) > LARGE:
        return math.copysign(1.0, interest_rate)
    return interest_rate * time_to_expiry


def _with_carry(driftless: float, interest_rate: float, carry_price: float) -> float:
    carry = (
        0.0
        if interest_rate > LARGE and abs(carry_price) < SMALL
        else interest_rate * carry_price
    )
    return carry if abs(carry) > LARGE else driftless + carry


def _theta_carry_price(x: BlackInputs, interest_rate: float) -> float:
    rt = _rate_time(interest_rate, x.time_to_expiry)
    f, k = x.forward, x.strike
    if x.both_large:
        logger.debug("theta: (large value)/(large value) ambiguous")
        return both_large_price(x)
    if x.small_deviation:
        if rt > LARGE:
            if x.is_call:
                return f if f > k else 0.0
            return 0.0 if f > k else -f
        if x.is_call:
            return f - k * exp(-rt) if f > k else 0.0
        return 0.0 if f > k else -f + k * exp(-rt)
    n_forward = cdf(x.sign * x.d1())
    n_strike = cdf(x.sign * x.d2())
    discount = exp(-interest_rate * x.time_to_expiry)
    first = weighted(f, n_forward)
    second = 0.0 if n_strike == 0.0 or discount == 0.0 else k * discount * n_strike
    return x.sign * (first - second)


def theta(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
    interest_rate: float = 0.0,
) -> float:
    """Theta (non-forward), minus the sensitivity of the value to time to expiry.

    The driftless theta plus `interest_rate` times the carry price
    w * (F * N(w * d1) - K * exp(-rT) * N(w * d2)).
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    _check_rate(interest_rate)
    if -interest_rate > LARGE:
        return 0.0
    driftless = driftless_theta(forward, strike, time_to_expiry, volatility)
    if abs(interest_rate) < SMALL:
        return driftless
    return _with_carry(driftless, interest_rate, _theta_carry_price(x, interest_rate))


def _theta_mod_carry_price(x: BlackInputs, interest_rate: float) -> float:
    rt = _rate_time(interest_rate, x.time_to_expiry)
    f, k = x.forward, x.strike
    if x.both_large:
        logger.debug("theta_mod: (large value)/(large value) ambiguous")
        if x.is_call:
            return 0.0
        return k if k >= f else 0.0
    if x.small_deviation:
        if rt > LARGE:
            return 0.0
        if x.is_call:
            return -k if f > k else 0.0
        return 0.0 if f > k else k
    n_strike = cdf(x.sign * x.d2())
    return 0.0 if n_strike == 0.0 else -x.sign * k * n_strike


def theta_mod(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
    interest_rate: float = 0.0,
) -> float:
    """Theta (non-forward) consistent with the spot Black-Scholes theta.

    driftless theta - w * r * K * N(w * d2); discounting this value with
    exp(-rT) at forward S * exp(rT) gives `black_scholes.bs_theta(S, ..., r)`.
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    _check_rate(interest_rate)
    if -interest_rate > LARGE:
        return 0.0
    driftless = driftless_theta(forward, strike, time_to_expiry, volatility)
    if abs(interest_rate) < SMALL:
        return driftless
    return _with_carry(driftless, interest_rate, _theta_mod_carry_price(x, interest_rate))
