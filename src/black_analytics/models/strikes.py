"""Strikes recovered from Black deltas."""

from __future__ import annotations

import math

from black_analytics.distribution import divide, exp, inverse_cdf, pdf
from black_analytics.models._edges import check_non_negative
from black_analytics.types import PutCall, PutCallInput, ValueDerivatives


def strike_for_delta(
    forward: float,
    forward_delta: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Strike whose Black delta equals `forward_delta`.

    A call delta must lie in (0, 1) and a put delta in (-1, 0), bounds
    excluded. The strike is not defined when the volatility vanishes.
    """
    check_non_negative("forward", forward)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("volatility", volatility)
    is_call = PutCall.of(put_call).is_call
    in_range = 0.0 < forward_delta < 1.0 if is_call else -1.0 < forward_delta < 0.0
    if not in_range:
        raise ValueError(f"delta out of range; have {forward_delta}")

    sign = 1.0 if is_call else -1.0
    d1 = sign * inverse_cdf(sign * forward_delta)
    sigma_sq_t = volatility * volatility * time_to_expiry
    if math.isnan(sigma_sq_t):
        sigma_sq_t = 1.0
    return forward * exp(-d1 * math.sqrt(sigma_sq_t) + 0.5 * sigma_sq_t)


def _check_implied_strike_inputs(
    delta: float,
    is_call: bool,
    forward: float,
    time_to_expiry: float,
    volatility: float,
) -> None:
    if not -1.0 < delta < 1.0:
        raise ValueError(f"delta must be in (-1, 1); have {delta}")
    if is_call == (delta < 0.0):
        raise ValueError(
            "delta sign must match the option type: positive for calls, negative for puts"
        )
    if not forward > 0.0:
        raise ValueError(f"forward must be > 0; have {forward}")
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("volatility", volatility)


def implied_strike_adjoint(
    delta: float,
    put_call: PutCallInput,
    forward: float,
    time_to_expiry: float,
    volatility: float,
) -> ValueDerivatives:
    """Strike for a delta, with its derivatives.

    K = F exp(-sigma sqrt(T) w N^-1(w delta) + sigma^2 T / 2), w = +/-1.
    The derivatives are with respect to delta, forward, time to expiry and
    volatility, in that order.
    """
    is_call = PutCall.of(put_call).is_call
    _check_implied_strike_inputs(delta, is_call, forward, time_to_expiry, volatility)
    sign = 1.0 if is_call else -1.0
    root_t = math.sqrt(time_to_expiry)
    quantile = inverse_cdf(sign * delta)
    variance = volatility * volatility * time_to_expiry
    growth = exp(-volatility * root_t * sign * quantile + 0.5 * variance)
    strike = forward * growth

    derivatives = (
        divide(-strike * volatility * root_t, pdf(quantile)),
        growth,
        strike * (-volatility * sign * quantile * divide(0.5, root_t) + 0.5 * volatility**2),
        strike * (-root_t * sign * quantile + volatility * time_to_expiry),
    )
    return ValueDerivatives.of(strike, derivatives)


def implied_strike(
    delta: float,
    put_call: PutCallInput,
    forward: float,
    time_to_expiry: float,
    volatility: float,
) -> float:
    """Strike with the given Black delta; see `implied_strike_adjoint`."""
    is_call = PutCall.of(put_call).is_call
    _check_implied_strike_inputs(delta, is_call, forward, time_to_expiry, volatility)
    sign = 1.0 if is_call else -1.0
    quantile = inverse_cdf(sign * delta)
    exponent = -volatility * math.sqrt(time_to_expiry) * sign * quantile
    return forward * exp(exponent + 0.5 * volatility * volatility * time_to_expiry)
