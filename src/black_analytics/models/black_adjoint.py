"""Black price with analytic first and second order derivatives.

Derivatives are obtained by differentiating the closed form (algorithmic
differentiation), not by bumping inputs. Gradients and Hessians are ordered
(forward, strike, time to expiry, volatility).
"""

from __future__ import annotations

import numpy as np

from black_analytics.config import LARGE, NEAR_ZERO
from black_analytics.distribution import cdf, divide, pdf
from black_analytics.models._edges import BlackInputs, both_large_price, weighted
from black_analytics.types import PutCall, PutCallInput, ValueDerivatives

FORWARD, STRIKE, TIME, VOLATILITY = range(4)


def _intrinsic_adjoint(x: BlackInputs) -> ValueDerivatives:
    """Intrinsic value and its (one-sided) gradient when the deviation vanishes."""
    if not x.in_the_money:
        return ValueDerivatives.of(0.0, (0.0, 0.0, 0.0, 0.0))
    return ValueDerivatives.of(
        x.sign * (x.forward - x.strike),
        (x.sign, -x.sign, 0.0, 0.0),
    )


def _adjoint(x: BlackInputs) -> ValueDerivatives:
    if x.both_large:
        return ValueDerivatives.of(both_large_price(x), np.zeros(4))
    if x.small_deviation:
        return _intrinsic_adjoint(x)
    if x.large_deviation:
        # call -> F, put -> K
        value = x.forward if x.is_call else x.strike
        gradient = (0.5 * (1.0 + x.sign), 0.5 * (1.0 - x.sign), 0.0, 0.0)
        return ValueDerivatives.of(value, gradient)

    d1 = x.d1()
    n_forward = cdf(x.sign * d1)
    n_strike = cdf(x.sign * x.d2())
    value = max(0.0, x.sign * (weighted(x.forward, n_forward) - weighted(x.strike, n_strike)))

    # d2 sits at the optimal exercise boundary, its adjoint contribution is 0.
    density = pdf(d1)
    sigma_root_t_bar = 0.0 if density == 0.0 else x.forward * density
    gradient = np.zeros(4)
    gradient[FORWARD] = x.sign * n_forward
    gradient[STRIKE] = -x.sign * n_strike
    if sigma_root_t_bar != 0.0:
        gradient[TIME] = divide(0.5, x.root_t) * x.volatility * sigma_root_t_bar
        gradient[VOLATILITY] = x.root_t * sigma_root_t_bar
    return ValueDerivatives(value, gradient)


def price_adjoint(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> ValueDerivatives:
    """Black forward price and its gradient.

    The derivatives are, in order:

    - [0] with respect to the forward (the delta);
    - [1] with respect to the strike (the dual delta);
    - [2] with respect to the time to expiry (minus the driftless theta);
    - [3] with respect to the volatility (the vega).

    When sigma * sqrt(T) vanishes the price is the intrinsic value and the
    gradient is +/-1 on forward and strike in the money, 0 otherwise.
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    return _adjoint(x)


def _is_degenerate(x: BlackInputs) -> bool:
    return (
        x.small_deviation
        or x.large_deviation
        or x.forward < NEAR_ZERO
        or x.strike < NEAR_ZERO
        or x.root_t < NEAR_ZERO
        or x.forward > LARGE
        or x.strike > LARGE
    )


def price_adjoint2(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> tuple[ValueDerivatives, np.ndarray]:
    """Black forward price with its gradient and Hessian.

    Returns the `price_adjoint` result and the symmetric 4 x 4 matrix of second
    derivatives in the order (forward, strike, time to expiry, volatility).

    The price depends on volatility and time only through s = sigma * sqrt(T),
    so the time entries follow from the s-derivatives by the chain rule:
    dP/dT = s_T * P_s and d2P/dT2 = s_T**2 * P_ss + s_TT * P_s.

    On degenerate inputs (vanishing or infinite deviation, forward or strike
    at 0 or infinity, zero time to expiry) the Hessian is the zero matrix.
    """
    x = BlackInputs.of(forward, strike, time_to_expiry, volatility, put_call)
    first_order = _adjoint(x)
    hessian = np.zeros((4, 4))
    if _is_degenerate(x):
        return first_order, hessian

    f, k, t, sigma = x.forward, x.strike, x.time_to_expiry, x.volatility
    s, root_t = x.sigma_root_t, x.root_t
    d1, d2 = x.d1(), x.d2()
    n1, n2 = pdf(d1), pdf(d2)

    # Derivatives with respect to the total deviation s.
    p_s = f * n1
    p_ss = f * n1 * d1 * d2 / s
    p_fs = -n1 * d2 / s
    p_ks = n2 * d1 / s

    # s = sigma * sqrt(T)
    s_t = sigma / (2.0 * root_t)
    s_tt = -sigma / (4.0 * t * root_t)
    s_sigma_t = 1.0 / (2.0 * root_t)

    hessian[FORWARD, FORWARD] = n1 / (f * s)
    hessian[STRIKE, STRIKE] = n2 / (k * s)
    hessian[FORWARD, STRIKE] = -n1 / (k * s)
    hessian[FORWARD, VOLATILITY] = root_t * p_fs
    hessian[STRIKE, VOLATILITY] = root_t * p_ks
    hessian[VOLATILITY, VOLATILITY] = t * p_ss
    hessian[FORWARD, TIME] = s_t * p_fs
    hessian[STRIKE, TIME] = s_t * p_ks
    hessian[TIME, TIME] = s_t * s_t * p_ss + s_tt * p_s
    hessian[TIME, VOLATILITY] = root_t * s_t * p_ss + s_sigma_t * p_s

    upper = np.triu_indices(4, k=1)
    hessian[(upper[1], upper[0])] = hessian[upper]
    return first_order, hessian
