"""Implied Black volatility from prices and from normal volatilities."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from scipy.optimize import brentq, newton

from black_analytics.config import (
    ATM_LIMIT,
    DEFAULT_IMPLIED_VOLATILITY_CONFIG,
    NEAR_ZERO,
    ROOT_ACCURACY,
    ImpliedVolatilityConfig,
)
from black_analytics.distribution import inverse_cdf
from black_analytics.models import black, normal
from black_analytics.models._edges import check_non_negative
from black_analytics.models.black_adjoint import price_adjoint
from black_analytics.types import PutCall, PutCallInput, ValueDerivatives

logger = logging.getLogger(__name__)

VOLATILITY_INDEX = 3


class ImpliedVolatilityError(ValueError):
    """Raised when no volatility reproduces the target price."""


@dataclass(frozen=True)
class ImpliedVolatilitySolver:
    """Root finder for price(sigma) = target on a monotone pricing function.

    Runs a Newton iteration on the vega, kept inside a bracketing interval
    that shrinks with every evaluated residual. Steps are capped at
    `config.max_step` and replaced by a bisection when they would leave the
    bracket. When the iteration budget is exhausted the bracket is handed to
    Brent's method.
    """

    price_function: Callable[[float], float]
    vega_function: Callable[[float], float]
    config: ImpliedVolatilityConfig = field(default=DEFAULT_IMPLIED_VOLATILITY_CONFIG)

    def _residual(self, volatility: float, target_price: float) -> float:
        return self.price_function(volatility) - target_price

    def bracket(self, target_price: float) -> tuple[float, float]:
        """Return (lower, upper) with price(lower) <= target <= price(upper)."""
        cfg = self.config
        lower, upper = cfg.min_vol, cfg.max_vol
        for _ in range(cfg.bracket_expansions):
            if self._residual(lower, target_price) <= 0.0:
                break
            lower *= 0.5
        for _ in range(cfg.bracket_expansions):
            if self._residual(upper, target_price) >= 0.0:
                break
            upper *= 2.0
        if self._residual(lower, target_price) > 0.0 or self._residual(upper, target_price) < 0.0:
            raise ImpliedVolatilityError(
                f"price {target_price} not bracketed by volatilities [{lower}, {upper}]"
            )
        return lower, upper

    def solve(self, target_price: float, vol_guess: float) -> float:
        cfg = self.config
        lower, upper = self.bracket(target_price)
        volatility = min(max(vol_guess, lower), upper)

        for iteration in range(cfg.max_iterations):
            residual = self._residual(volatility, target_price)
            if residual == 0.0:
                return volatility
            if residual > 0.0:
                upper = volatility
            else:
                lower = volatility

            vega = self.vega_function(volatility)
            candidate = math.nan
            if vega > 0.0:
                step = residual / vega
                candidate = volatility - math.copysign(min(abs(step), cfg.max_step), step)
            if not lower < candidate < upper:
                candidate = 0.5 * (lower + upper)

            if abs(candidate - volatility) < cfg.vol_tolerance:
                logger.debug("Newton converged after %d iterations", iteration + 1)
                return candidate
            volatility = candidate

        logger.debug(
            "Newton did not converge in %d iterations; Brent on [%g, %g]",
            cfg.max_iterations,
            lower,
            upper,
        )
        try:
            return brentq(
                self._residual,
                lower,
                upper,
                args=(target_price,),
                xtol=cfg.vol_tolerance,
            )
        except (RuntimeError, ValueError) as err:
            raise ImpliedVolatilityError(
                f"Brent did not converge on volatilities [{lower}, {upper}]"
            ) from err


def _check_finite(name: str, value: float) -> None:
    if math.isinf(value):
        raise ValueError(f"{name} must be finite; have {value}")


def initial_guess(otm_price: float, forward: float, strike: float, time_to_expiry: float) -> float:
    """Analytic starting volatility for the out-of-the-money inversion.

    Takes the larger of the at-the-money inversion of the normalized price,
    2 / sqrt(T) * N^-1((p / sqrt(FK) + 1) / 2), and the volatility
    sqrt(2 |ln(F / K)| / T) maximizing the vega, from which Newton converges
    monotonically.
    """
    root_t = math.sqrt(time_to_expiry)
    normalized = otm_price / math.sqrt(forward * strike)
    atm = 2.0 * inverse_cdf(0.5 * (min(normalized, 1.0 - NEAR_ZERO) + 1.0)) / root_t
    inflection = math.sqrt(2.0 * abs(math.log(forward / strike)) / time_to_expiry)
    return max(atm, inflection)


def _solve_otm(
    otm_price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    vol_guess: float | None,
    config: ImpliedVolatilityConfig | None,
) -> float:
    """Volatility of a positive out-of-the-money price, inputs already checked."""
    if time_to_expiry == 0.0:
        raise ImpliedVolatilityError("a positive out-of-the-money price needs time_to_expiry > 0")
    if forward == strike:
        return 2.0 * inverse_cdf(0.5 * (otm_price / forward + 1.0)) / math.sqrt(time_to_expiry)

    put_call = PutCall.CALL if strike >= forward else PutCall.PUT
    solver = ImpliedVolatilitySolver(
        price_function=lambda sigma: black.price(forward, strike, time_to_expiry, sigma, put_call),
        vega_function=lambda sigma: black.vega(forward, strike, time_to_expiry, sigma),
        config=config or DEFAULT_IMPLIED_VOLATILITY_CONFIG,
    )
    if vol_guess is None:
        vol_guess = initial_guess(otm_price, forward, strike, time_to_expiry)
    return solver.solve(otm_price, vol_guess)


def _check_otm_inputs(
    otm_price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    vol_guess: float | None,
) -> None:
    if not otm_price >= -NEAR_ZERO * forward:
        raise ValueError(f"negative/NaN otm_price; have {otm_price}")
    check_non_negative("forward", forward)
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    if vol_guess is not None:
        check_non_negative("vol_guess", vol_guess)
    _check_finite("forward", forward)
    _check_finite("strike", strike)
    _check_finite("time_to_expiry", time_to_expiry)


def implied_volatility_from_otm_price(
    otm_price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    vol_guess: float | None = None,
    config: ImpliedVolatilityConfig | None = None,
) -> float:
    """Black volatility of an out-of-the-money price (call if K >= F, put otherwise).

    Prices within NEAR_ZERO * forward of zero return 0. Raises ValueError when
    the price reaches its no-arbitrage bound min(forward, strike).
    """
    _check_otm_inputs(otm_price, forward, strike, time_to_expiry, vol_guess)
    if abs(otm_price) < NEAR_ZERO * forward:
        return 0.0
    upper_bound = min(forward, strike)
    if not otm_price < upper_bound:
        raise ValueError(f"otm_price of {otm_price} exceeded upper bound of {upper_bound}")
    return _solve_otm(otm_price, forward, strike, time_to_expiry, vol_guess, config)


def implied_volatility_from_otm_price_adjoint(
    otm_price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    vol_guess: float | None = None,
    config: ImpliedVolatilityConfig | None = None,
) -> ValueDerivatives:
    """Implied volatility with its derivative 1 / vega with respect to the price."""
    volatility = implied_volatility_from_otm_price(
        otm_price, forward, strike, time_to_expiry, vol_guess, config
    )
    if volatility == 0.0:
        return ValueDerivatives.of(0.0, (0.0,))
    put_call = PutCall.CALL if strike >= forward else PutCall.PUT
    vega = price_adjoint(forward, strike, time_to_expiry, volatility, put_call).derivative(
        VOLATILITY_INDEX
    )
    return ValueDerivatives.of(volatility, (1.0 / vega,))


def _otm_price(
    price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    put_call: PutCallInput,
) -> float:
    if not price >= -NEAR_ZERO * forward:
        raise ValueError(f"negative/NaN price; have {price}")
    if not forward > 0.0:
        raise ValueError(f"forward must be > 0; have {forward}")
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    _check_finite("forward", forward)
    _check_finite("strike", strike)
    _check_finite("time_to_expiry", time_to_expiry)
    intrinsic = max(0.0, PutCall.of(put_call).sign * (forward - strike))
    return price - intrinsic


def implied_volatility(
    price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    put_call: PutCallInput = PutCall.CALL,
    config: ImpliedVolatilityConfig | None = None,
) -> float:
    """Black volatility reproducing a call or put forward price.

    The intrinsic value is removed first and the remaining time value is
    inverted on the out-of-the-money side, where the price is most sensitive
    to volatility.
    """
    otm_price = _otm_price(price, forward, strike, time_to_expiry, put_call)
    return implied_volatility_from_otm_price(
        otm_price, forward, strike, time_to_expiry, config=config
    )


def implied_volatility_adjoint(
    price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    put_call: PutCallInput = PutCall.CALL,
    config: ImpliedVolatilityConfig | None = None,
) -> ValueDerivatives:
    """Implied volatility with its derivative with respect to the option price."""
    otm_price = _otm_price(price, forward, strike, time_to_expiry, put_call)
    return implied_volatility_from_otm_price_adjoint(
        otm_price, forward, strike, time_to_expiry, config=config
    )


def implied_volatility_from_normal_approximated2(
    forward: float,
    strike: float,
    time_to_expiry: float,
    normal_volatility: float,
) -> float:
    """Black volatility equivalent to a normal volatility, Hagan's closed form."""
    if not forward > 0.0:
        raise ValueError(f"forward must be > 0; have {forward}")
    if not strike > 0.0:
        raise ValueError(f"strike must be > 0; have {strike}")
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("normal_volatility", normal_volatility)
    log_fk = math.log(forward / strike)
    fk = forward * strike
    s2t = normal_volatility * normal_volatility * time_to_expiry
    if abs(forward - strike) / strike < ATM_LIMIT:
        return (
            normal_volatility
            / math.sqrt(fk)
            * (1.0 + s2t / (24.0 * fk))
            / (1.0 + log_fk * log_fk / 24.0)
        )
    return (
        normal_volatility
        * log_fk
        / (forward - strike)
        * (1.0 + (1.0 - log_fk * log_fk / 120.0) * s2t / (24.0 * fk))
    )


def implied_volatility_from_normal_approximated_adjoint(
    forward: float,
    strike: float,
    time_to_expiry: float,
    normal_volatility: float,
) -> ValueDerivatives:
    """Black volatility inverting the Black-to-normal map, with d(sigma_B)/d(sigma_N).

    The closed form seeds a Newton iteration on
    `normal.implied_volatility_from_black_approximated`, so the two
    conversions round-trip to ROOT_ACCURACY.
    """
    seed = implied_volatility_from_normal_approximated2(
        forward, strike, time_to_expiry, normal_volatility
    )

    def residual(black_volatility: float) -> float:
        return (
            normal.implied_volatility_from_black_approximated(
                forward, strike, time_to_expiry, black_volatility
            )
            - normal_volatility
        )

    def slope(black_volatility: float) -> float:
        return normal.implied_volatility_from_black_approximated_adjoint(
            forward, strike, time_to_expiry, black_volatility
        ).derivative(0)

    black_volatility = float(newton(residual, seed, fprime=slope, tol=ROOT_ACCURACY))
    return ValueDerivatives.of(black_volatility, (1.0 / slope(black_volatility),))


def implied_volatility_from_normal_approximated(
    forward: float,
    strike: float,
    time_to_expiry: float,
    normal_volatility: float,
) -> float:
    """Black volatility equivalent to a normal volatility."""
    return implied_volatility_from_normal_approximated_adjoint(
        forward, strike, time_to_expiry, normal_volatility
    ).value
