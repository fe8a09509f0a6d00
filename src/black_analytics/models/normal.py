"""Normal (Bachelier) model and Hagan's Black-to-normal volatility map.

The conversion formulas are the expansions of Hagan, "Volatility conversion
calculator" (2004): accurate for moderate sigma^2 T, with an at-the-money
branch avoiding the 0 / 0 in (F - K) / ln(F / K).
"""

from __future__ import annotations

import math

from black_analytics.config import ATM_LIMIT
from black_analytics.distribution import cdf, pdf
from black_analytics.models._edges import check_non_negative
from black_analytics.types import PutCall, PutCallInput, ValueDerivatives


def price(
    forward: float,
    strike: float,
    time_to_expiry: float,
    normal_volatility: float,
    put_call: PutCallInput = PutCall.CALL,
) -> float:
    """Undiscounted Bachelier price of a European option on the forward."""
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("normal_volatility", normal_volatility)
    sign = PutCall.of(put_call).sign
    deviation = normal_volatility * math.sqrt(time_to_expiry)
    moneyness = sign * (forward - strike)
    if deviation == 0.0:
        return max(moneyness, 0.0)
    d = moneyness / deviation
    return moneyness * cdf(d) + deviation * pdf(d)


def _check_positive(name: str, value: float) -> None:
    if not value > 0.0:
        raise ValueError(f"{name} must be > 0; have {value}")


def _hagan_terms(forward: float, strike: float) -> tuple[float, float]:
    """Return (level, a) of sigma_N = sigma_B * level / (1 + a x + x^2 / 5760), x = sigma_B^2 T."""
    log_fk = math.log(forward / strike)
    if abs(forward - strike) / strike < ATM_LIMIT:
        return math.sqrt(forward * strike) * (1.0 + log_fk * log_fk / 24.0), 1.0 / 24.0
    level = (forward - strike) / log_fk
    return level, (1.0 - log_fk * log_fk / 120.0) / 24.0


def implied_volatility_from_black_approximated_adjoint(
    forward: float,
    strike: float,
    time_to_expiry: float,
    black_volatility: float,
) -> ValueDerivatives:
    """Normal volatility equivalent to a Black volatility, with d(sigma_N)/d(sigma_B)."""
    _check_positive("forward", forward)
    _check_positive("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("black_volatility", black_volatility)
    level, a = _hagan_terms(forward, strike)
    s2t = black_volatility * black_volatility * time_to_expiry
    denominator = 1.0 + a * s2t + s2t * s2t / 5760.0
    denominator_bar = (a + s2t / 2880.0) * 2.0 * black_volatility * time_to_expiry
    value = black_volatility * level / denominator
    derivative = (
        level * (denominator - black_volatility * denominator_bar) / (denominator * denominator)
    )
    return ValueDerivatives.of(value, (derivative,))


def implied_volatility_from_black_approximated(
    forward: float,
    strike: float,
    time_to_expiry: float,
    black_volatility: float,
) -> float:
    """Normal volatility equivalent to a Black volatility (Hagan's expansion)."""
    return implied_volatility_from_black_approximated_adjoint(
        forward, strike, time_to_expiry, black_volatility
    ).value
