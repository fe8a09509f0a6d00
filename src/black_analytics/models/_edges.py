"""Degenerate-input policy shared by the Black formulas.

The Black closed forms divide by the total deviation s = sigma * sqrt(T) and
take log(F / K); both break down when s, F or K reach 0 or +inf. Every public
function evaluates its closed form through `evaluate`, which first walks an
ordered table of `EdgeRule`s and returns the first matching limit value.

The regimes, checked in this order by every Greek:

- *large deviation*: s > LARGE;
- *separated zero deviation*: s < SMALL with forward and strike apart;
- *tied zero deviation*: s < SMALL with forward and strike indistinguishable
  (|F - K| < SMALL, or both above LARGE), where log(F / K) / s is 0 / 0 and
  a reference value is returned instead.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from black_analytics.config import LARGE, SMALL
from black_analytics.distribution import divide
from black_analytics.types import PutCall, PutCallInput

logger = logging.getLogger(__name__)


def check_non_negative(name: str, value: float) -> None:
    """Reject negative and NaN inputs."""
    if not value >= 0.0:
        raise ValueError(f"negative/NaN {name}; have {value}")


def check_inputs(
    forward: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
) -> None:
    check_non_negative("forward", forward)
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("volatility", volatility)


@dataclass(frozen=True, slots=True)
class BlackInputs:
    """Validated Black inputs with the derived deviation s = sigma * sqrt(T)."""

    forward: float
    strike: float
    time_to_expiry: float
    volatility: float
    root_t: float
    sigma_root_t: float
    sign: float = 1.0

    @classmethod
    def of(
        cls,
        forward: float,
        strike: float,
        time_to_expiry: float,
        volatility: float,
        put_call: PutCallInput = PutCall.CALL,
    ) -> BlackInputs:
        check_inputs(forward, strike, time_to_expiry, volatility)
        root_t = math.sqrt(time_to_expiry)
        sigma_root_t = volatility * root_t
        if math.isnan(sigma_root_t):
            # 0 * inf: the product has no limit, 1 is the reference deviation.
            logger.debug("volatility * sqrt(time_to_expiry) ambiguous; using 1")
            sigma_root_t = 1.0
        return cls(
            forward=forward,
            strike=strike,
            time_to_expiry=time_to_expiry,
            volatility=volatility,
            root_t=root_t,
            sigma_root_t=sigma_root_t,
            sign=PutCall.of(put_call).sign,
        )

    @property
    def is_call(self) -> bool:
        return self.sign > 0

    @property
    def large_forward(self) -> bool:
        return self.forward > LARGE

    @property
    def large_strike(self) -> bool:
        return self.strike > LARGE

    @property
    def both_large(self) -> bool:
        return self.large_forward and self.large_strike

    @property
    def large_deviation(self) -> bool:
        return self.sigma_root_t > LARGE

    @property
    def small_deviation(self) -> bool:
        return self.sigma_root_t < SMALL

    @property
    def tied(self) -> bool:
        """Forward and strike cannot be told apart numerically."""
        return abs(self.forward - self.strike) < SMALL or self.both_large

    @property
    def in_the_money(self) -> bool:
        return self.sign * (self.forward - self.strike) > 0

    def log_moneyness(self) -> float:
        ratio = divide(self.forward, self.strike)
        if ratio == 0.0:
            return -math.inf
        return math.log(ratio)

    def d1(self) -> float:
        s = self.sigma_root_t
        if self.tied or self.large_deviation:
            return 0.5 * s
        return self.log_moneyness() / s + 0.5 * s

    def d2(self) -> float:
        s = self.sigma_root_t
        if self.tied or self.large_deviation:
            return -0.5 * s
        return self.log_moneyness() / s - 0.5 * s


Limit = Callable[[BlackInputs], float]


@dataclass(frozen=True, slots=True)
class EdgeRule:
    """One (predicate, closed-form limit) pair of a limit table."""

    name: str
    applies: Callable[[BlackInputs], bool]
    limit: Limit
    ambiguous: bool = False


def evaluate(
    inputs: BlackInputs,
    rules: Sequence[EdgeRule],
    formula: Limit,
) -> float:
    """Return the first matching rule's limit, else the regular closed form."""
    for rule in rules:
        if rule.applies(inputs):
            if rule.ambiguous:
                logger.debug("%s: ambiguous limit, returning reference value", rule.name)
            return rule.limit(inputs)
    return formula(inputs)


def _constant(value: float) -> Limit:
    return lambda _: value


def _as_limit(value: float | Limit) -> Limit:
    return value if callable(value) else _constant(float(value))


def is_large_deviation(x: BlackInputs) -> bool:
    return x.large_deviation


def is_separated_zero_deviation(x: BlackInputs) -> bool:
    return x.small_deviation and not x.tied


def is_tied_zero_deviation(x: BlackInputs) -> bool:
    return x.small_deviation and x.tied


def greek_rules(
    *,
    large: float | Limit,
    separated: float | Limit,
    tied: float | Limit,
    tied_applies: Callable[[BlackInputs], bool] = is_tied_zero_deviation,
) -> tuple[EdgeRule, ...]:
    """Limit table shared by the Greeks: large, separated, then tied deviation."""
    return (
        EdgeRule("large deviation", is_large_deviation, _as_limit(large)),
        EdgeRule("separated zero deviation", is_separated_zero_deviation, _as_limit(separated)),
        EdgeRule("tied zero deviation", tied_applies, _as_limit(tied), ambiguous=True),
    )


def both_large_price(x: BlackInputs) -> float:
    """Price limit when forward and strike are both infinite-like."""
    if x.is_call:
        return x.forward if x.forward >= x.strike else 0.0
    return x.strike if x.strike >= x.forward else 0.0


def intrinsic_value(x: BlackInputs) -> float:
    return max(x.sign * (x.forward - x.strike), 0.0)


PRICE_RULES: tuple[EdgeRule, ...] = (
    EdgeRule("large forward and strike", lambda x: x.both_large, both_large_price, ambiguous=True),
    EdgeRule("zero deviation", lambda x: x.small_deviation, intrinsic_value),
)


def weighted(weight: float, probability: float) -> float:
    """weight * probability, with a zero probability dominating an infinite weight."""
    return 0.0 if probability == 0.0 else weight * probability
