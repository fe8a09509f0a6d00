"""Numeric thresholds and solver settings shared by the Black analytics."""

from __future__ import annotations

from dataclasses import dataclass

# Inputs above LARGE are treated as infinite, deviations below SMALL as zero.
LARGE = 1e13
SMALL = 1e-13

# Relative price level under which an out-of-the-money price is taken as zero.
NEAR_ZERO = 1e-16

# Relative forward/strike distance treated as at-the-money by the normal-vol
# conversions (avoids the 0/0 in (F - K) / ln(F / K)).
ATM_LIMIT = 1e-3

# Absolute accuracy of the Newton refinement in the normal-vol conversion.
ROOT_ACCURACY = 1e-7


@dataclass(frozen=True)
class ImpliedVolatilityConfig:
    """Settings of the implied-volatility root finder.

    - `vol_tolerance`: absolute volatility step below which Newton has converged.
    - `max_iterations`: Newton iteration budget before falling back to Brent.
    - `max_step`: cap on a single Newton volatility step.
    - `min_vol` / `max_vol`: initial bracketing interval of the volatility.
    - `bracket_expansions`: number of geometric expansions (halving
      `min_vol`, doubling `max_vol`) tried when the target price is not
      bracketed by the initial interval.
    """

    vol_tolerance: float = 1e-12
    max_iterations: int = 50
    max_step: float = 0.5
    min_vol: float = 1e-10
    max_vol: float = 10.0
    bracket_expansions: int = 20

    def __post_init__(self) -> None:
        if self.vol_tolerance <= 0:
            raise ValueError("vol_tolerance must be > 0")
        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be > 0")
        if self.max_step <= 0:
            raise ValueError("max_step must be > 0")
        if not 0 < self.min_vol < self.max_vol:
            raise ValueError("volatility domain must satisfy 0 < min_vol < max_vol")
        if self.bracket_expansions < 0:
            raise ValueError("bracket_expansions must be >= 0")


DEFAULT_IMPLIED_VOLATILITY_CONFIG = ImpliedVolatilityConfig()
