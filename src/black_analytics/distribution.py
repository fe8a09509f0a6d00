"""Standard normal distribution and IEEE-754 arithmetic helpers.

Limit values of the Black formulas are defined with IEEE semantics
(x / 0 is +/-inf, 0 / 0 is NaN, exp overflow is +inf), whereas Python float
arithmetic raises on these. The helpers below evaluate such expressions
through numpy with the corresponding floating-point warnings silenced.
"""

from __future__ import annotations

import numpy as np
from scipy.stats import norm


def cdf(x: float) -> float:
    """Standard normal cumulative distribution function."""
    return float(norm.cdf(x))


def pdf(x: float) -> float:
    """Standard normal probability density function."""
    return float(norm.pdf(x))


def inverse_cdf(p: float) -> float:
    """Standard normal quantile; -inf at 0 and +inf at 1."""
    return float(norm.ppf(p))


PDF_AT_ZERO = pdf(0.0)


def divide(numerator: float, denominator: float) -> float:
    """Division with IEEE semantics instead of ZeroDivisionError."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(numerator, denominator, dtype=float))


def exp(x: float) -> float:
    """Exponential returning +inf on overflow instead of raising."""
    with np.errstate(over="ignore"):
        return float(np.exp(x))
