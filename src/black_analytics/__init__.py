"""Lognormal (Black) option analytics: prices, Greeks, adjoints and inverses."""

from .config import DEFAULT_IMPLIED_VOLATILITY_CONFIG, ImpliedVolatilityConfig
from .models import (
    ImpliedVolatilityError,
    black,
    implied_strike,
    implied_strike_adjoint,
    implied_volatility,
    implied_volatility_adjoint,
    normal,
    price_adjoint,
    price_adjoint2,
    strike_for_delta,
)
from .types import PutCall, ValueDerivatives

__all__ = [
    "PutCall",
    "ValueDerivatives",
    "ImpliedVolatilityConfig",
    "DEFAULT_IMPLIED_VOLATILITY_CONFIG",
    "ImpliedVolatilityError",
    "black",
    "normal",
    "price_adjoint",
    "price_adjoint2",
    "implied_volatility",
    "implied_volatility_adjoint",
    "strike_for_delta",
    "implied_strike",
    "implied_strike_adjoint",
]
