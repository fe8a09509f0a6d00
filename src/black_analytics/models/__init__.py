"""Black forward formulas, their derivatives and inverses."""

from . import black, normal
from .black_adjoint import price_adjoint, price_adjoint2
from .black_scholes import (
    bs_delta,
    bs_forward,
    bs_gamma,
    bs_greeks,
    bs_price,
    bs_rho,
    bs_theta,
    bs_vega,
)
from .implied_volatility import (
    ImpliedVolatilityError,
    ImpliedVolatilitySolver,
    implied_volatility,
    implied_volatility_adjoint,
    implied_volatility_from_normal_approximated,
    implied_volatility_from_normal_approximated2,
    implied_volatility_from_normal_approximated_adjoint,
    implied_volatility_from_otm_price,
    implied_volatility_from_otm_price_adjoint,
)
from .strikes import implied_strike, implied_strike_adjoint, strike_for_delta

__all__ = [
    "black",
    "normal",
    "price_adjoint",
    "price_adjoint2",
    "ImpliedVolatilityError",
    "ImpliedVolatilitySolver",
    "implied_volatility",
    "implied_volatility_adjoint",
    "implied_volatility_from_otm_price",
    "implied_volatility_from_otm_price_adjoint",
    "implied_volatility_from_normal_approximated",
    "implied_volatility_from_normal_approximated2",
    "implied_volatility_from_normal_approximated_adjoint",
    "strike_for_delta",
    "implied_strike",
    "implied_strike_adjoint",
    "bs_forward",
    "bs_price",
    "bs_delta",
    "bs_gamma",
    "bs_vega",
    "bs_theta",
    "bs_rho",
    "bs_greeks",
]
