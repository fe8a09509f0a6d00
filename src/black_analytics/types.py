"""Shared option-analytics value types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Literal, TypeAlias

import numpy as np


class PutCall(StrEnum):
    """Call/put discriminator carrying the payoff sign used by the formulas."""

    CALL = "call"
    PUT = "put"

    @property
    def sign(self) -> float:
        """Payoff sign: +1 for a call, -1 for a put."""
        return 1.0 if self is PutCall.CALL else -1.0

    @property
    def is_call(self) -> bool:
        return self is PutCall.CALL

    @classmethod
    def of(cls, value: PutCallInput) -> PutCall:
        """Normalize the accepted call/put labels (and the boolean call flag)."""
        if isinstance(value, PutCall):
            return value
        if isinstance(value, bool):
            return cls.CALL if value else cls.PUT
        if value in ("call", "C"):
            return cls.CALL
        if value in ("put", "P"):
            return cls.PUT
        raise ValueError("put_call must be one of {'call', 'put', 'C', 'P'} or a bool")


# Tolerant input type accepted at the public function boundary.
PutCallInput: TypeAlias = PutCall | Literal["call", "put", "C", "P"] | bool


@dataclass(frozen=True, eq=False)
class ValueDerivatives:
    """A value together with its first-order derivatives.

    The order of `derivatives` is fixed by the producing function; for option
    prices it is (forward, strike, time to expiry, volatility).
    """

    value: float
    derivatives: np.ndarray

    def __post_init__(self) -> None:
        derivatives = np.array(self.derivatives, dtype=float)
        if derivatives.ndim != 1:
            raise ValueError("derivatives must be one-dimensional")
        derivatives.setflags(write=False)
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "derivatives", derivatives)

    @classmethod
    def of(cls, value: float, derivatives: Iterable[float]) -> ValueDerivatives:
        return cls(value=value, derivatives=np.fromiter(derivatives, dtype=float))

    @property
    def size(self) -> int:
        """Number of first-order derivatives."""
        return int(self.derivatives.size)

    def derivative(self, index: int) -> float:
        return float(self.derivatives[index])
