"""Beta-distribution samplers used for posterior draws."""
from __future__ import annotations

import math
from typing import Optional, Protocol

import numpy as np

from bayesbandit.errors import InvalidParameter, NumericError


class BetaSampler(Protocol):
    def sample_beta(self, alpha: float, beta: float) -> float:
        ...


def check_shape(alpha: float, beta: float) -> None:
    for name, value in (("alpha", alpha), ("beta", beta)):
        if not math.isfinite(value) or value <= 0:
            raise InvalidParameter(f"Beta shape parameter {name}={value!r} must be positive and finite")


class NumpyBetaSampler:
    """Draws from ``numpy.random.Generator.beta``.

    Pass ``seed`` for reproducible draws, or an existing ``rng`` to share a
    generator with other components.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample_beta(self, alpha: float, beta: float) -> float:
        check_shape(alpha, beta)
        draw = float(self.rng.beta(alpha, beta))
        if not 0.0 <= draw <= 1.0:
            raise NumericError(f"Beta({alpha}, {beta}) produced {draw!r}, outside [0, 1]")
        return draw
