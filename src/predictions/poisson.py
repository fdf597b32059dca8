from __future__ import annotations

import math
from typing import Tuple


def poisson_pmf(k: int, lam: float) -> float:
    """
    PMF(k) = e^-λ · λ^k / k!  (calcolata in scala logaritmica).
    λ <= 0 => distribuzione degenere in zero.
    """
    if k < 0:
        return 0.0
    if lam <= 0:
        return 1.0 if k == 0 else 0.0
    return math.exp(-lam + k * math.log(lam) - math.lgamma(k + 1))


def poisson_cdf(k: int, lam: float) -> float:
    s = 0.0
    for i in range(0, k + 1):
        s += poisson_pmf(i, lam)
    # clamp per la deriva in virgola mobile
    return max(0.0, min(1.0, s))


def over_under(line: float, lam: float) -> Tuple[float, float]:
    """
    (P(over), P(under)) per una linea:
      over  = P(X >= floor(L) + 1) = 1 - CDF(floor(L))
      under = P(X <= floor(L))     = CDF(floor(L))
    Su linea intera l'under include il valore esatto.
    """
    k = math.floor(line)
    under = poisson_cdf(k, lam)
    return 1.0 - under, under


__all__ = ["poisson_pmf", "poisson_cdf", "over_under"]
