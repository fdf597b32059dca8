"""
Predictions package.

Contiene:
- poisson: PMF/CDF Poisson e probabilità over/under per linea
- markets: totale atteso (media simmetrica) e PoissonMarketModel
- pipeline: previsione completa di una fixture (resolver + team context + modello)
"""
from .markets import PoissonMarketModel, predict_markets  # noqa: F401
from .pipeline import predict_match  # noqa: F401


__all__ = ["PoissonMarketModel", "predict_markets", "predict_match"]
