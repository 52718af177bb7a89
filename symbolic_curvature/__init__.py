"""symbolic_curvature/ # root package
├── __init__.py # imports and version info
├── exceptions.py # error hierarchy
├── tensor_algebra.py # axis permutation, contraction, simplification helpers
├── indices.py # Variance, IndexSlot, IndexSignature, Tensor
├── curvature.py # Christoffel, Riemann, Ricci, scalar, Einstein, Weyl
├── covariant_derivative.py # covariant derivative of mixed tensors
├── riemannian_metric.py # RiemannianMetric with cached curvature
├── connections.py # LeviCivitaConnection, geodesic / transport equations
└── latex_exporter.py # LaTeX export utilities"""

# symbolic_curvature/__init__.py
"""
symbolic_curvature: symbolic curvature and covariant derivatives for a metric.

Modules:
  curvature            - pure functions metric + coords -> Christoffel ... Weyl
  covariant_derivative - covariant derivative with automatic index contraction
  indices              - index signatures and Tensor values
  riemannian_metric    - RiemannianMetric, cached object interface
  connections          - LeviCivitaConnection
  latex_exporter       - Utilities to export symbolic results to LaTeX

Usage:
  from symbolic_curvature import RiemannianMetric, Tensor, covariant_derivative
"""
__version__ = "0.2.0"

# core imports
from .exceptions import (
    CurvatureError, DimensionMismatch, SingularMetric, UnsupportedDimension,
    InvalidIndexLabel, AmbiguousContraction, UnsupportedTensorStructure,
)
from .indices import Variance, IndexSlot, IndexSignature, Tensor
from .curvature import (
    christoffel_symbols, riemann_tensor, lower_riemann, ricci_tensor, ricci_scalar,
    einstein_tensor, weyl_tensor, curvature_summary, inverse_metric, clear_christoffel_cache,
)
from .covariant_derivative import covariant_derivative, raise_index, lower_index, contract_repeated
from .riemannian_metric import RiemannianMetric
from .connections import LeviCivitaConnection, MetricConnection
from .latex_exporter import LaTeXExporter

# package-level shortcuts
__all__ = [
    "CurvatureError", "DimensionMismatch", "SingularMetric", "UnsupportedDimension",
    "InvalidIndexLabel", "AmbiguousContraction", "UnsupportedTensorStructure",
    "Variance", "IndexSlot", "IndexSignature", "Tensor",
    "christoffel_symbols", "riemann_tensor", "lower_riemann", "ricci_tensor", "ricci_scalar",
    "einstein_tensor", "weyl_tensor", "curvature_summary", "inverse_metric", "clear_christoffel_cache",
    "covariant_derivative", "raise_index", "lower_index", "contract_repeated",
    "RiemannianMetric",
    "LeviCivitaConnection", "MetricConnection",
    "LaTeXExporter",
]
