"""
Christoffel connection and curvature tensors of a metric.

Every quantity is a pure function of ``(metric, coords)``; intermediate
results can be passed back in to avoid recomputation, and the Christoffel
symbols are memoized per (metric, basis) pair.

Index conventions (array axis order):
    christoffel[m, n, r]    = Gamma^m_{nr}
    riemann[r, s, m, n]     = R^r_{smn}
    riemann_lower[r, s, m, n] = R_{rsmn}
    ricci[s, n]             = R^r_{srn}
    weyl[r, s, m, n]        = C_{rsmn}
"""
import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Sequence, Tuple

import sympy as sp
from sympy import Expr, ImmutableMatrix, MatrixBase, Symbol, permutedims
from sympy.tensor.array import NDimArray

from .exceptions import DimensionMismatch, SingularMetric, UnsupportedDimension
from .tensor_algebra import (
    antisymmetrize,
    as_array,
    contract,
    outer,
    partial_derivatives,
    simplify_array,
    swap_axes,
)

logger = logging.getLogger(__name__)

CHRISTOFFEL_CACHE_SIZE = 32


# ---------------- Input validation ----------------
def validate_basis(coords: Sequence[Any]) -> Tuple[Symbol, ...]:
    """
    Sympify the coordinate basis and check that its labels are distinct.
    """
    basis = tuple(sp.sympify(c) for c in coords)
    if len(set(basis)) != len(basis):
        raise DimensionMismatch(
            f"Coordinate basis {list(basis)} repeats a coordinate.",
            expected=len(set(basis)), got=len(basis),
        )
    return basis


def validate_metric(metric: Any, coords: Sequence[Any]) -> ImmutableMatrix:
    """
    Normalize the metric to an ImmutableMatrix of size len(coords).
    """
    if isinstance(metric, NDimArray):
        if metric.rank() != 2:
            raise DimensionMismatch(f"Metric must have rank 2, got rank {metric.rank()}.",
                                    expected=2, got=metric.rank())
        metric = metric.tomatrix()
    g = ImmutableMatrix(metric)
    n = len(coords)
    if g.shape != (n, n):
        raise DimensionMismatch(
            f"Metric matrix must be {n}x{n} for coords length {n}, got {g.shape[0]}x{g.shape[1]}.",
            expected=n, got=g.shape,
        )
    return g


def inverse_metric(metric: MatrixBase, simplify: bool = True) -> ImmutableMatrix:
    """
    Inverse metric g^{mn}.

    Raises:
        SingularMetric: det g simplifies to zero. No pseudo-inverse is tried.
    """
    det = sp.simplify(metric.det())
    if det == 0:
        logger.error("Metric %s is singular", metric)
        raise SingularMetric(f"Metric determinant is identically zero: {metric}", determinant=det)
    try:
        inv = metric.inv()
    except ValueError as exc:
        logger.error("Inverting metric %s failed: %s", metric, exc)
        raise SingularMetric(f"Metric cannot be inverted: {exc}", determinant=det) from exc
    return ImmutableMatrix(inv.applyfunc(sp.simplify) if simplify else inv)


# ---------------- Christoffel symbols ----------------
def christoffel_symbols(metric: Any, coords: Sequence[Any], simplify: bool = True,
                        memoize: bool = True) -> NDimArray:
    """
    Christoffel symbols of the second kind,

        Gamma^m_{nr} = 1/2 g^{ms} (d_n g_{sr} + d_r g_{ns} - d_s g_{nr}).

    Args:
        metric: n x n symmetric metric.
        coords: ordered coordinate basis of length n.
        simplify: simplify every component of the result.
        memoize: reuse a previously computed result for the same metric and basis.

    Returns:
        rank 3 array indexed [m, n, r].
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    if memoize:
        hits = _cached_christoffel.cache_info().hits
        gamma = _cached_christoffel(g, basis, simplify)
        if _cached_christoffel.cache_info().hits > hits:
            logger.debug("Christoffel cache hit for basis %s", basis)
        return gamma
    return _compute_christoffel(g, basis, simplify)


@lru_cache(maxsize=CHRISTOFFEL_CACHE_SIZE)
def _cached_christoffel(g: ImmutableMatrix, basis: Tuple[Symbol, ...], simplify: bool) -> NDimArray:
    return _compute_christoffel(g, basis, simplify)


def _compute_christoffel(g: ImmutableMatrix, basis: Tuple[Symbol, ...], simplify: bool) -> NDimArray:
    logger.debug("Computing Christoffel symbols in %d dimensions over %s", len(basis), basis)
    ginv = as_array(inverse_metric(g, simplify=simplify))
    # dg[s, r, v] = d_v g_{sr}
    dg = permutedims(partial_derivatives(as_array(g), basis), (1, 2, 0))
    combo = permutedims(dg, (0, 2, 1)) + dg - permutedims(dg, (2, 0, 1))
    gamma = contract(outer(ginv, combo), (1, 2)) * sp.Rational(1, 2)
    return simplify_array(gamma) if simplify else gamma


def clear_christoffel_cache() -> None:
    _cached_christoffel.cache_clear()


def christoffel_cache_info():
    return _cached_christoffel.cache_info()


# ---------------- Riemann, Ricci, scalar ----------------
def riemann_tensor(metric: Any, coords: Sequence[Any], simplify: bool = True,
                   christoffel: Optional[NDimArray] = None, lowered: bool = False) -> NDimArray:
    """
    Riemann tensor

        R^r_{smn} = d_m Gamma^r_{ns} - d_n Gamma^r_{ms}
                    + Gamma^r_{ml} Gamma^l_{ns} - Gamma^r_{nl} Gamma^l_{ms}

    returned as a [r, s, m, n] array, or as R_{rsmn} when ``lowered``.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    gamma = christoffel if christoffel is not None else christoffel_symbols(g, basis, simplify=simplify)
    logger.debug("Computing Riemann tensor in %d dimensions", len(basis))
    # d_m Gamma^r_{ns} -> [r, s, m, n]
    d_gamma = permutedims(partial_derivatives(gamma, basis), (1, 3, 0, 2))
    # Gamma^r_{ml} Gamma^l_{ns}, contracted over l -> [r, m, n, s] -> [r, s, m, n]
    quadratic = permutedims(contract(outer(gamma, gamma), (2, 3)), (0, 3, 1, 2))
    half = d_gamma + quadratic
    riemann = half - swap_axes(half, 2, 3)
    if simplify:
        riemann = simplify_array(riemann)
    if lowered:
        return lower_riemann(riemann, g, simplify=simplify)
    return riemann


def lower_riemann(riemann: NDimArray, metric: Any, simplify: bool = True) -> NDimArray:
    """
    R_{rsmn} = g_{ra} R^a_{smn}.
    """
    g = as_array(ImmutableMatrix(metric))
    lowered = contract(outer(g, riemann), (1, 2))
    return simplify_array(lowered) if simplify else lowered


def ricci_tensor(metric: Any, coords: Sequence[Any], simplify: bool = True,
                 riemann: Optional[NDimArray] = None) -> NDimArray:
    """
    Ricci tensor R_{sn} = R^r_{srn}: trace of the upper slot with the second lower slot.
    """
    if riemann is None:
        riemann = riemann_tensor(metric, coords, simplify=simplify)
    logger.debug("Contracting Riemann tensor to Ricci tensor")
    ricci = contract(riemann, (0, 2))
    return simplify_array(ricci) if simplify else ricci


def ricci_scalar(metric: Any, coords: Sequence[Any], simplify: bool = True,
                 ricci: Optional[NDimArray] = None) -> Expr:
    """
    Ricci scalar R = g^{sn} R_{sn}.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    if ricci is None:
        ricci = ricci_tensor(g, basis, simplify=simplify)
    logger.debug("Tracing Ricci tensor to Ricci scalar in %d dimensions", len(basis))
    ginv = inverse_metric(g, simplify=simplify)
    scalar = (ginv * as_array(ricci).tomatrix()).trace()
    return sp.simplify(scalar) if simplify else scalar


# ---------------- Einstein, Weyl ----------------
def einstein_tensor(metric: Any, coords: Sequence[Any], simplify: bool = True,
                    ricci: Optional[NDimArray] = None, scalar: Optional[Expr] = None) -> NDimArray:
    """
    Einstein tensor G_{mn} = R_{mn} - 1/2 R g_{mn}.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    if ricci is None:
        ricci = ricci_tensor(g, basis, simplify=simplify)
    if scalar is None:
        scalar = ricci_scalar(g, basis, simplify=simplify, ricci=ricci)
    logger.debug("Computing Einstein tensor in %d dimensions", len(basis))
    einstein = as_array(ricci) - as_array(g) * (scalar / 2)
    return simplify_array(einstein) if simplify else einstein


def weyl_tensor(metric: Any, coords: Sequence[Any], simplify: bool = True,
                riemann: Optional[NDimArray] = None, ricci: Optional[NDimArray] = None,
                scalar: Optional[Expr] = None) -> NDimArray:
    """
    Weyl tensor, the trace-free part of the fully-lowered Riemann tensor:

        C_{rsmn} = R_{rsmn} - 2/(n-2) (g_{r[m} R_{n]s} - g_{s[m} R_{n]r})
                   + 2R/((n-1)(n-2)) g_{r[m} g_{n]s}

    Raises:
        UnsupportedDimension: n < 3, where the decomposition is undefined.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    n = len(basis)
    if n < 3:
        raise UnsupportedDimension(f"Weyl tensor requires dimension >= 3, got {n}.", dimension=n)
    if riemann is None:
        riemann = riemann_tensor(g, basis, simplify=simplify)
    if ricci is None:
        ricci = ricci_tensor(g, basis, simplify=simplify, riemann=riemann)
    if scalar is None:
        scalar = ricci_scalar(g, basis, simplify=simplify, ricci=ricci)
    logger.debug("Computing Weyl tensor in %d dimensions", n)
    g_arr = as_array(g)
    riemann_lower = lower_riemann(riemann, g, simplify=False)
    # g_{rm} R_{ns} and g_{rm} g_{ns}, both reordered to [r, s, m, n]
    g_ricci = antisymmetrize(permutedims(outer(g_arr, as_array(ricci)), (0, 3, 1, 2)), 2, 3)
    g_g = antisymmetrize(permutedims(outer(g_arr, g_arr), (0, 3, 1, 2)), 2, 3)
    ricci_part = g_ricci - swap_axes(g_ricci, 0, 1)
    weyl = (riemann_lower
            - ricci_part * sp.Rational(2, n - 2)
            + g_g * (sp.Rational(2, (n - 1) * (n - 2)) * scalar))
    return simplify_array(weyl) if simplify else weyl


def curvature_summary(metric: Any, coords: Sequence[Any], simplify: bool = True) -> Dict[str, Any]:
    """
    Every curvature quantity of the metric through one shared pipeline.

    Keys: christoffel, riemann, ricci, scalar, einstein and, for n >= 3, weyl.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    gamma = christoffel_symbols(g, basis, simplify=simplify)
    riemann = riemann_tensor(g, basis, simplify=simplify, christoffel=gamma)
    ricci = ricci_tensor(g, basis, simplify=simplify, riemann=riemann)
    scalar = ricci_scalar(g, basis, simplify=simplify, ricci=ricci)
    summary = {
        "christoffel": gamma,
        "riemann": riemann,
        "ricci": ricci,
        "scalar": scalar,
        "einstein": einstein_tensor(g, basis, simplify=simplify, ricci=ricci, scalar=scalar),
    }
    if len(basis) >= 3:
        summary["weyl"] = weyl_tensor(g, basis, simplify=simplify, riemann=riemann,
                                      ricci=ricci, scalar=scalar)
    return summary

# End of curvature.py
