import logging
import sympy as sp
from sympy import Matrix, Expr, ImmutableMatrix, latex
from sympy.tensor.array import NDimArray
from typing import List, Dict, Any, Callable, Sequence

from . import curvature
from .exceptions import DimensionMismatch
from .indices import Tensor

logger = logging.getLogger(__name__)


class RiemannianMetric:
    """
    Represents a (pseudo-)Riemannian metric on an n-dimensional coordinate basis.

    Curvature quantities are computed on first use and cached on the instance,
    each one reusing the cached quantities it is built from.

    Attributes:
        coords: tuple of sympy Symbols for local coordinates.
        g: ImmutableMatrix representing the metric (0,2)-tensor.
        invg: inverse metric, computed on first access.
    """
    def __init__(self, coords: Sequence[sp.Symbol], metric_matrix: Any, simplify: bool = True):
        self.coords = curvature.validate_basis(coords)
        g = curvature.validate_metric(metric_matrix, self.coords)
        self.g = ImmutableMatrix(g.applyfunc(sp.simplify)) if simplify else g
        self.simplify = simplify
        # Initialize cache for computed tensors
        self._cache: Dict[str, Any] = {}

    @property
    def dim(self) -> int:
        return len(self.coords)

    @property
    def invg(self) -> ImmutableMatrix:
        return self.get_cached('inverse', lambda: curvature.inverse_metric(self.g, simplify=self.simplify))

    def clear_cache(self) -> None:
        """
        Clear all cached computations (inverse, Christoffel, Riemann, Ricci, ...).
        """
        self._cache.clear()

    def get_cached(self, key: str, compute_fn: Callable[[], Any]) -> Any:
        """
        Retrieve a value from cache by key, or compute and cache it if missing.
        """
        if key not in self._cache:
            logger.debug("Computing %s for %r", key, self)
            self._cache[key] = compute_fn()
        return self._cache[key]

    def as_tensor(self, first: str = 'a', second: str = 'b') -> Tensor:
        """
        The metric as a Tensor with signature _first _second.
        """
        return Tensor(self.g, [(first, 'lower'), (second, 'lower')])

    def christoffel_symbols(self) -> NDimArray:
        """
        Compute or fetch cached Christoffel symbols Γ^k_{ij}, indexed [k, i, j].
        """
        return self.get_cached('Gamma', lambda: curvature.christoffel_symbols(
            self.g, self.coords, simplify=self.simplify))

    def riemann_tensor(self, lowered: bool = False) -> NDimArray:
        """
        Compute or fetch cached Riemann tensor R^i_{jkl}, or R_{ijkl} when lowered.
        """
        riemann = self.get_cached('Riemann', lambda: curvature.riemann_tensor(
            self.g, self.coords, simplify=self.simplify, christoffel=self.christoffel_symbols()))
        if not lowered:
            return riemann
        return self.get_cached('RiemannLower', lambda: curvature.lower_riemann(
            riemann, self.g, simplify=self.simplify))

    def ricci_tensor(self) -> NDimArray:
        """
        Compute or fetch cached Ricci tensor Ric_{ij} via contraction.
        """
        return self.get_cached('Ricci', lambda: curvature.ricci_tensor(
            self.g, self.coords, simplify=self.simplify, riemann=self.riemann_tensor()))

    def scalar_curvature(self) -> Expr:
        """
        Compute or fetch cached scalar curvature R.
        """
        return self.get_cached('Scalar', lambda: curvature.ricci_scalar(
            self.g, self.coords, simplify=self.simplify, ricci=self.ricci_tensor()))

    def einstein_tensor(self) -> NDimArray:
        return self.get_cached('Einstein', lambda: curvature.einstein_tensor(
            self.g, self.coords, simplify=self.simplify,
            ricci=self.ricci_tensor(), scalar=self.scalar_curvature()))

    def weyl_tensor(self) -> NDimArray:
        """
        Compute or fetch cached Weyl tensor C_{ijkl}; needs dim >= 3.
        """
        return self.get_cached('Weyl', lambda: curvature.weyl_tensor(
            self.g, self.coords, simplify=self.simplify, riemann=self.riemann_tensor(),
            ricci=self.ricci_tensor(), scalar=self.scalar_curvature()))

    def to_latex(self) -> str:
        """
        Export the metric matrix to a LaTeX bmatrix.
        """
        return latex(self.g)

    def to_latex_all(self) -> str:
        """
        Export metric, Christoffel, Riemann, Ricci, scalar, Einstein (and Weyl) as LaTeX.
        """
        from .latex_exporter import LaTeXExporter

        sections: List[str] = [r"\textbf{Metric:}", self.to_latex()]
        sections.append(r"\textbf{Christoffel:}")
        sections.append(LaTeXExporter.christoffel(self))
        sections.append(r"\textbf{Riemann:}")
        sections.append(LaTeXExporter.riemann_tensor(self))
        sections.append(r"\textbf{Ricci:}")
        sections.append(LaTeXExporter.ricci_tensor(self))
        sections.append(r"\textbf{Scalar:}")
        sections.append(LaTeXExporter.scalar_curvature(self))
        sections.append(r"\textbf{Einstein:}")
        sections.append(LaTeXExporter.einstein_tensor(self))
        if self.dim >= 3:
            sections.append(r"\textbf{Weyl:}")
            sections.append(LaTeXExporter.weyl_tensor(self))
        return "\n".join(s for s in sections if s)

    def pullback(self, mapping: Dict[sp.Symbol, Expr], new_coords: Sequence[sp.Symbol]) -> 'RiemannianMetric':
        """
        Pull the metric back along old_coord -> expression(new_coords).

        g'_{ab} = J^i_a J^j_b g_{ij}(x(y)) with J^i_a = ∂x^i/∂y^a.
        """
        if set(mapping) != set(self.coords):
            raise DimensionMismatch(
                "Mapping must give every old coordinate in terms of the new ones.",
                expected=self.dim, got=len(mapping),
            )
        g_sub = Matrix(self.g).subs({old: mapping[old] for old in self.coords}, simultaneous=True)
        J = Matrix([
            [sp.diff(mapping[old], new) for new in new_coords]
            for old in self.coords
        ])
        g_pulled = J.T * g_sub * J
        if self.simplify:
            g_pulled = g_pulled.applyfunc(sp.simplify)
        return RiemannianMetric(new_coords, g_pulled, simplify=self.simplify)

    def __repr__(self) -> str:
        return f"<RiemannianMetric dim={self.dim} coords={list(self.coords)}>"

# End of riemannian_metric.py
