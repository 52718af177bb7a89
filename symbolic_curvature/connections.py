import logging
import sympy as sp
from sympy import Expr, Function, Symbol
from sympy.tensor.array import NDimArray
from typing import Any, List, Optional, Tuple

from .covariant_derivative import covariant_derivative
from .exceptions import DimensionMismatch
from .indices import Tensor
from .riemannian_metric import RiemannianMetric
from .tensor_algebra import is_zero_array, swap_axes

logger = logging.getLogger(__name__)


class Connection:
    """
    Base class for affine connections given by their coefficients Gamma[i, j, k] = Γ^i_{jk}.
    """
    def __init__(self, coords):
        self.coords = tuple(coords)
        self.dim = len(self.coords)

    @property
    def Gamma(self) -> NDimArray:
        raise NotImplementedError

    def parallel_transport_equations(
        self,
        curve_funcs: List[Expr],
        vec_funcs: List[Expr],
        t: Optional[Symbol] = None
    ) -> List[Expr]:
        """
        Symbolic ODEs for parallel transport along a curve x^j(t):

            dV^i/dt + Γ^i_{jk} dx^j/dt V^k = 0

        Returns the left-hand sides with the coordinates replaced by the curve.
        """
        if t is None:
            t = sp.Symbol('t')
        if len(curve_funcs) != self.dim or len(vec_funcs) != self.dim:
            got = len(curve_funcs) if len(curve_funcs) != self.dim else len(vec_funcs)
            raise DimensionMismatch(f"Curve and vector need {self.dim} components each.", expected=self.dim, got=got)
        logger.debug("Parallel transport equations along %s", curve_funcs)
        on_curve = dict(zip(self.coords, curve_funcs))
        eqs: List[Expr] = []
        for i in range(self.dim):
            expr_i = sp.diff(vec_funcs[i], t)
            for j in range(self.dim):
                for k in range(self.dim):
                    gamma_ijk = self.Gamma[i, j, k]
                    if gamma_ijk != 0:
                        expr_i += gamma_ijk.subs(on_curve, simultaneous=True) * sp.diff(curve_funcs[j], t) * vec_funcs[k]
            eqs.append(expr_i)
        return eqs

    def geodesic_equations(self, t: Optional[Symbol] = None) -> Tuple[List[Expr], List[Function]]:
        """
        Returns the geodesic ODEs x''^i + Γ^i_{jk} x'^j x'^k = 0 and the functions [x^0(t), ...].
        """
        if t is None:
            t = sp.Symbol('t')
        funcs = [sp.Function(str(c))(t) for c in self.coords]
        logger.debug("Geodesic equations in %d dimensions", self.dim)
        on_curve = dict(zip(self.coords, funcs))
        eqs: List[Expr] = []
        for i in range(self.dim):
            term = sum(self.Gamma[i, j, k].subs(on_curve, simultaneous=True) * sp.diff(funcs[j], t) * sp.diff(funcs[k], t)
                       for j in range(self.dim) for k in range(self.dim))
            eqs.append(sp.simplify(sp.diff(funcs[i], t, 2) + term))
        return eqs, funcs

    def is_torsion_free(self) -> bool:
        """
        Γ^i_{jk} = Γ^i_{kj}.
        """
        return is_zero_array(self.Gamma - swap_axes(self.Gamma, 1, 2))


class LeviCivitaConnection(Connection):
    """
    Metric-compatible, torsion-free connection derived from a RiemannianMetric.
    """
    def __init__(self, metric: RiemannianMetric):
        super().__init__(metric.coords)
        self.metric = metric

    @property
    def Gamma(self) -> NDimArray:
        """ Christoffel symbols Γ^i_{jk}. """
        return self.metric.christoffel_symbols()

    def covariant_derivative(self, variable: Any, tensor: Tensor, simplify: Optional[bool] = None) -> Tensor:
        """
        ∇_variable tensor; ``-variable`` raises the derivative slot.
        """
        if simplify is None:
            simplify = self.metric.simplify
        return covariant_derivative(variable, tensor, self.metric.g, self.coords,
                                    simplify=simplify, christoffel=self.Gamma)

    def is_metric_compatible(self) -> bool:
        """
        ∇_c g_{ab} = 0 componentwise.
        """
        nabla_g = self.covariant_derivative('c', self.metric.as_tensor('a', 'b'))
        return is_zero_array(nabla_g.components)


# ---------------- Metric Connection Alias ----------------
MetricConnection = LeviCivitaConnection

# End of connections.py
