from sympy import Expr, latex as sympy_latex
from typing import Any, List, Optional, Sequence

from .indices import Tensor, Variance
from .tensor_algebra import iter_components


def _write(text: str, filename: Optional[str]) -> str:
    if filename is not None:
        with open(filename, 'w') as f:
            f.write(text)
    return text


def _coordinate_names(coords: Sequence[Any]) -> List[str]:
    return [sympy_latex(c) for c in coords]


def _christoffel_of(source: Any):
    if hasattr(source, 'christoffel_symbols'):
        return source.christoffel_symbols()
    return source.Gamma


class LaTeXExporter:
    """
    Consolidate LaTeX export for the results of symbolic_curvature.

    Every method returns the LaTeX text and also writes it to ``filename``
    when one is given. Component listings skip zero components and label
    indices by coordinate name.

    Methods:
      - metric            : metric matrix g_{ij}
      - christoffel       : Christoffel symbols Γ^k_{ij}
      - riemann_tensor    : Riemann components R^i_{jkl}
      - ricci_tensor      : Ricci components R_{ij}
      - scalar_curvature  : Ricci scalar
      - einstein_tensor   : Einstein components G_{ij}
      - weyl_tensor       : Weyl components C_{ijkl}
      - tensor            : any Tensor, indices placed by its signature
      - geodesics         : geodesic equations
      - general           : any sympy Expr
    """

    @staticmethod
    def components(array: Any, coords: Sequence[Any], symbol: str, upper: int = 0,
                   filename: Optional[str] = None) -> str:
        """
        One line per nonzero component; the first ``upper`` indices are superscripts.
        """
        names = _coordinate_names(coords)
        lines: List[str] = []
        for index, expr in iter_components(array):
            if expr == 0:
                continue
            sup = "".join(names[i] for i in index[:upper])
            sub = "".join(names[i] for i in index[upper:])
            head = symbol
            if sup:
                head += f"^{{{sup}}}"
            if sub:
                head += f"_{{{sub}}}"
            lines.append(rf"{head} = {sympy_latex(expr)} \\")
        return _write("\n".join(lines), filename)

    @staticmethod
    def metric(metric: Any, filename: Optional[str] = None) -> str:
        """
        Export a metric matrix g_{ij} as display math.
        """
        return _write(rf"\[{sympy_latex(metric.g)}\]", filename)

    @staticmethod
    def christoffel(source: Any, filename: Optional[str] = None) -> str:
        """
        Export nonzero Christoffel symbols Γ^k_{ij} of a metric or connection.
        """
        return LaTeXExporter.components(_christoffel_of(source), source.coords, r"\Gamma", 1, filename)

    @staticmethod
    def riemann_tensor(metric: Any, filename: Optional[str] = None) -> str:
        return LaTeXExporter.components(metric.riemann_tensor(), metric.coords, "R", 1, filename)

    @staticmethod
    def ricci_tensor(metric: Any, filename: Optional[str] = None) -> str:
        return LaTeXExporter.components(metric.ricci_tensor(), metric.coords, "R", 0, filename)

    @staticmethod
    def scalar_curvature(metric: Any, filename: Optional[str] = None) -> str:
        return _write(rf"R = {sympy_latex(metric.scalar_curvature())}", filename)

    @staticmethod
    def einstein_tensor(metric: Any, filename: Optional[str] = None) -> str:
        return LaTeXExporter.components(metric.einstein_tensor(), metric.coords, "G", 0, filename)

    @staticmethod
    def weyl_tensor(metric: Any, filename: Optional[str] = None) -> str:
        return LaTeXExporter.components(metric.weyl_tensor(), metric.coords, "C", 0, filename)

    @staticmethod
    def tensor(tensor: Tensor, coords: Sequence[Any], symbol: str = "T",
               filename: Optional[str] = None) -> str:
        """
        Export a Tensor, staggering super- and subscripts in signature order.

        A scalar is written as ``symbol = value``.
        """
        if tensor.rank == 0:
            return _write(rf"{symbol} = {sympy_latex(tensor.components)}", filename)
        names = _coordinate_names(coords)
        lines: List[str] = []
        for index, expr in iter_components(tensor.components):
            if expr == 0:
                continue
            head = symbol
            for slot, i in zip(tensor.signature, index):
                marker = "^" if slot.variance is Variance.UPPER else "_"
                head += f"{{}}{marker}{{{names[i]}}}"
            lines.append(rf"{head} = {sympy_latex(expr)} \\")
        return _write("\n".join(lines), filename)

    @staticmethod
    def geodesics(connection: Any, filename: Optional[str] = None) -> str:
        """
        Export geodesic equations x''^i + Γ^i_{jk} x'^j x'^k = 0.
        """
        eqs, funcs = connection.geodesic_equations()
        lines = [rf"{sympy_latex(eq)} = 0 \\" for eq in eqs]
        return _write("\n".join(lines), filename)

    @staticmethod
    def general(expr: Expr, filename: Optional[str] = None) -> str:
        """
        Export any sympy expression to LaTeX.
        """
        return _write(rf"\[{sympy_latex(expr)}\]", filename)

# End of latex_exporter.py
