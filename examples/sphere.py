"""
Demo script for symbolic_curvature.
Covers: Christoffel symbols, curvature of S² and of the Schwarzschild
metric, the covariant derivative with automatic index contraction, and
LaTeX export.
"""
import logging
import sympy as sp

from symbolic_curvature import (
    LaTeXExporter,
    LeviCivitaConnection,
    RiemannianMetric,
    Tensor,
    covariant_derivative,
)
from symbolic_curvature.tensor_algebra import is_zero_array


def sphere_demo():
    print("\n1. Round sphere of radius a")
    print("----------------------------------------")
    theta, phi = sp.symbols('theta phi', positive=True)
    a = sp.Symbol('a', positive=True)
    S2 = RiemannianMetric([theta, phi], sp.diag(a**2, a**2 * sp.sin(theta)**2))
    print(LaTeXExporter.christoffel(S2))
    print(LaTeXExporter.ricci_tensor(S2))
    print(LaTeXExporter.scalar_curvature(S2))

    conn = LeviCivitaConnection(S2)
    print("metric compatible:", conn.is_metric_compatible())
    eqs, _ = conn.geodesic_equations()
    for eq in eqs:
        print("  ", eq, "= 0")

    # ∇^mu ∇_mu h is the Laplace-Beltrami operator
    h = sp.Function('h')(theta, phi)
    grad = conn.covariant_derivative('mu', Tensor(h))
    laplacian = conn.covariant_derivative('-mu', grad)
    print("Laplacian:", laplacian.components)


def schwarzschild_demo():
    print("\n2. Schwarzschild")
    print("----------------------------------------")
    t, r, theta, phi = sp.symbols('t r theta phi', positive=True)
    M = sp.Symbol('M', positive=True)
    f = 1 - 2*M/r
    g = sp.diag(-f, 1/f, r**2, r**2 * sp.sin(theta)**2)
    BH = RiemannianMetric([t, r, theta, phi], g)
    print("Ricci scalar:", BH.scalar_curvature())
    print("Ricci tensor vanishes:", is_zero_array(BH.ricci_tensor()))
    print(LaTeXExporter.weyl_tensor(BH))

    # divergence of a radial vector field, ∇_mu V^mu
    V = Tensor([0, sp.Function('V')(r), 0, 0], '^mu')
    div = covariant_derivative('mu', V, BH.g, BH.coords)
    print("div V =", div.components)


def main():
    logging.basicConfig(level=logging.INFO)
    sphere_demo()
    schwarzschild_demo()


if __name__ == "__main__":
    main()
