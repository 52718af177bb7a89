import logging

import pytest
import sympy as sp

from symbolic_curvature import clear_christoffel_cache

t, x, y, z = sp.symbols("t x y z", real=True)
r, theta, phi, chi = sp.symbols("r theta phi chi", positive=True)
M, a = sp.symbols("M a", positive=True)


def pytest_configure(config):
    logging.getLogger("symbolic_curvature").setLevel(logging.DEBUG)


@pytest.fixture(autouse=True)
def fresh_christoffel_cache():
    clear_christoffel_cache()
    yield
    clear_christoffel_cache()


@pytest.fixture
def minkowski():
    return sp.diag(-1, 1, 1, 1), [t, x, y, z]


@pytest.fixture
def polar_plane():
    return sp.diag(1, r**2), [r, theta]


@pytest.fixture
def sphere():
    return sp.diag(a**2, a**2 * sp.sin(theta) ** 2), [theta, phi]


@pytest.fixture
def three_sphere():
    return sp.diag(1, sp.sin(chi) ** 2, sp.sin(chi) ** 2 * sp.sin(theta) ** 2), [chi, theta, phi]


@pytest.fixture
def schwarzschild():
    f = 1 - 2 * M / r
    return sp.diag(-f, 1 / f, r**2, r**2 * sp.sin(theta) ** 2), [t, r, theta, phi]


@pytest.fixture
def ads3():
    L = 1
    f = r**2 / L**2 + 1
    return sp.diag(-f, 1 / f, r**2), [t, r, phi]


@pytest.fixture
def flat_frw():
    s = sp.Function("s")(t)
    return sp.diag(-1, s**2, s**2, s**2), [t, x, y, z]
