import pytest
import sympy as sp
from sympy import ImmutableDenseNDimArray

from symbolic_curvature import (
    AmbiguousContraction,
    DimensionMismatch,
    IndexSignature,
    InvalidIndexLabel,
    Tensor,
    UnsupportedTensorStructure,
    Variance,
    christoffel_symbols,
    contract_repeated,
    covariant_derivative,
    lower_index,
    raise_index,
)
from symbolic_curvature.covariant_derivative import parse_derivative_variable
from symbolic_curvature.tensor_algebra import is_zero_array, simplify_array

mu, nu = sp.symbols("mu nu")
r, theta = sp.symbols("r theta", positive=True)
f = sp.Function("f")(r, theta)
Vr = sp.Function("Vr")(r, theta)
Vt = sp.Function("Vt")(r, theta)


# ---------------- Derivative variable ---------------- #
@pytest.mark.parametrize(
    "token,label,variance",
    [
        (mu, "mu", Variance.LOWER),
        (-mu, "mu", Variance.UPPER),
        ("nu", "nu", Variance.LOWER),
        ("-nu", "nu", Variance.UPPER),
        (" - nu ", "nu", Variance.UPPER),
    ],
)
def test_parse_derivative_variable(token, label, variance):
    slot = parse_derivative_variable(token)
    assert slot.label == label
    assert slot.variance is variance


@pytest.mark.parametrize("token", [2 * mu, mu + nu, sp.Integer(3), "", "-", "^mu"])
def test_parse_derivative_variable_rejects(token):
    with pytest.raises(InvalidIndexLabel):
        parse_derivative_variable(token)


# ---------------- Metric compatibility ---------------- #
@pytest.mark.parametrize("name", ["polar_plane", "sphere", "three_sphere", "schwarzschild", "ads3"])
def test_metric_is_covariantly_constant(name, request):
    g, coords = request.getfixturevalue(name)
    nabla_g = covariant_derivative(mu, Tensor(g, "_a _b"), g, coords)
    assert nabla_g.signature == IndexSignature("_mu _a _b")
    assert nabla_g.components.shape == (len(coords),) * 3
    assert is_zero_array(nabla_g.components)


def test_inverse_metric_is_covariantly_constant(sphere):
    g, coords = sphere
    ginv = sp.Matrix(g).inv()
    nabla = covariant_derivative(mu, Tensor(ginv, "^a ^b"), g, coords)
    assert is_zero_array(nabla.components)


def test_kronecker_delta_is_covariantly_constant(schwarzschild):
    g, coords = schwarzschild
    nabla = covariant_derivative(mu, Tensor(sp.eye(4), "^a _b"), g, coords)
    assert is_zero_array(nabla.components)


# ---------------- Scalars and vectors ---------------- #
def test_scalar_derivative_is_partial_derivative(polar_plane):
    g, coords = polar_plane
    grad = covariant_derivative(mu, Tensor(f), g, coords)
    assert grad.signature == IndexSignature("_mu")
    assert list(grad.components) == [sp.diff(f, r), sp.diff(f, theta)]


def test_raised_scalar_derivative(polar_plane):
    g, coords = polar_plane
    grad = covariant_derivative(-mu, Tensor(f), g, coords)
    assert grad.signature == IndexSignature("^mu")
    assert sp.simplify(grad.components[1] - sp.diff(f, theta) / r**2) == 0


def test_vector_derivative_components(polar_plane):
    g, coords = polar_plane
    nabla = covariant_derivative(mu, Tensor([Vr, Vt], "^a"), g, coords)
    assert nabla.signature == IndexSignature("_mu ^a")
    # nabla_theta V^r = d_theta V^r - r V^theta
    assert sp.simplify(nabla.components[1, 0] - (sp.diff(Vr, theta) - r * Vt)) == 0
    # nabla_r V^theta = d_r V^theta + V^theta / r
    assert sp.simplify(nabla.components[0, 1] - (sp.diff(Vt, r) + Vt / r)) == 0


def divergence_in_polar():
    return sp.diff(r * Vr, r) / r + sp.diff(Vt, theta)


def test_repeated_label_gives_divergence(polar_plane):
    g, coords = polar_plane
    div = covariant_derivative(mu, Tensor([Vr, Vt], "^mu"), g, coords)
    assert div.rank == 0
    assert div.signature == IndexSignature()
    assert sp.simplify(div.components - divergence_in_polar()) == 0


def test_raised_derivative_contracts_with_lower_slot(polar_plane):
    g, coords = polar_plane
    lowered = [Vr, r**2 * Vt]
    div = covariant_derivative(-mu, Tensor(lowered, "_mu"), g, coords)
    assert div.rank == 0
    assert sp.simplify(div.components - divergence_in_polar()) == 0


def test_same_variance_pair_is_traced_through_metric(polar_plane):
    g, coords = polar_plane
    lowered = [Vr, r**2 * Vt]
    div = covariant_derivative(mu, Tensor(lowered, "_mu"), g, coords)
    assert div.rank == 0
    assert sp.simplify(div.components - divergence_in_polar()) == 0


def test_laplacian(polar_plane):
    g, coords = polar_plane
    grad = covariant_derivative(mu, Tensor(f), g, coords)
    laplacian = covariant_derivative(-mu, grad, g, coords)
    expected = sp.diff(f, r, 2) + sp.diff(f, r) / r + sp.diff(f, theta, 2) / r**2
    assert sp.simplify(laplacian.components - expected) == 0


def test_second_derivative_of_scalar_is_symmetric(sphere):
    g, coords = sphere
    h = sp.Function("h")(*coords)
    hessian = covariant_derivative(nu, covariant_derivative(mu, Tensor(h), g, coords), g, coords)
    assert hessian.signature == IndexSignature("_nu _mu")
    assert sp.simplify(hessian.components[0, 1] - hessian.components[1, 0]) == 0


def test_mixed_tensor_matches_component_sum(three_sphere):
    g, coords = three_sphere
    n = len(coords)
    T = ImmutableDenseNDimArray(
        [[[sp.Function(f"T{i}{j}{k}")(*coords) for k in range(n)] for j in range(n)] for i in range(n)]
    )
    nabla = covariant_derivative(mu, Tensor(T, "_a ^b _d"), g, coords)
    assert nabla.signature == IndexSignature("_mu _a ^b _d")
    gamma = christoffel_symbols(g, coords)
    for c in range(n):
        for i in range(n):
            for j in range(n):
                for k in range(n):
                    expected = sp.diff(T[i, j, k], coords[c]) + sum(
                        gamma[j, c, l] * T[i, l, k]
                        - gamma[l, c, i] * T[l, j, k]
                        - gamma[l, c, k] * T[i, j, l]
                        for l in range(n)
                    )
                    assert sp.simplify(nabla.components[c, i, j, k] - expected) == 0


def test_dummy_pair_inside_tensor_is_traced(polar_plane):
    g, coords = polar_plane
    T = Tensor(sp.Matrix([[r, 0], [0, r]]), "^a _a")
    nabla = covariant_derivative(mu, T, g, coords)
    assert nabla.signature == IndexSignature("_mu")
    # trace is 2r, its gradient (2, 0)
    assert list(nabla.components) == [2, 0]


def test_result_without_simplification(polar_plane):
    g, coords = polar_plane
    nabla = covariant_derivative(mu, Tensor(g, "_a _b"), g, coords, simplify=False)
    assert is_zero_array(nabla.components)


# ---------------- Index gymnastics ---------------- #
def test_raise_then_lower_round_trip(sphere):
    g, coords = sphere
    th, ph = coords
    T = Tensor(sp.Matrix([[sp.sin(th), ph], [th * ph, 1]]), "_a ^b")
    raised = raise_index(T, 0, g)
    assert raised.signature == IndexSignature("^a ^b")
    back = lower_index(raised, 0, g)
    assert back.signature == T.signature
    assert is_zero_array(back.components - T.components)


def test_lower_then_raise_round_trip(three_sphere):
    g, coords = three_sphere
    T = Tensor(list(coords), "^a")
    back = raise_index(lower_index(T, 0, g), 0, g)
    assert simplify_array(back.components) == T.components


def test_raise_rejects_upper_slot(sphere):
    g, coords = sphere
    with pytest.raises(InvalidIndexLabel):
        raise_index(Tensor([1, 0], "^a"), 0, g)
    with pytest.raises(InvalidIndexLabel):
        lower_index(Tensor([1, 0], "_a"), 0, g)


def test_contract_repeated_opposite_variance():
    m = ImmutableDenseNDimArray([[1, 2], [3, 4]])
    assert contract_repeated(Tensor(m, "^a _a")).components == 5


def test_contract_repeated_needs_metric_for_equal_variance():
    with pytest.raises(InvalidIndexLabel):
        contract_repeated(Tensor(sp.eye(2), "_a _a"))
    assert contract_repeated(Tensor(sp.eye(2), "_a _a"), sp.diag(1, 4)).components == sp.Rational(5, 4)


# ---------------- Errors ---------------- #
def test_label_used_three_times(polar_plane):
    g, coords = polar_plane
    with pytest.raises(AmbiguousContraction):
        covariant_derivative(mu, Tensor(sp.eye(2), "^mu _mu"), g, coords)


def test_tensor_dimension_must_match_basis(polar_plane):
    g, coords = polar_plane
    with pytest.raises(DimensionMismatch):
        covariant_derivative(mu, Tensor(sp.eye(3), "_a _b"), g, coords)


def test_metric_dimension_must_match_basis(polar_plane):
    _, coords = polar_plane
    with pytest.raises(DimensionMismatch):
        covariant_derivative(mu, Tensor(f), sp.eye(3), coords)


def test_tensor_must_carry_a_signature(polar_plane):
    g, coords = polar_plane
    with pytest.raises(UnsupportedTensorStructure):
        covariant_derivative(mu, sp.eye(2), g, coords)
