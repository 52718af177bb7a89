"""
Covariant derivative of an arbitrary-rank mixed tensor.

    nabla_c T^{a..}_{b..} = d_c T^{a..}_{b..}
                            + sum over upper slots  Gamma^a_{cl} T^{..l..}_{b..}
                            - sum over lower slots  Gamma^l_{cb} T^{a..}_{..l..}

The derivative slot is prepended to the signature. A negated derivative label
raises that slot with the inverse metric, and any label that ends up occurring
twice is traced away, so ``covariant_derivative(-a, V^a)`` is the divergence.
"""
import logging
from typing import Any, Optional, Sequence

import sympy as sp
from sympy import ImmutableMatrix, SympifyError
from sympy.tensor.array import NDimArray

from .curvature import christoffel_symbols, inverse_metric, validate_basis, validate_metric
from .exceptions import DimensionMismatch, InvalidIndexLabel, UnsupportedTensorStructure
from .indices import IndexSlot, Tensor, Variance
from .tensor_algebra import as_array, contract, move_axis, outer, partial_derivatives, simplify_array

logger = logging.getLogger(__name__)


def parse_derivative_variable(variable: Any) -> IndexSlot:
    """
    Read the derivative token: ``mu`` gives a lower slot, ``-mu`` a raised one.

    Accepts an IndexSlot, a sympy Symbol or its negation, or a string with an
    optional leading minus sign.
    """
    if isinstance(variable, IndexSlot):
        return variable
    if isinstance(variable, str):
        text = variable.strip()
        if text.startswith("-"):
            return IndexSlot.make(text[1:].strip(), Variance.UPPER)
        return IndexSlot.make(text, Variance.LOWER)
    try:
        expr = sp.sympify(variable)
    except SympifyError as exc:
        raise InvalidIndexLabel(f"Invalid derivative variable {variable!r}.", label=variable) from exc
    if isinstance(expr, sp.Symbol):
        return IndexSlot.make(expr, Variance.LOWER)
    if isinstance(expr, sp.Expr) and isinstance(-expr, sp.Symbol):
        return IndexSlot.make(-expr, Variance.UPPER)
    raise InvalidIndexLabel(
        f"Derivative variable must be a label or a negated label, got {variable!r}.", label=variable)


def _check_tensor(tensor: Any, n: int) -> Tensor:
    if not isinstance(tensor, Tensor):
        raise UnsupportedTensorStructure(
            f"Expected a Tensor with an index signature, got {type(tensor).__name__}.", value=tensor)
    if tensor.dimension is not None and tensor.dimension != n:
        raise DimensionMismatch(
            f"Tensor axes have length {tensor.dimension} but the coordinate basis has {n} entries.",
            expected=n, got=tensor.dimension,
        )
    return tensor


# ---------------- Index gymnastics ----------------
def raise_index(tensor: Tensor, position: int, metric: Any, inverse: Optional[ImmutableMatrix] = None) -> Tensor:
    """
    T^{..a..} = g^{ab} T_{..b..} for the lower slot at ``position``.
    """
    slot = tensor.signature[position]
    if slot.variance is not Variance.LOWER:
        raise InvalidIndexLabel(f"Slot {position} ({slot}) is already upper.", label=slot.label)
    ginv = inverse if inverse is not None else inverse_metric(ImmutableMatrix(metric))
    components = contract(outer(as_array(ginv), tensor.components), (1, 2 + position))
    components = move_axis(components, 0, position)
    return Tensor(components, tensor.signature.replace(position, IndexSlot(slot.label, slot.variance.opposite)))


def lower_index(tensor: Tensor, position: int, metric: Any) -> Tensor:
    """
    T_{..a..} = g_{ab} T^{..b..} for the upper slot at ``position``.
    """
    slot = tensor.signature[position]
    if slot.variance is not Variance.UPPER:
        raise InvalidIndexLabel(f"Slot {position} ({slot}) is already lower.", label=slot.label)
    g = as_array(ImmutableMatrix(metric))
    components = contract(outer(g, tensor.components), (1, 2 + position))
    components = move_axis(components, 0, position)
    return Tensor(components, tensor.signature.replace(position, IndexSlot(slot.label, slot.variance.opposite)))


def contract_repeated(tensor: Tensor, metric: Any = None, inverse: Optional[ImmutableMatrix] = None) -> Tensor:
    """
    Trace every pair of slots sharing a label (Einstein summation).

    Opposite variances are traced directly. Two lower slots are traced
    through g^{ab}, two upper slots through g_{ab}, which needs ``metric``.

    Raises:
        AmbiguousContraction: a label occurs more than twice.
    """
    pairs = tensor.signature.repeated_pairs()
    while pairs:
        i, j = pairs[0]
        first, second = tensor.signature[i], tensor.signature[j]
        logger.debug("Contracting repeated label '%s' at slots %d and %d", first.label, i, j)
        if first.variance is not second.variance:
            components = contract(tensor.components, (i, j))
        else:
            if metric is None:
                raise InvalidIndexLabel(
                    f"Label '{first.label}' repeats with the same variance; a metric is needed to contract it.",
                    label=first.label,
                )
            if first.variance is Variance.LOWER:
                bridge = inverse if inverse is not None else inverse_metric(ImmutableMatrix(metric))
            else:
                bridge = ImmutableMatrix(metric)
            components = contract(outer(as_array(bridge), tensor.components), (0, 2 + i), (1, 2 + j))
        tensor = Tensor(components, tensor.signature.without(i, j))
        pairs = tensor.signature.repeated_pairs()
    return tensor


# ---------------- Covariant derivative ----------------
def _upper_correction(gamma: NDimArray, components: NDimArray, position: int) -> NDimArray:
    # Gamma^a_{cl} T^{..l..}: [a, c, rest] -> [c, .., a, ..]
    term = contract(outer(gamma, components), (2, 3 + position))
    return move_axis(term, 0, position + 1)


def _lower_correction(gamma: NDimArray, components: NDimArray, position: int) -> NDimArray:
    # Gamma^l_{cb} T_{..l..}: [c, b, rest] -> [c, .., b, ..]
    term = contract(outer(gamma, components), (0, 3 + position))
    return move_axis(term, 1, position + 1)


def covariant_derivative(variable: Any, tensor: Tensor, metric: Any, coords: Sequence[Any],
                         simplify: bool = True, christoffel: Optional[NDimArray] = None) -> Tensor:
    """
    Covariant derivative of ``tensor`` along the derivative label ``variable``.

    Args:
        variable: derivative label; ``mu`` prepends a lower slot, ``-mu`` a
            slot raised with the inverse metric.
        tensor: Tensor value with its index signature.
        metric: n x n metric.
        coords: coordinate basis of length n.
        simplify: simplify every component of the result.
        christoffel: precomputed Christoffel symbols for this metric.

    Returns:
        Tensor whose signature is the input signature with the derivative
        slot prepended, minus every pair of slots sharing a label.

    Raises:
        DimensionMismatch: metric, basis and tensor disagree on n.
        InvalidIndexLabel: the derivative token is not a (negated) label.
        AmbiguousContraction: a label occurs more than twice.
    """
    basis = validate_basis(coords)
    g = validate_metric(metric, basis)
    n = len(basis)
    tensor = _check_tensor(tensor, n)
    slot = parse_derivative_variable(variable)
    signature = tensor.signature.prepend(IndexSlot(slot.label, Variance.LOWER))
    signature.repeated_pairs()

    logger.debug("Covariant derivative along %s of a rank %d tensor (%s)", slot, tensor.rank, tensor.signature)
    gamma = christoffel if christoffel is not None else christoffel_symbols(g, basis, simplify=simplify)
    components = tensor.components

    result = partial_derivatives(components, basis)
    for position, index in enumerate(tensor.signature):
        if index.variance is Variance.UPPER:
            result = result + _upper_correction(gamma, components, position)
        else:
            result = result - _lower_correction(gamma, components, position)

    ginv = None
    derivative = Tensor(result, signature)
    if slot.variance is Variance.UPPER:
        ginv = inverse_metric(g, simplify=simplify)
        derivative = raise_index(derivative, 0, g, inverse=ginv)

    derivative = contract_repeated(derivative, g, inverse=ginv)
    if simplify:
        derivative = Tensor(simplify_array(derivative.components), derivative.signature)
    return derivative

# End of covariant_derivative.py
