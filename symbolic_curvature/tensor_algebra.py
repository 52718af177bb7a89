"""
Axis bookkeeping for symbolic N-dimensional arrays.

Every curvature pipeline rearranges index order through these helpers
instead of looping over components, so one permutation, one tensor product
or one contraction stands in for a nested sum.
"""
import itertools
from typing import Any, Callable, Iterator, List, Sequence, Tuple, Union

import sympy as sp
from sympy import Expr, ImmutableDenseNDimArray, MatrixBase
from sympy import derive_by_array, permutedims, tensorcontraction, tensorproduct
from sympy.tensor.array import NDimArray

ArrayLike = Union[NDimArray, Expr]


def as_array(obj: Any) -> ArrayLike:
    """
    Normalize matrices, nested lists and arrays to an immutable N-dim array.

    Scalars are sympified and returned unchanged, since a rank-0 tensor is
    carried as a bare expression.
    """
    if isinstance(obj, ImmutableDenseNDimArray):
        return obj
    if isinstance(obj, (NDimArray, MatrixBase, list, tuple)):
        return ImmutableDenseNDimArray(obj)
    return sp.sympify(obj)


def rank(array: ArrayLike) -> int:
    return array.rank() if isinstance(array, NDimArray) else 0


def cyclic_permutation(i: int, total_rank: int) -> List[int]:
    """
    Axis order that rotates the prefix of length ``i`` by one step.

    Axis ``i - 1`` becomes axis 0, axes ``0 .. i - 2`` shift right by one and
    the axes past the prefix keep their place. Fed to ``permutedims`` the
    result moves a trailing slot of the prefix to the canonical front slot.
    """
    if not 1 <= i <= total_rank:
        raise ValueError(f"Prefix length {i} out of range for rank {total_rank}.")
    return [i - 1] + list(range(i - 1)) + list(range(i, total_rank))


def rotate_axes(array: NDimArray, i: int, inverse: bool = False) -> NDimArray:
    """
    Apply ``cyclic_permutation(i, rank)`` as one structural rearrangement.

    With ``inverse=True`` the rotation is undone: axis 0 goes back to
    position ``i - 1`` and axes ``1 .. i - 1`` shift left by one.
    """
    order = cyclic_permutation(i, array.rank())
    if inverse:
        order = [order.index(k) for k in range(len(order))]
    if order == sorted(order):
        return array
    return permutedims(array, order)


def move_axis(array: NDimArray, source: int, destination: int) -> NDimArray:
    """
    Move one axis to a new position, keeping the relative order of the rest.

    The axis is rotated to the front of the prefix ending at ``source`` and
    then rotated back out of the prefix ending at ``destination``.
    """
    r = array.rank()
    if not (0 <= source < r and 0 <= destination < r):
        raise ValueError(f"Cannot move axis {source} to {destination} in a rank {r} array.")
    if source == destination:
        return array
    return rotate_axes(rotate_axes(array, source + 1), destination + 1, inverse=True)


def swap_axes(array: NDimArray, i: int, j: int) -> NDimArray:
    order = list(range(array.rank()))
    order[i], order[j] = order[j], order[i]
    return permutedims(array, order)


def outer(*arrays: ArrayLike) -> ArrayLike:
    return tensorproduct(*arrays)


def contract(array: NDimArray, *pairs: Tuple[int, int]) -> ArrayLike:
    """
    Sum over each pair of axes; returns a scalar once every axis is consumed.
    """
    result = tensorcontraction(array, *pairs)
    if isinstance(result, NDimArray) and result.rank() == 0:
        return result[()]
    return result


def antisymmetrize(array: NDimArray, i: int, j: int) -> NDimArray:
    """
    A_{..[i..j]..} = (A - A with axes i and j exchanged) / 2.
    """
    return (array - swap_axes(array, i, j)) * sp.Rational(1, 2)


def partial_derivatives(array: ArrayLike, coords: Sequence[sp.Symbol]) -> NDimArray:
    """
    Derivative with respect to every coordinate; the new axis comes first.
    """
    return derive_by_array(array, list(coords))


def iter_components(array: ArrayLike) -> Iterator[Tuple[Tuple[int, ...], Expr]]:
    """
    Yield ``(index, value)`` for every component, row-major.
    """
    if not isinstance(array, NDimArray):
        yield (), array
        return
    for index in itertools.product(*(range(d) for d in array.shape)):
        yield index, array[index]


def simplify_array(array: ArrayLike, simplifier: Callable[[Expr], Expr] = sp.simplify) -> ArrayLike:
    if isinstance(array, NDimArray):
        return array.applyfunc(simplifier)
    return simplifier(array)


def is_zero_array(array: ArrayLike, simplifier: Callable[[Expr], Expr] = sp.simplify) -> bool:
    return all(simplifier(value) == 0 for _, value in iter_components(array))

# End of tensor_algebra.py
