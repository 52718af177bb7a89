"""
Index signatures and tensor values.

A Tensor pairs a symbolic component array with an explicit signature: the
ordered list of its slots, each a label and a variance. Labels shared by two
slots denote an implicit (Einstein) sum, which the covariant derivative
engine contracts away.
"""
from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple, Union

import sympy as sp
from sympy import Expr, MatrixBase
from sympy.tensor.array import NDimArray

from .exceptions import (
    AmbiguousContraction,
    DimensionMismatch,
    InvalidIndexLabel,
    UnsupportedTensorStructure,
)
from .tensor_algebra import as_array, rank


class Variance(Enum):
    UPPER = "upper"
    LOWER = "lower"

    @classmethod
    def parse(cls, value: Any) -> Variance:
        """
        Read a variance from the enum, a name or a ``^``/``_`` marker.
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower() if isinstance(value, str) else None
        if key in _VARIANCE_ALIASES:
            return _VARIANCE_ALIASES[key]
        raise InvalidIndexLabel(f"Cannot determine variance from {value!r}.", label=value)

    @property
    def opposite(self) -> Variance:
        return Variance.LOWER if self is Variance.UPPER else Variance.UPPER

    @property
    def marker(self) -> str:
        return "^" if self is Variance.UPPER else "_"


_VARIANCE_ALIASES: Dict[str, Variance] = {
    "upper": Variance.UPPER, "^": Variance.UPPER, "contravariant": Variance.UPPER, "up": Variance.UPPER,
    "lower": Variance.LOWER, "_": Variance.LOWER, "covariant": Variance.LOWER, "down": Variance.LOWER,
}


def normalize_label(label: Any) -> str:
    """
    Labels are compared by name: symbols and strings are interchangeable.
    """
    if isinstance(label, sp.Symbol):
        return label.name
    if isinstance(label, str) and label.strip() and not label.strip().startswith(("-", "^", "_")):
        return label.strip()
    raise InvalidIndexLabel(f"Invalid index label {label!r}.", label=label)


class IndexSlot(NamedTuple):
    label: str
    variance: Variance

    @classmethod
    def make(cls, label: Any, variance: Any) -> IndexSlot:
        return cls(normalize_label(label), Variance.parse(variance))

    @classmethod
    def parse(cls, token: Any) -> IndexSlot:
        """
        Accept an IndexSlot, a ``(label, variance)`` pair or a string such as
        ``"^mu"`` / ``"_nu"``.
        """
        if isinstance(token, IndexSlot):
            return token
        if isinstance(token, tuple) and len(token) == 2:
            return cls.make(*token)
        if isinstance(token, str) and len(token.strip()) > 1 and token.strip()[0] in "^_":
            text = token.strip()
            return cls.make(text[1:], text[0])
        raise InvalidIndexLabel(f"Cannot determine variance of index slot {token!r}.", label=token)

    def __str__(self) -> str:
        return f"{self.variance.marker}{self.label}"


class IndexSignature(tuple):
    """
    Ordered, immutable sequence of IndexSlots.
    """
    def __new__(cls, slots: Iterable[Any] = ()):
        if isinstance(slots, str):
            slots = slots.split()
        return super().__new__(cls, (IndexSlot.parse(s) for s in slots))

    @property
    def rank(self) -> int:
        return len(self)

    @property
    def labels(self) -> List[str]:
        return [slot.label for slot in self]

    def prepend(self, slot: IndexSlot) -> IndexSignature:
        return IndexSignature((slot,) + tuple(self))

    def replace(self, position: int, slot: IndexSlot) -> IndexSignature:
        slots = list(self)
        slots[position] = slot
        return IndexSignature(slots)

    def without(self, *positions: int) -> IndexSignature:
        return IndexSignature(s for i, s in enumerate(self) if i not in positions)

    def repeated_pairs(self) -> List[Tuple[int, int]]:
        """
        Positions of every label that occurs twice, in order of first use.

        Raises:
            AmbiguousContraction: a label occurs three or more times.
        """
        counts = Counter(self.labels)
        for label, count in counts.items():
            if count > 2:
                raise AmbiguousContraction(
                    f"Index label '{label}' occurs {count} times; at most two are allowed.",
                    label=label, count=count,
                )
        pairs: List[Tuple[int, int]] = []
        for label in dict.fromkeys(self.labels):
            if counts[label] == 2:
                first = self.labels.index(label)
                second = self.labels.index(label, first + 1)
                pairs.append((first, second))
        return pairs

    def __str__(self) -> str:
        return " ".join(str(s) for s in self)

    def __repr__(self) -> str:
        return f"IndexSignature('{self}')"


class Tensor:
    """
    Symbolic tensor value: component array plus explicit index signature.

    Attributes:
        components: ImmutableDenseNDimArray of rank k, or a bare sympy
            expression when k = 0.
        signature: IndexSignature with k slots.
    """
    __slots__ = ("components", "signature")

    def __init__(self, components: Any, signature: Union[IndexSignature, str, Iterable[Any]] = ()):
        if not isinstance(components, (NDimArray, MatrixBase, list, tuple, Expr, int, float)):
            raise UnsupportedTensorStructure(
                f"Cannot read tensor components of type {type(components).__name__}.", value=components)
        try:
            array = as_array(components)
        except (TypeError, ValueError, sp.SympifyError) as exc:
            raise UnsupportedTensorStructure(f"Cannot read tensor components: {exc}", value=components) from exc
        signature = signature if isinstance(signature, IndexSignature) else IndexSignature(signature)
        if rank(array) != signature.rank:
            raise DimensionMismatch(
                f"Tensor of rank {rank(array)} given a signature with {signature.rank} slots ({signature}).",
                expected=signature.rank, got=rank(array),
            )
        if isinstance(array, NDimArray) and len(set(array.shape)) > 1:
            raise UnsupportedTensorStructure(
                f"Tensor axes must share one dimension, got shape {array.shape}.", value=array.shape)
        object.__setattr__(self, "components", array)
        object.__setattr__(self, "signature", signature)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Tensor values are immutable.")

    @property
    def rank(self) -> int:
        return self.signature.rank

    @property
    def dimension(self) -> Optional[int]:
        """
        Common axis length, or None for a scalar.
        """
        if isinstance(self.components, NDimArray):
            return self.components.shape[0]
        return None

    @property
    def labels(self) -> List[str]:
        return self.signature.labels

    def __iter__(self) -> Iterator[Any]:
        yield self.components
        yield self.signature

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.signature == other.signature and self.components == other.components

    def __hash__(self) -> int:
        return hash((self.components, tuple(self.signature)))

    def __repr__(self) -> str:
        return f"<Tensor rank={self.rank} signature='{self.signature}'>"

# End of indices.py
