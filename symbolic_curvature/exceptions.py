from typing import Any, Optional


class CurvatureError(ValueError):
    """
    Base class for every error raised by symbolic_curvature.
    """


class DimensionMismatch(CurvatureError):
    """
    Metric, coordinate basis and tensor disagree on the dimension.
    """
    def __init__(self, message: str, expected: Optional[int] = None, got: Any = None):
        super().__init__(message)
        self.expected = expected
        self.got = got


class SingularMetric(CurvatureError):
    """
    The metric determinant is identically zero, so no inverse exists.
    """
    def __init__(self, message: str, determinant: Any = None):
        super().__init__(message)
        self.determinant = determinant


class UnsupportedDimension(CurvatureError):
    """
    The requested quantity is undefined in this dimension (Weyl for n < 3).
    """
    def __init__(self, message: str, dimension: Optional[int] = None):
        super().__init__(message)
        self.dimension = dimension


class InvalidIndexLabel(CurvatureError):
    """
    An index slot or derivative token whose label or variance cannot be read.
    """
    def __init__(self, message: str, label: Any = None):
        super().__init__(message)
        self.label = label


class AmbiguousContraction(CurvatureError):
    """
    A label occurs more than twice, so the implied summation is ambiguous.
    """
    def __init__(self, message: str, label: Any = None, count: int = 0):
        super().__init__(message)
        self.label = label
        self.count = count


class UnsupportedTensorStructure(CurvatureError):
    """
    Components that cannot be read as a hypercubic symbolic array.
    """
    def __init__(self, message: str, value: Any = None):
        super().__init__(message)
        self.value = value

# End of exceptions.py
