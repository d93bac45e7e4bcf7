from __future__ import annotations

from typing import Any, Sequence, Tuple, TYPE_CHECKING


__all__ = (
    "TSHException",
    "ShapeError",
    "EmptyInstanceError",
    "InvalidPathError",
    "UnsupportedBoundError",
    "NonFiniteCostError",
)


class TSHException(Exception):
    """Base class for all exceptions from this library"""
    pass


class ShapeError(TSHException):
    """Exception raised when a distance matrix is not a non-empty square matrix"""

    __slots__ = (
        "shape",
    )
    if TYPE_CHECKING:
        shape: Tuple[int, ...]

    def __init__(self, shape: Sequence[int], /) -> None:
        self.shape = tuple(shape)
        super().__init__(f"Expected a non-empty square matrix, got shape {self.shape!r}")


class EmptyInstanceError(ShapeError):
    """Exception raised when a heuristic is asked to build a tour with no cities"""

    def __init__(self) -> None:
        super().__init__((0, 0))


class InvalidPathError(TSHException):
    """Exception raised when a path is not a valid (partial) tour of the instance"""

    __slots__ = (
        "path",
    )
    if TYPE_CHECKING:
        path: Tuple[Any, ...]

    def __init__(self, path: Sequence[Any], reason: str, /) -> None:
        self.path = tuple(path)
        super().__init__(f"Invalid path {list(self.path)!r}: {reason}")


class UnsupportedBoundError(TSHException):
    """Exception raised when a spanning tree bound is requested for an asymmetric matrix"""

    def __init__(self, bound: str, /) -> None:
        super().__init__(f"{bound} is only valid for symmetric matrices, pass force=True to compute it anyway")


class NonFiniteCostError(TSHException):
    """Exception raised when a NaN or infinite cost is consumed or produced"""

    __slots__ = (
        "value",
    )
    if TYPE_CHECKING:
        value: float

    def __init__(self, value: float, /, *, where: str = "distance matrix") -> None:
        self.value = value
        super().__init__(f"Non-finite cost {value!r} in {where}")
