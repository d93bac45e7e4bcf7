from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from .errors import EmptyInstanceError, NonFiniteCostError, ShapeError


__all__ = (
    "DistanceMatrix",
    "MatrixLike",
    "validate",
)


class DistanceMatrix:
    """A read-only square matrix of arc costs

    `entry[i][j]` is the cost of travelling from city `i` to city `j`. The matrix may be
    asymmetric and may hold negative values, but every entry must be finite.

    Instances are shared by reference between concurrent heuristic runs and are never mutated.
    `is_symmetric` tolerates tiny differences and only decides which bounds apply, while refiners
    skip the reversed interior arcs only when `exactly_symmetric` holds.
    """

    __slots__ = (
        "_symmetric",
        "array",
        "dimension",
        "epsilon",
        "exactly_symmetric",
        "rows",
    )
    if TYPE_CHECKING:
        _symmetric: Optional[bool]
        array: npt.NDArray[np.float64]
        dimension: int
        epsilon: float
        exactly_symmetric: bool
        rows: Tuple[Tuple[float, ...], ...]

    def __init__(self, data: Any, /) -> None:
        try:
            array = np.array(data, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            if not _is_rectangular(data):
                raise ShapeError((len(data),)) from exc

            raise TypeError(f"Distance matrix entries must be real numbers: {exc}") from exc

        if array.size == 0 and array.shape in ((0,), (0, 0)):
            raise EmptyInstanceError

        if array.ndim != 2 or array.shape[0] != array.shape[1] or array.shape[0] < 1:
            raise ShapeError(array.shape)

        finite = np.isfinite(array)
        if not finite.all():
            raise NonFiniteCostError(float(array[~finite][0]))

        array.setflags(write=False)
        self.array = array
        self.dimension = array.shape[0]
        self.rows = tuple(tuple(row) for row in array.tolist())
        self.epsilon = 1e-12 * max(1.0, float(np.abs(array).max()))
        self.exactly_symmetric = bool(np.array_equal(array, array.T))
        self._symmetric = None

    def is_symmetric(self, *, atol: float = 1e-10) -> bool:
        """Whether `entry[i][j] == entry[j][i]` for every pair, within the absolute tolerance `atol`"""
        if atol == 1e-10 and self._symmetric is not None:
            return self._symmetric

        result = bool(np.allclose(self.array, self.array.T, rtol=0.0, atol=atol))
        if atol == 1e-10:
            self._symmetric = result

        return result

    def __getitem__(self, index: Tuple[int, int], /) -> float:
        return self.rows[index[0]][index[1]]

    def __len__(self) -> int:
        return self.dimension

    def __reduce__(self) -> Tuple[Any, ...]:
        return (self.__class__, (self.rows,))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} dimension={self.dimension}>"


def _is_rectangular(data: Any, /) -> bool:
    try:
        lengths = {len(row) for row in data}
    except TypeError:
        return True

    return len(lengths) <= 1


MatrixLike = Union[DistanceMatrix, Sequence[Sequence[float]], npt.ArrayLike]


def validate(matrix: MatrixLike, /) -> DistanceMatrix:
    """Validate a 2D array of arc costs

    Parameters
    -----
    matrix:
        A square array-like of real numbers, or an existing `DistanceMatrix` which is returned as-is

    Returns
    -----
    The validated `DistanceMatrix`

    Raises
    -----
    ShapeError:
        The input is not a non-empty square 2D array
    TypeError:
        The entries are not real numbers
    NonFiniteCostError:
        The input contains NaN or infinite entries
    """
    if isinstance(matrix, DistanceMatrix):
        return matrix

    return DistanceMatrix(matrix)
