# base.py

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union, TYPE_CHECKING

import numpy as np
from numpy import ndarray
from numpy import asarray as np_asarray
from numpy import allclose as np_allclose
from numpy import array_equal as np_array_equal
from numpy import array2string as np_array2string
from numpy import isfinite as np_isfinite
from numpy import float64 as np_float64

from geopro.math import inv4, EPSILON

if TYPE_CHECKING:
    from geopro.frame import Frame

logger = logging.getLogger(__name__)

# preallocate the identity matrix for performance
_EYE4 = np.eye(4, dtype=np_float64)


def as_matrix4(matrix: Union[ndarray, list, tuple]) -> ndarray:
    """
    Convert the input to an owned 4x4 float64 array.

    Raises:
        ValueError: if the input is not 4x4.
    """
    m = np_asarray(matrix, dtype=np_float64)
    if m.shape != (4, 4):
        raise ValueError(f"Invalid matrix shape: {m.shape}")
    return m.copy()


def invert_matrix(matrix: ndarray) -> ndarray:
    """
    Numeric inverse of a 4x4 matrix.

    Singular input is not an error: the result holds non-finite values and
    callers are expected to check `is_finite()` on whatever they build.
    """
    inverse = inv4(matrix)
    if not np_isfinite(inverse).all():
        logger.debug("inverting a singular matrix:\n%s", matrix)
    return inverse


class GeoEntity(ABC):
    """
    Anything that can be moved by a transform and re-expressed in a frame.
    """
    __slots__ = ()

    @abstractmethod
    def map(self, t: "GeoMatrix") -> "GeoEntity":
        """Apply the direct matrix of `t`."""

    @abstractmethod
    def un_map(self, t: "GeoMatrix") -> "GeoEntity":
        """Apply the inverse matrix of `t`."""

    @abstractmethod
    def relative(self, frame: "Frame") -> "GeoEntity":
        """Re-express this world entity in the local coordinates of `frame`."""

    @abstractmethod
    def absolute(self, frame: "Frame") -> "GeoEntity":
        """Re-express this entity, given local to `frame`, in world coordinates."""

    @abstractmethod
    def is_finite(self) -> bool:
        ...


class GeoMatrix(ABC):
    """
    A 4x4 matrix kept in lockstep with its inverse.

    Attributes:
        _direct (ndarray): the 4x4 direct matrix, applied by `map`.
        _inverse (ndarray): the exact inverse of `_direct`, applied by `un_map`.
        _identity (bool): hint that the pair is the identity. It is never
            trusted to be False; subclasses fall back to a comparison.

    The two matrices are never mutated after construction, so instances share
    them freely (inversion is a swap).
    """
    __slots__ = ("_direct", "_inverse", "_identity")

    # matrices whose application requires a homogeneous divide
    projective = False

    def __init__(self, matrix: Optional[Union[ndarray, list, tuple]] = None):
        if matrix is None:
            self._direct = _EYE4.copy()
            self._inverse = _EYE4.copy()
            self._identity = True
        else:
            self._direct = as_matrix4(matrix)
            self._inverse = invert_matrix(self._direct)
            self._identity = False

    @classmethod
    def _from_pair(cls, direct: ndarray, inverse: ndarray, identity: bool = False):
        """
        Build an instance from a direct matrix and its inverse, unchecked.
        Every builder ends here, so the two matrices are always set together.
        """
        instance = object.__new__(cls)
        instance._direct = direct
        instance._inverse = inverse
        instance._identity = identity
        return instance

    @abstractmethod
    def is_frame(self) -> bool:
        ...

    #########
    # Accessors
    #

    @property
    def direct_matrix(self) -> ndarray:
        """
        A copy of the direct 4x4 matrix.
        """
        return self._direct.copy()

    @property
    def inverse_matrix(self) -> ndarray:
        """
        A copy of the inverse 4x4 matrix.
        """
        return self._inverse.copy()

    def direct(self, row: int, col: int) -> float:
        return float(self._direct[row, col])

    def inverse(self, row: int, col: int) -> float:
        return float(self._inverse[row, col])

    def is_finite(self) -> bool:
        return bool(np_isfinite(self._direct).all() and np_isfinite(self._inverse).all())

    ########
    # Algebra
    #

    def compose(self, other: "GeoMatrix") -> "GeoMatrix":
        """
        Compose this matrix with `other`: the result applies `self` first,
        then `other`.

        That is: direct = other.direct · self.direct and
        inverse = self.inverse · other.inverse.

        The result is a projection when either operand is one, otherwise it
        has the class of `self`.

        Args:
            other: the transform to apply after this one.

        Returns:
            A new GeoMatrix.
        """
        if not isinstance(other, GeoMatrix):
            raise TypeError(
                f"cannot compose {self.__class__.__name__} with {type(other).__name__}")
        cls = other.__class__ if other.projective and not self.projective else self.__class__
        return cls._from_pair(other._direct @ self._direct, self._inverse @ other._inverse)

    def invert(self) -> "GeoMatrix":
        """
        The inverse transformation, by swapping the cached matrices.
        """
        return self.__class__._from_pair(self._inverse, self._direct, self._identity)

    def apply(self, entity: GeoEntity) -> GeoEntity:
        """
        Apply this transformation to a point, vector, unit vector, ray or frame.
        """
        if not isinstance(entity, GeoEntity):
            raise TypeError(
                f"cannot apply {self.__class__.__name__} to {type(entity).__name__}")
        return entity.map(self)

    def is_close(self, other: "GeoMatrix", tol: float = EPSILON) -> bool:
        if not isinstance(other, GeoMatrix):
            return False
        return bool(np_allclose(self._direct, other._direct, atol=tol)
                    and np_allclose(self._inverse, other._inverse, atol=tol))

    #########
    # Dunders
    #

    def __matmul__(self, other):
        """
        `a @ b` multiplies matrices the usual way, so it applies `b` first and
        is the same as `b.compose(a)`. `a @ entity` applies `a` to the entity.
        """
        if isinstance(other, GeoMatrix):
            return other.compose(self)
        if isinstance(other, GeoEntity):
            return self.apply(other)
        return NotImplemented

    def __eq__(self, other) -> bool:
        return (type(self) == type(other)
                and np_array_equal(self._direct, other._direct)
                and np_array_equal(self._inverse, other._inverse))

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self._direct.tobytes()))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(direct={np_array2string(self._direct, separator=', ')})"
