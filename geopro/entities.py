# entities.py

import math
from typing import Union, Sequence, Tuple, Optional, TYPE_CHECKING

import numpy as np
from numpy import ndarray
from numpy import asarray as np_asarray
from numpy import allclose as np_allclose
from numpy import array_equal as np_array_equal
from numpy import isfinite as np_isfinite
from numpy import cross as np_cross
from numpy import dot as np_dot
from numpy import float64 as np_float64

from geopro.base import GeoEntity, GeoMatrix
from geopro.math import EPSILON

if TYPE_CHECKING:
    from geopro.frame import Frame

Number = Union[int, float]
ArrayLike = Union[ndarray, Sequence[float]]


def _as_array(values: ArrayLike) -> ndarray:
    arr = np_asarray(values, dtype=np_float64)
    if arr.shape not in ((3,), (4,)):
        raise ValueError(
            f"Expected 3 or 4 coordinates, got shape {arr.shape}")
    return arr


def _coord(x: Number, y: Number, z: Number, w: Number) -> ndarray:
    return np.array((x, y, z, w), dtype=np_float64)


def _normalized(xyz: ndarray) -> ndarray:
    """Unit length copy of a direction with w = 0. A zero length gives NaN."""
    out = np.zeros(4, dtype=np_float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        out[:3] = xyz[:3] / np.sqrt(np_dot(xyz[:3], xyz[:3]))
    return out


def _dehomogenized(h: ndarray) -> ndarray:
    """x, y, z divided by w, and w = 1. A zero w gives non-finite values."""
    out = np.ones(4, dtype=np_float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        out[:3] = h[:3] / h[3]
    return out


def _fmt(v: float) -> str:
    return format(v, "g")


class _Homogeneous(GeoEntity):
    """
    Shared storage and accessors for the 4-component entities.
    """
    __slots__ = ("_coord",)

    @classmethod
    def _from_unchecked(cls, coord: ndarray):
        """Wrap an owned float64 array of length 4 without any normalization."""
        instance = object.__new__(cls)
        instance._coord = coord
        return instance

    @property
    def x(self) -> float:
        return float(self._coord[0])

    @property
    def y(self) -> float:
        return float(self._coord[1])

    @property
    def z(self) -> float:
        return float(self._coord[2])

    @property
    def w(self) -> float:
        return float(self._coord[3])

    @property
    def triplet(self) -> Tuple[float, float, float]:
        """The (x, y, z) components."""
        return (self.x, self.y, self.z)

    @property
    def coordinates(self) -> Tuple[float, float, float, float]:
        """The homogeneous (x, y, z, w) components."""
        return (self.x, self.y, self.z, self.w)

    def vec3(self) -> ndarray:
        return self._coord[:3].copy()

    def vec4(self) -> ndarray:
        return self._coord.copy()

    def relative(self, frame: "Frame") -> "_Homogeneous":
        """
        Assume this entity is expressed in world coordinates and return it
        expressed in the local coordinates of `frame`.
        """
        return self.un_map(frame)

    def absolute(self, frame: "Frame") -> "_Homogeneous":
        """
        Assume this entity is expressed relative to `frame` and return it in
        world coordinates.
        """
        return self.map(frame)

    def is_finite(self) -> bool:
        return bool(np_isfinite(self._coord).all())

    def is_close(self, other: "_Homogeneous", tol: float = EPSILON) -> bool:
        """True if `other` has the same type and coordinates within `tol`."""
        return type(self) == type(other) and bool(np_allclose(self._coord, other._coord, atol=tol))

    def __eq__(self, other) -> bool:
        return type(self) == type(other) and np_array_equal(self._coord, other._coord)

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self.coordinates))

    def __iter__(self):
        return iter(self.triplet)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.x!r}, {self.y!r}, {self.z!r})"

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: [{_fmt(self.x)}, {_fmt(self.y)}, {_fmt(self.z)}]"


class Vector(_Homogeneous):
    """
    A free vector: 4 homogeneous components with w always 0.
    """
    __slots__ = ()

    def __init__(self, x: Number = 0.0, y: Number = 0.0, z: Number = 0.0):
        self._coord = _coord(x, y, z, 0.0)

    #########
    # Builders
    #

    @classmethod
    def create(cls, x: Union[Number, ArrayLike, "Point", "UnitVector", "Vector"],
               y: Optional[Number] = None, z: Optional[Number] = None) -> "Vector":
        """
        Build a Vector from a Point, a UnitVector, a Vector, a 3 or 4 element
        sequence, or three numbers.

        Raises:
            TypeError: for unsupported argument types.
            ValueError: for sequences that are neither 3 nor 4 long.
        """
        if isinstance(x, Vector):
            return x
        if isinstance(x, UnitVector):
            return cls.from_values(x.x, x.y, x.z)
        if isinstance(x, Point):
            return cls.from_point(x)
        if isinstance(x, (int, float, np.number)):
            if y is None or z is None:
                raise TypeError("Vector.create needs three numbers")
            return cls.from_values(x, y, z)
        if isinstance(x, (ndarray, list, tuple)):
            arr = _as_array(x)
            return cls.from_vec3(arr) if arr.shape == (3,) else cls.from_vec4(arr)
        raise TypeError(f"cannot build a Vector from {type(x).__name__}")

    @classmethod
    def from_values(cls, x: Number, y: Number, z: Number) -> "Vector":
        return cls._from_unchecked(_coord(x, y, z, 0.0))

    @classmethod
    def from_vec3(cls, v: ArrayLike) -> "Vector":
        v = _as_array(v)
        return cls._from_unchecked(_coord(v[0], v[1], v[2], 0.0))

    @classmethod
    def from_vec4(cls, v: ArrayLike) -> "Vector":
        """
        Build from homogeneous coordinates, dividing by w unless w is zero.
        """
        v = _as_array(v)
        w = v[3] if v.shape == (4,) and v[3] != 0 else 1.0
        return cls._from_unchecked(_coord(v[0] / w, v[1] / w, v[2] / w, 0.0))

    @classmethod
    def from_point(cls, p: "Point") -> "Vector":
        """The position vector of `p` (from the origin to `p`)."""
        return cls._from_unchecked(_coord(p.x, p.y, p.z, 0.0))

    @classmethod
    def from_points(cls, p1: "Point", p2: "Point") -> "Vector":
        """
        The difference p1 - p2, i.e. the vector going from p2 to p1.
        """
        coord = p1._coord - p2._coord
        coord[3] = 0.0
        return cls._from_unchecked(coord)

    @classmethod
    def from_unit_and_length(cls, u: "UnitVector", length: Number) -> "Vector":
        return cls._from_unchecked(u._coord * float(length))

    #########
    # Transformations
    #

    def map(self, t: GeoMatrix) -> "Vector":
        coord = t._direct @ self._coord
        coord[3] = 0.0
        return Vector._from_unchecked(coord)

    def un_map(self, t: GeoMatrix) -> "Vector":
        coord = t._inverse @ self._coord
        coord[3] = 0.0
        return Vector._from_unchecked(coord)

    #########
    # Algebra
    #

    def add(self, v: Union["Vector", "UnitVector"]) -> "Vector":
        return Vector._from_unchecked(self._coord + v._coord)

    def subtract(self, v: Union["Vector", "UnitVector"]) -> "Vector":
        return Vector._from_unchecked(self._coord - v._coord)

    def scale(self, s: Number) -> "Vector":
        """
        Return a new vector multiplied by the scalar `s`.
        """
        return Vector._from_unchecked(self._coord * float(s))

    def multiply(self, v: "Vector") -> "Vector":
        """Component-wise product."""
        return Vector._from_unchecked(self._coord * v._coord)

    def negate(self) -> "Vector":
        return Vector._from_unchecked(-self._coord)

    def dot(self, v: Union["Vector", "UnitVector"]) -> float:
        return float(np_dot(self._coord[:3], v._coord[:3]))

    def cross_product(self, v: Union["Vector", "UnitVector"]) -> "Vector":
        """
        The cross product self × v.
        """
        return Vector.from_vec3(np_cross(self._coord[:3], v._coord[:3]))

    def normalize(self) -> "UnitVector":
        return UnitVector.from_vector(self)

    @property
    def length(self) -> float:
        return math.sqrt(self.length_squared)

    @property
    def length_squared(self) -> float:
        return float(np_dot(self._coord[:3], self._coord[:3]))

    def __add__(self, other):
        if isinstance(other, (Vector, UnitVector)):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, (Vector, UnitVector)):
            return self.subtract(other)
        return NotImplemented

    def __neg__(self) -> "Vector":
        return self.negate()

    def __mul__(self, s):
        if isinstance(s, (int, float, np.number)):
            return self.scale(s)
        return NotImplemented

    __rmul__ = __mul__


class UnitVector(_Homogeneous):
    """
    A direction: w = 0 and the (x, y, z) part always has unit length.

    Every builder and every operation that could change the length
    normalizes again. Normalizing a zero vector does not raise, it yields NaN
    components.
    """
    __slots__ = ()

    def __init__(self, x: Number = 1.0, y: Number = 0.0, z: Number = 0.0):
        self._coord = _normalized(_coord(x, y, z, 0.0))

    @classmethod
    def create(cls, x: Union[Number, ArrayLike, "Point", "UnitVector", "Vector"],
               y: Optional[Number] = None, z: Optional[Number] = None) -> "UnitVector":
        """
        Build a UnitVector from a Vector, a UnitVector, a Point, a 3 or 4
        element sequence, or three numbers.
        """
        if isinstance(x, UnitVector):
            return x
        if isinstance(x, Vector):
            return cls.from_vector(x)
        if isinstance(x, Point):
            return cls.from_point(x)
        if isinstance(x, (int, float, np.number)):
            if y is None or z is None:
                raise TypeError("UnitVector.create needs three numbers")
            return cls.from_values(x, y, z)
        if isinstance(x, (ndarray, list, tuple)):
            arr = _as_array(x)
            return cls.from_vec3(arr) if arr.shape == (3,) else cls.from_vec4(arr)
        raise TypeError(f"cannot build a UnitVector from {type(x).__name__}")

    @classmethod
    def from_values(cls, x: Number, y: Number, z: Number) -> "UnitVector":
        return cls._from_unchecked(_normalized(_coord(x, y, z, 0.0)))

    @classmethod
    def from_vec3(cls, v: ArrayLike) -> "UnitVector":
        return cls._from_unchecked(_normalized(_as_array(v)))

    @classmethod
    def from_vec4(cls, v: ArrayLike) -> "UnitVector":
        v = _as_array(v)
        w = v[3] if v.shape == (4,) and v[3] != 0 else 1.0
        return cls._from_unchecked(_normalized(v[:3] / w))

    @classmethod
    def from_vector(cls, v: Vector) -> "UnitVector":
        return cls._from_unchecked(_normalized(v._coord))

    @classmethod
    def from_point(cls, p: "Point") -> "UnitVector":
        """Direction from the origin towards `p`."""
        return cls._from_unchecked(_normalized(p._coord))

    @classmethod
    def from_points(cls, p1: "Point", p2: "Point") -> "UnitVector":
        """
        Direction of p1 - p2, i.e. pointing from p2 towards p1.
        """
        return cls._from_unchecked(_normalized(p1._coord - p2._coord))

    @classmethod
    def from_cross_product(cls, v1: Union[Vector, "UnitVector"], v2: Union[Vector, "UnitVector"]) -> "UnitVector":
        """
        The normalized cross product v1 × v2.
        """
        return cls._from_unchecked(_normalized(np_cross(v1._coord[:3], v2._coord[:3])))

    def map(self, t: GeoMatrix) -> "UnitVector":
        # transforms need not preserve length (e.g. non-uniform scale)
        return UnitVector._from_unchecked(_normalized(t._direct @ self._coord))

    def un_map(self, t: GeoMatrix) -> "UnitVector":
        return UnitVector._from_unchecked(_normalized(t._inverse @ self._coord))

    def invert(self) -> "UnitVector":
        """The opposite direction."""
        return UnitVector._from_unchecked(-self._coord)

    def dot(self, v: Union[Vector, "UnitVector"]) -> float:
        return float(np_dot(self._coord[:3], v._coord[:3]))

    def cross_product(self, v: Union[Vector, "UnitVector"]) -> Vector:
        """
        The cross product self × v as a plain Vector (not normalized).
        """
        return Vector.from_vec3(np_cross(self._coord[:3], v._coord[:3]))

    def add(self, v: "UnitVector") -> "UnitVector":
        """
        The direction of the sum of the two unit vectors.
        """
        return UnitVector._from_unchecked(_normalized(self._coord + v._coord))

    def to_vector(self) -> Vector:
        return Vector._from_unchecked(self._coord.copy())

    @property
    def length(self) -> float:
        """Measured length; 1 up to rounding, NaN for a degenerate vector."""
        return math.sqrt(float(np_dot(self._coord[:3], self._coord[:3])))

    def __neg__(self) -> "UnitVector":
        return self.invert()


class Point(_Homogeneous):
    """
    A position: 4 homogeneous components with w normalized to 1.
    """
    __slots__ = ()

    def __init__(self, x: Number = 0.0, y: Number = 0.0, z: Number = 0.0):
        self._coord = _coord(x, y, z, 1.0)

    #########
    # Builders
    #

    @classmethod
    def origin(cls) -> "Point":
        return cls._from_unchecked(_coord(0.0, 0.0, 0.0, 1.0))

    @classmethod
    def create(cls, x: Union[Number, ArrayLike, Vector, UnitVector, "Point"],
               y: Optional[Number] = None, z: Optional[Number] = None, w: Number = 1.0) -> "Point":
        """
        A creator function for Point that accepts different types of arguments.

        Args:
            x: a Point, a Vector or UnitVector (its components become the
                coordinates), a 3 or 4 element sequence, or the x coordinate.
            y, z: the other two coordinates when x is a number.
            w: homogeneous weight the coordinates are divided by.

        Returns:
            A new Point.
        """
        if isinstance(x, Point):
            return x
        if isinstance(x, (Vector, UnitVector)):
            return cls.from_vector(x)
        if isinstance(x, (int, float, np.number)):
            if y is None or z is None:
                raise TypeError("Point.create needs three numbers")
            return cls.from_vec4(_coord(x, y, z, w))
        if isinstance(x, (ndarray, list, tuple)):
            arr = _as_array(x)
            return cls.from_vec3(arr) if arr.shape == (3,) else cls.from_vec4(arr)
        raise TypeError(f"cannot build a Point from {type(x).__name__}")

    @classmethod
    def from_values(cls, x: Number, y: Number, z: Number) -> "Point":
        return cls._from_unchecked(_coord(x, y, z, 1.0))

    @classmethod
    def from_vec3(cls, v: ArrayLike) -> "Point":
        v = _as_array(v)
        return cls._from_unchecked(_coord(v[0], v[1], v[2], 1.0))

    @classmethod
    def from_vec4(cls, v: ArrayLike) -> "Point":
        """
        Build from homogeneous coordinates, dividing x, y, z by w. A zero w
        is not guarded and gives non-finite coordinates.
        """
        v = _as_array(v)
        if v.shape == (3,):
            return cls.from_vec3(v)
        return cls._from_unchecked(_dehomogenized(v))

    @classmethod
    def from_vector(cls, v: Union[Vector, UnitVector]) -> "Point":
        """The point reached moving by `v` from the origin."""
        return cls._from_unchecked(_coord(v.x, v.y, v.z, 1.0))

    #########
    # Transformations
    #

    def map(self, t: GeoMatrix) -> "Point":
        """
        Apply the direct matrix of `t`. When `t` is a Frame this converts a
        point given relative to the frame into world coordinates.

        Args:
            t: Transform, Frame or Projection.

        Returns:
            A new Point, with w normalized to 1.
        """
        return Point._from_unchecked(_dehomogenized(t._direct @ self._coord))

    def un_map(self, t: GeoMatrix) -> "Point":
        """
        Apply the inverse matrix of `t`. When `t` is a Frame this converts a
        world point into the frame's local coordinates.
        """
        return Point._from_unchecked(_dehomogenized(t._inverse @ self._coord))

    #########
    # Algebra
    #

    def subtract(self, p: "Point") -> Vector:
        """The vector going from `p` to this point."""
        return Vector.from_points(self, p)

    def add(self, v: Union[Vector, UnitVector]) -> "Point":
        coord = self._coord + v._coord
        coord[3] = 1.0
        return Point._from_unchecked(coord)

    def scale(self, s: Number) -> "Point":
        """Scale the coordinates about the origin."""
        coord = self._coord * float(s)
        coord[3] = 1.0
        return Point._from_unchecked(coord)

    def distance_to(self, p: "Point") -> float:
        return self.subtract(p).length

    def __add__(self, other):
        if isinstance(other, (Vector, UnitVector)):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Point):
            return self.subtract(other)
        return NotImplemented

    def __str__(self) -> str:
        return f"Point: [{self.x:.4f}, {self.y:.4f}, {self.z:.4f}]"
