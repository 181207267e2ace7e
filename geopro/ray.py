# ray.py

import logging
import math
from enum import Enum
from typing import List, Tuple, Union, TYPE_CHECKING

from geopro.base import GeoEntity, GeoMatrix
from geopro.entities import Vector, UnitVector, Point
from geopro.math import EPSILON

if TYPE_CHECKING:
    from geopro.frame import Frame

logger = logging.getLogger(__name__)


class RayRole(Enum):
    RAY = 0
    LINE = 1
    PLANE = 2


class Ray(GeoEntity):
    """
    An origin and a unit direction.

    The same value describes a ray, an infinite line or a plane; `role` tells
    them apart. For a plane the direction is the surface normal.
    """
    __slots__ = ("_origin", "_direction", "_role")

    def __init__(self, o: Point, d: Union[Vector, UnitVector], role: RayRole = RayRole.RAY):
        self._origin = o
        self._direction = UnitVector.create(d)
        self._role = role

    @classmethod
    def _from_unchecked(cls, o: Point, d: UnitVector, role: RayRole) -> "Ray":
        instance = object.__new__(cls)
        instance._origin = o
        instance._direction = d
        instance._role = role
        return instance

    #########
    # Builders
    #

    @classmethod
    def create(cls, o: Point, d: Union[Vector, UnitVector]) -> "Ray":
        """A ray from an origin and a direction, normalized."""
        return cls(o, d)

    @classmethod
    def from_point_and_vector(cls, o: Point, d: Union[Vector, UnitVector]) -> "Ray":
        return cls(o, d)

    @classmethod
    def from_points(cls, o: Point, target: Point) -> "Ray":
        """A ray starting at `o` and pointing towards `target`."""
        return cls._from_unchecked(o, UnitVector.from_points(target, o), RayRole.RAY)

    @classmethod
    def line(cls, o: Point, d: Union[Vector, UnitVector]) -> "Ray":
        return cls(o, d, RayRole.LINE)

    @classmethod
    def plane(cls, o: Point, normal: Union[Vector, UnitVector]) -> "Ray":
        """The plane through `o` perpendicular to `normal`."""
        return cls(o, normal, RayRole.PLANE)

    #########
    # Accessors
    #

    @property
    def o(self) -> Point:
        return self._origin

    origin = o

    @property
    def d(self) -> UnitVector:
        return self._direction

    direction = d

    @property
    def role(self) -> RayRole:
        return self._role

    def is_plane(self) -> bool:
        return self._role is RayRole.PLANE

    #########
    # Parametric queries
    #

    def point_on(self, t: float) -> Point:
        """The point at signed distance `t` from the origin along the direction."""
        return self._origin.add(self._direction.to_vector().scale(t))

    def on(self, *distances: float) -> List[Point]:
        """
        The points at each of the given signed distances along the direction.
        """
        return [self.point_on(t) for t in distances]

    def project(self, p: Point) -> Point:
        """
        The point of the infinite line closest to `p`.
        """
        return self.point_on(self._direction.dot(p.subtract(self._origin)))

    def min_distance_points(self, other: "Ray") -> Tuple[float, float]:
        """
        Parameters (s, t) such that `self.point_on(s)` and `other.point_on(t)`
        are the closest points of the two infinite lines.

        When the lines are parallel within EPSILON every point is equally
        close; the result is then s = 0 and t the projection of this origin on
        `other`.

        Args:
            other: the other line.

        Returns:
            A tuple (s, t).
        """
        d1 = self._direction
        d2 = other._direction
        w0 = self._origin.subtract(other._origin)
        sin_theta = d1.cross_product(d2).length
        b = d1.dot(d2)
        d = d1.dot(w0)
        e = d2.dot(w0)

        if abs(sin_theta) < EPSILON:
            logger.debug("closest points of parallel lines %r and %r", self, other)
            return 0.0, e

        sin2 = sin_theta * sin_theta
        s = (-d + b * e) / sin2
        t = (e - b * d) / sin2
        return s, t

    def intersect_with(self, line: "Ray") -> float:
        """
        The parameter `t` such that `line.point_on(t)` lies on this plane.

        Returns NaN when the line is parallel to the plane, both when it lies
        in the plane and when it never meets it.

        Raises:
            ValueError: if this ray is not a plane.
        """
        if not self.is_plane():
            raise ValueError(f"intersect_with needs a plane, got a {self._role.name.lower()}")
        n = self._direction
        den = n.dot(line._direction)
        if den == 0.0:
            logger.debug("line %r is parallel to plane %r", line, self)
            return math.nan
        return -n.dot(line._origin.subtract(self._origin)) / den

    #########
    # Transformations
    #

    def map(self, t: GeoMatrix) -> "Ray":
        return Ray._from_unchecked(self._origin.map(t), self._direction.map(t), self._role)

    def un_map(self, t: GeoMatrix) -> "Ray":
        return Ray._from_unchecked(self._origin.un_map(t), self._direction.un_map(t), self._role)

    def relative(self, frame: "Frame") -> "Ray":
        """
        Assume this ray is expressed in world coordinates and return it
        expressed in the local coordinates of `frame`.
        """
        return Ray._from_unchecked(self._origin.relative(frame), self._direction.relative(frame), self._role)

    def absolute(self, frame: "Frame") -> "Ray":
        return Ray._from_unchecked(self._origin.absolute(frame), self._direction.absolute(frame), self._role)

    def is_finite(self) -> bool:
        return self._origin.is_finite() and self._direction.is_finite()

    def is_close(self, other: "Ray", tol: float = EPSILON) -> bool:
        return (isinstance(other, Ray) and self._role is other._role
                and self._origin.is_close(other._origin, tol)
                and self._direction.is_close(other._direction, tol))

    def __eq__(self, other) -> bool:
        return (type(self) == type(other) and self._role is other._role
                and self._origin == other._origin and self._direction == other._direction)

    def __hash__(self) -> int:
        return hash((self._role, self._origin, self._direction))

    def __repr__(self) -> str:
        return f"Ray(o={self._origin!r}, d={self._direction!r}, role={self._role.name})"


def line(o: Point, d: Union[Vector, UnitVector]) -> Ray:
    return Ray.line(o, d)


def plane(o: Point, normal: Union[Vector, UnitVector]) -> Ray:
    return Ray.plane(o, normal)


def plane_line_intersection(p: Ray, l: Ray) -> float:
    """Parameter on the line `l` where it meets the plane `p`. See Ray.intersect_with."""
    return p.intersect_with(l)
