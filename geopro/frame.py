# frame.py

from typing import Union, TypeVar

import numpy as np
from numpy import ndarray
from numpy import allclose as np_allclose
from numpy import float64 as np_float64

from geopro.base import GeoEntity, GeoMatrix, as_matrix4, invert_matrix
from geopro.entities import Vector, UnitVector, Point
from geopro.math import EPSILON
from geopro.rotation import Rotation
from geopro.transform import Transform

E = TypeVar("E", bound=GeoEntity)


class Frame(GeoMatrix, GeoEntity):
    """
    A coordinate system: an origin and three basis directions i, j, k, given
    in the parent (world) coordinates.

    The direct matrix has i, j, k and the origin as its columns, so it maps
    local coordinates into the parent system; the inverse maps parent
    coordinates into the frame. The basis is not checked for orthogonality.
    """
    __slots__ = ()

    def is_frame(self) -> bool:
        return True

    #########
    # Builders
    #

    @classmethod
    def world(cls) -> "Frame":
        """The identity frame, flagged as the world frame."""
        return cls()

    @classmethod
    def from_transform(cls, t: GeoMatrix) -> "Frame":
        """
        The frame obtained by applying `t` to the world frame.
        """
        return cls._from_pair(t._direct.copy(), t._inverse.copy(), t._identity)

    @classmethod
    def from_matrices(cls, direct: Union[ndarray, list, tuple], inverse: Union[ndarray, list, tuple]) -> "Frame":
        return cls._from_pair(as_matrix4(direct), as_matrix4(inverse))

    @classmethod
    def from_point_and_vectors(cls, o: Point, i: UnitVector, j: UnitVector, k: UnitVector) -> "Frame":
        """
        Builds a frame directly from the origin and the 3 unit vectors.

        The vectors are not checked for orthogonality: a non orthonormal
        basis gives a frame whose map is affine but not rigid.

        Args:
            o: origin point
            i: unit vector for the X axis
            j: unit vector for the Y axis
            k: unit vector for the Z axis

        Returns:
            A new Frame.
        """
        direct = np.column_stack((i.vec4(), j.vec4(), k.vec4(), o.vec4())).astype(np_float64)
        return cls._from_pair(direct, invert_matrix(direct))

    @classmethod
    def from_two_vectors(cls, o: Point, v1: Union[Vector, UnitVector], v2: Union[Vector, UnitVector]) -> "Frame":
        """
        Build a right handed frame through an origin and 2 independent vectors.

        Args:
            o: origin point.
            v1: the Z direction of the new frame.
            v2: a vector in the XZ half plane of positive x. If it is already
                perpendicular to `v1` it becomes the X axis.

        Returns:
            A new Frame.
        """
        k = UnitVector.create(v1)
        j = UnitVector.from_cross_product(k, v2)
        i = UnitVector.from_cross_product(j, k)
        return cls.from_point_and_vectors(o, i, j, k)

    @classmethod
    def look_at(cls, eye: Point, target: Point, up: Union[UnitVector, Vector]) -> "Frame":
        """
        Build a Frame from basic camera parameters.

        Args:
            eye: the position of the camera and the origin of the frame.
            target: the point looked at; the frame k axis points away from it.
            up: hint for the Y direction of the frame.

        Returns:
            A new Frame.
        """
        k = UnitVector.from_points(eye, target)
        i = UnitVector.from_cross_product(up, k)
        j = UnitVector.from_cross_product(k, i)
        return cls.from_point_and_vectors(eye, i, j, k)

    @classmethod
    def translation(cls, origin: Point) -> "Frame":
        """A frame parallel to the world one, with its origin at `origin`."""
        return cls.from_transform(Transform.from_move(Vector.from_point(origin)))

    @classmethod
    def rotation_x(cls, origin: Point, angle: float) -> "Frame":
        """
        A frame with its origin at `origin`, rotated by `angle` radians about
        its X axis.
        """
        return cls.from_transform(
            Transform.from_roto_translation(Rotation.rotation_x(angle), Vector.from_point(origin)))

    @classmethod
    def rotation_y(cls, origin: Point, angle: float) -> "Frame":
        return cls.from_transform(
            Transform.from_roto_translation(Rotation.rotation_y(angle), Vector.from_point(origin)))

    @classmethod
    def rotation_z(cls, origin: Point, angle: float) -> "Frame":
        return cls.from_transform(
            Transform.from_roto_translation(Rotation.rotation_z(angle), Vector.from_point(origin)))

    #########
    # Accessors
    #

    @property
    def i(self) -> UnitVector:
        """The X axis of this frame."""
        return UnitVector.from_vec3(self._direct[:3, 0])

    @property
    def j(self) -> UnitVector:
        """The Y axis of this frame."""
        return UnitVector.from_vec3(self._direct[:3, 1])

    @property
    def k(self) -> UnitVector:
        """The Z axis of this frame."""
        return UnitVector.from_vec3(self._direct[:3, 2])

    @property
    def o(self) -> Point:
        """The origin of this frame."""
        return Point.from_vec4(self._direct[:, 3])

    origin = o

    @property
    def is_world(self) -> bool:
        return self._identity or bool(np_allclose(self._direct, np.eye(4), atol=EPSILON))

    #########
    # Coordinate conversion
    #

    def relative(self, x: E) -> E:
        """
        Given `x` expressed in the parent coordinates, return it expressed in
        the local coordinates of this frame.

        A Frame argument is rebuilt from its converted origin, k and i axes
        so the result stays orthonormal.
        """
        if isinstance(x, Frame):
            return Frame.from_two_vectors(x.o.relative(self), x.k.relative(self), x.i.relative(self))
        if not isinstance(x, (GeoEntity, Transform)):
            raise TypeError(f"cannot convert {type(x).__name__} into a frame")
        return x.relative(self)

    def absolute(self, x: E) -> E:
        """
        Given `x` expressed in the local coordinates of this frame, return it
        expressed in the parent coordinates.
        """
        if isinstance(x, Frame):
            return Frame.from_two_vectors(x.o.absolute(self), x.k.absolute(self), x.i.absolute(self))
        if not isinstance(x, (GeoEntity, Transform)):
            raise TypeError(f"cannot convert {type(x).__name__} from a frame")
        return x.absolute(self)

    #########
    # Frame as an entity
    #

    def map(self, t: GeoMatrix) -> "Frame":
        """Move this frame by `t`."""
        return self.compose(t)

    def un_map(self, t: GeoMatrix) -> "Frame":
        return self.compose(t.invert())

    def to_transform(self) -> Transform:
        """
        The same matrix pair as a plain Transform.
        """
        return Transform._from_pair(self._direct, self._inverse, self._identity)

    def __str__(self) -> str:
        return f"Frame: {{ o: {self.o}, i: {self.i}, j: {self.j}, k: {self.k} }}"
