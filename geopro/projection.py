# projection.py

import logging
import math

import numpy as np
from numpy import float64 as np_float64

from geopro.base import GeoEntity, GeoMatrix, invert_matrix
from geopro.entities import Point
from geopro.math import orthographic_matrix, perspective_matrix
from geopro.transform import Transform

logger = logging.getLogger(__name__)

_NAN_COORD = np.array([math.nan, math.nan, math.nan, math.nan], dtype=np_float64)


class Projection(GeoMatrix):
    """
    A projective 4x4 matrix pair (perspective or orthographic) mapping view
    coordinates to normalized device coordinates.

    The inverse is the numeric inverse of the direct matrix. Applying a
    projection to a Point ends with the perspective divide.
    """
    __slots__ = ()

    projective = True

    def is_frame(self) -> bool:
        return False

    @classmethod
    def orthographic(cls, left: float, right: float, bottom: float, top: float,
                     near: float, far: float) -> "Projection":
        """
        Orthographic projection of the box [left, right] x [bottom, top] x
        [-near, -far] to the [-1, 1] cube.
        """
        direct = orthographic_matrix(float(left), float(right), float(bottom), float(top),
                                     float(near), float(far))
        return cls._from_pair(direct, invert_matrix(direct))

    @classmethod
    def perspective(cls, fovy: float, aspect: float, near: float, far: float = math.inf) -> "Projection":
        """
        Perspective projection.

        Args:
            fovy: vertical field of view, in radians.
            aspect: width over height of the viewport.
            near: distance of the near clipping plane.
            far: distance of the far clipping plane, may be infinite.

        Returns:
            A new Projection.
        """
        direct = perspective_matrix(float(fovy), float(aspect), float(near), float(far))
        return cls._from_pair(direct, invert_matrix(direct))

    def apply(self, entity: GeoEntity) -> GeoEntity:
        """
        Project `entity`. A Point is divided by the w it gets from the direct
        matrix; when that w is exactly zero the result is a Point with every
        coordinate NaN. Other entities are mapped without a divide.
        """
        if isinstance(entity, Point):
            h = self._direct @ entity._coord
            w = h[3]
            if w == 0.0:
                logger.debug("projection of %s has w == 0", entity)
                return Point._from_unchecked(_NAN_COORD.copy())
            out = h / w
            out[3] = 1.0
            return Point._from_unchecked(out)
        return super().apply(entity)

    def to_transform(self) -> Transform:
        """
        The same matrix pair as a plain Transform, without the divide.
        """
        return Transform._from_pair(self._direct, self._inverse, self._identity)

    def __str__(self) -> str:
        return f"Projection:\n{self._direct}"
