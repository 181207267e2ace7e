# transform.py

from typing import Union, TYPE_CHECKING

import numpy as np
from numpy import ndarray
from numpy import allclose as np_allclose
from numpy import float64 as np_float64

from geopro.base import GeoMatrix, as_matrix4, invert_matrix
from geopro.entities import Vector, UnitVector, Point
from geopro.math import EPSILON, trs_matrix, trs_inverse_matrix, look_at_matrix
from geopro.rotation import Rotation

if TYPE_CHECKING:
    from geopro.frame import Frame

_EYE3 = np.eye(3, dtype=np_float64)
_ZERO3 = np.zeros(3, dtype=np_float64)
_ONE3 = np.ones(3, dtype=np_float64)


def _vec3(v: Union[Vector, UnitVector, Point, ndarray]) -> ndarray:
    if isinstance(v, (Vector, UnitVector, Point)):
        return v.vec3()
    return np.asarray(v, dtype=np_float64)


class Transform(GeoMatrix):
    """
    An affine transformation stored as a 4x4 matrix and its exact inverse.

    Every builder computes both matrices; translation, rotation and scale
    primitives invert analytically while `from_matrix` and `look_at` use the
    numeric 4x4 inverse.
    """
    __slots__ = ()

    def is_frame(self) -> bool:
        return False

    #########
    # Builders
    #

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    @classmethod
    def from_matrix(cls, matrix: Union[ndarray, list, tuple]) -> "Transform":
        """
        Create a Transform from a direct 4x4 matrix. The inverse is computed
        numerically; a singular matrix yields a non-finite inverse.

        Raises:
            ValueError: if the matrix is not 4x4.
        """
        direct = as_matrix4(matrix)
        return cls._from_pair(direct, invert_matrix(direct))

    @classmethod
    def from_matrices(cls, direct: Union[ndarray, list, tuple], inverse: Union[ndarray, list, tuple]) -> "Transform":
        """
        Create a Transform from a direct matrix and its inverse. The pair is
        trusted as given.
        """
        return cls._from_pair(as_matrix4(direct), as_matrix4(inverse))

    @classmethod
    def _from_trs(cls, translation: ndarray, rotation: ndarray, scale: ndarray) -> "Transform":
        return cls._from_pair(
            trs_matrix(translation, rotation, scale),
            trs_inverse_matrix(translation, rotation, scale),
        )

    @classmethod
    def from_rotation(cls, rotation: Rotation) -> "Transform":
        return cls._from_trs(_ZERO3, rotation.to_matrix(), _ONE3)

    @classmethod
    def from_translation(cls, tx: float, ty: float, tz: float) -> "Transform":
        return cls._from_trs(np.array((tx, ty, tz), dtype=np_float64), _EYE3, _ONE3)

    @classmethod
    def from_move(cls, move: Union[Vector, ndarray]) -> "Transform":
        """
        Translation by the given vector.
        """
        return cls._from_trs(_vec3(move), _EYE3, _ONE3)

    @classmethod
    def from_rotation_x(cls, angle: float) -> "Transform":
        return cls.from_rotation(Rotation.rotation_x(angle))

    @classmethod
    def from_rotation_y(cls, angle: float) -> "Transform":
        return cls.from_rotation(Rotation.rotation_y(angle))

    @classmethod
    def from_rotation_z(cls, angle: float) -> "Transform":
        return cls.from_rotation(Rotation.rotation_z(angle))

    @classmethod
    def from_scale(cls, sx: float, sy: float, sz: float) -> "Transform":
        """
        Non-uniform scale. A zero factor gives a non-finite inverse.
        """
        return cls._from_trs(_ZERO3, _EYE3, np.array((sx, sy, sz), dtype=np_float64))

    @classmethod
    def from_roto_translation(cls, rotation: Rotation, move: Union[Vector, ndarray]) -> "Transform":
        """
        Create a transform that rotates and then translates, in that order.

        Args:
            rotation: the rotation, about the origin.
            move: the translation applied after the rotation.

        Returns:
            A new Transform.
        """
        return cls._from_trs(_vec3(move), rotation.to_matrix(), _ONE3)

    @classmethod
    def from_roto_translation_scale(cls, rotation: Rotation, move: Union[Vector, ndarray],
                                    scale: Union[Vector, ndarray]) -> "Transform":
        """
        Create a transform that scales, then rotates, then translates.

        Args:
            rotation: the rotation, about the origin.
            move: the final translation.
            scale: per-axis scale factors as a Vector.

        Returns:
            A new Transform.
        """
        return cls._from_trs(_vec3(move), rotation.to_matrix(), _vec3(scale))

    @classmethod
    def look_at(cls, eye: Point, target: Point, up: Union[UnitVector, Vector]) -> "Transform":
        """
        The view matrix of a camera placed at `eye` looking towards `target`:
        it maps world coordinates into camera coordinates, the camera looking
        down its -Z axis. When `eye` and `target` coincide the identity is
        returned.
        """
        direct = look_at_matrix(eye.vec3(), target.vec3(), up.vec3())
        return cls._from_pair(direct, invert_matrix(direct))

    #########
    # Algebra
    #

    def relative(self, frame: "Frame") -> "Transform":
        """
        This transformation carried out relative to `frame`: an entity is
        first converted into `frame`, transformed, then converted back out.

        That is: compose(F⁻¹, M, F), so direct = F · M · F⁻¹ where F is the
        frame direct matrix.
        """
        ft = frame.to_transform()
        return ft.invert().compose(self).compose(ft)

    def absolute(self, frame: "Frame") -> "Transform":
        """
        The inverse of `relative`: a transformation given in the local
        coordinates of `frame`, expressed in world coordinates.
        """
        ft = frame.to_transform()
        return ft.compose(self).compose(ft.invert())

    def transpose(self) -> "Transform":
        direct = np.ascontiguousarray(self._direct.T)
        return Transform._from_pair(direct, invert_matrix(direct))

    #########
    # Accessors
    #

    @property
    def is_identity(self) -> bool:
        return self._identity or bool(np_allclose(self._direct, np.eye(4), atol=EPSILON))

    @property
    def scale_vector(self) -> Vector:
        """
        The per-axis scale: the lengths of the first three columns.
        """
        return Vector.from_vec3(np.linalg.norm(self._direct[:3, :3], axis=0))

    @property
    def position_vector(self) -> Vector:
        """
        The translation part of the transformation.
        """
        return Vector.from_vec3(self._direct[:3, 3])

    def __str__(self) -> str:
        return f"Transform:\n{self._direct}"
