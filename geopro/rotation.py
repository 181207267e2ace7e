# rotation.py

from typing import Union, Sequence, Tuple, TYPE_CHECKING

import numpy as np
from numpy import ndarray
from numpy import asarray as np_asarray
from numpy import allclose as np_allclose
from numpy import array_equal as np_array_equal
from numpy import float64 as np_float64

from geopro.math import (
    EPSILON,
    euler_to_quaternion,
    axis_angle_to_quaternion,
    quaternion_multiply,
    quaternion_inverse,
    quaternion_to_rotation,
    rotation_to_quaternion,
    rotation_to_euler,
)

from geopro.entities import Vector, UnitVector

if TYPE_CHECKING:
    from geopro.base import GeoMatrix

_IDENTITY_QUATERNION = np.array([0.0, 0.0, 0.0, 1.0], dtype=np_float64)


class Rotation:
    """
    A rotation stored as a unit quaternion [x, y, z, w] together with its
    inverse quaternion.

    Rotations are not applied to entities directly; build a Transform with
    `Transform.from_rotation` for that.
    """
    __slots__ = ("_direct", "_inverse")

    def __init__(self):
        self._direct = _IDENTITY_QUATERNION.copy()
        self._inverse = _IDENTITY_QUATERNION.copy()

    @classmethod
    def _from_quaternion_pair(cls, direct: ndarray, inverse: ndarray) -> "Rotation":
        instance = object.__new__(cls)
        instance._direct = direct
        instance._inverse = inverse
        return instance

    @classmethod
    def _from_direct(cls, direct: ndarray) -> "Rotation":
        return cls._from_quaternion_pair(direct, quaternion_inverse(direct))

    #########
    # Builders
    #

    @classmethod
    def identity(cls) -> "Rotation":
        return cls()

    @classmethod
    def from_values(cls, x: float, y: float, z: float, w: float) -> "Rotation":
        return cls._from_direct(np.array((x, y, z, w), dtype=np_float64))

    @classmethod
    def from_quaternion(cls, quaternion: Union[ndarray, Sequence[float]]) -> "Rotation":
        """
        Create a Rotation from a quaternion [x, y, z, w].

        Raises:
            ValueError: if the quaternion does not have 4 components.
        """
        q = np_asarray(quaternion, dtype=np_float64)
        if q.shape != (4,):
            raise ValueError(f"Invalid quaternion shape: {q.shape}")
        return cls._from_direct(q.copy())

    @classmethod
    def from_angles(cls, x: float, y: float, z: float) -> "Rotation":
        """
        Rotation about the fixed X axis by `x`, then about Y by `y`, then
        about Z by `z`. Angles in radians.
        """
        return cls._from_direct(euler_to_quaternion(float(x), float(y), float(z)))

    @classmethod
    def from_transform(cls, t: "GeoMatrix") -> "Rotation":
        """
        Extract the rotational part of the direct matrix of `t`. Any scale in
        the upper 3x3 block is divided out.
        """
        return cls._from_direct(rotation_to_quaternion(np.ascontiguousarray(t._direct[:3, :3])))

    @classmethod
    def from_axis_angle(cls, axis: Union[Vector, UnitVector, ndarray, Sequence[float]], angle: float) -> "Rotation":
        """
        Rotation of `angle` radians about `axis` (right hand rule).
        """
        if isinstance(axis, (Vector, UnitVector)):
            axis = axis.vec3()
        a = np_asarray(axis, dtype=np_float64)
        if a.shape != (3,):
            raise ValueError(f"Invalid axis shape: {a.shape}")
        return cls._from_direct(axis_angle_to_quaternion(a, float(angle)))

    @classmethod
    def rotation_x(cls, angle: float) -> "Rotation":
        return cls._from_direct(euler_to_quaternion(float(angle), 0.0, 0.0))

    @classmethod
    def rotation_y(cls, angle: float) -> "Rotation":
        return cls._from_direct(euler_to_quaternion(0.0, float(angle), 0.0))

    @classmethod
    def rotation_z(cls, angle: float) -> "Rotation":
        return cls._from_direct(euler_to_quaternion(0.0, 0.0, float(angle)))

    #########
    # Algebra
    #

    def compose(self, other: "Rotation") -> "Rotation":
        """
        Apply this rotation first, then `other`.

        Args:
            other: the rotation to apply after this one.

        Returns:
            A new Rotation with quaternion other * self.
        """
        if not isinstance(other, Rotation):
            raise TypeError(f"cannot compose Rotation with {type(other).__name__}")
        return Rotation._from_direct(quaternion_multiply(other._direct, self._direct))

    def rotate_x(self, angle: float) -> "Rotation":
        return self.compose(Rotation.rotation_x(angle))

    def rotate_y(self, angle: float) -> "Rotation":
        return self.compose(Rotation.rotation_y(angle))

    def rotate_z(self, angle: float) -> "Rotation":
        return self.compose(Rotation.rotation_z(angle))

    def inverse(self) -> "Rotation":
        return Rotation._from_quaternion_pair(self._inverse, self._direct)

    #########
    # Accessors
    #

    @property
    def quaternion(self) -> ndarray:
        return self._direct.copy()

    @property
    def inverse_quaternion(self) -> ndarray:
        return self._inverse.copy()

    def to_matrix(self) -> ndarray:
        """The 3x3 rotation matrix."""
        return quaternion_to_rotation(self._direct)

    def to_euler(self) -> Tuple[float, float, float]:
        """
        The angles (x, y, z) in radians such that
        `Rotation.from_angles(*r.to_euler())` is the same rotation.
        """
        x, y, z = rotation_to_euler(self.to_matrix())
        return float(x), float(y), float(z)

    def is_close(self, other: "Rotation", tol: float = EPSILON) -> bool:
        """
        True if the two rotations are the same; q and -q are treated as equal.
        """
        if not isinstance(other, Rotation):
            return False
        return bool(np_allclose(self._direct, other._direct, atol=tol)
                    or np_allclose(self._direct, -other._direct, atol=tol))

    def __eq__(self, other) -> bool:
        return type(self) == type(other) and np_array_equal(self._direct, other._direct)

    def __hash__(self) -> int:
        return hash(self._direct.tobytes())

    def __repr__(self) -> str:
        x, y, z, w = (float(c) for c in self._direct)
        return f"Rotation(x={x!r}, y={y!r}, z={z!r}, w={w!r})"
