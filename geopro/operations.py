"""
Free functions over the geometric types.

They dispatch through the GeoEntity and GeoMatrix interfaces, so any entity
or matrix pair can be passed to them.
"""
from functools import reduce
from typing import Callable, Optional, Union

import numpy as np
from numpy import ndarray

from geopro.base import GeoEntity, GeoMatrix
from geopro.entities import Vector, UnitVector, Point
from geopro.frame import Frame
from geopro.ray import Ray

Addable = Union[Vector, UnitVector, Point]


def map(t: GeoMatrix) -> Callable[[GeoEntity], GeoEntity]:
    """
    Returns a function mapping an entity through `t`.

    >>> move = map(Transform.from_translation(1, 0, 0))
    >>> move(Point(1, 2, 3))
    Point(2.0, 2.0, 3.0)
    """
    if not isinstance(t, GeoMatrix):
        raise TypeError(f"cannot map through {type(t).__name__}")

    def _map(entity: GeoEntity) -> GeoEntity:
        return entity.map(t)
    return _map


def compose(*matrices: GeoMatrix) -> GeoMatrix:
    """
    Compose the matrices in order: the first one is applied first.

    Raises:
        ValueError: if no matrix is given.
    """
    if not matrices:
        raise ValueError("compose needs at least one matrix")
    return reduce(lambda acc, m: acc.compose(m), matrices[1:], matrices[0])


def relative(frame: Frame, x: Optional[GeoEntity] = None):
    """
    Express `x` (world coordinates) in the local coordinates of `frame`.
    Without `x`, returns the conversion as a function.
    """
    if x is None:
        return frame.relative
    return frame.relative(x)


def absolute(frame: Frame, x: Optional[GeoEntity] = None):
    """
    Express `x` (local to `frame`) in world coordinates. Without `x`, returns
    the conversion as a function.
    """
    if x is None:
        return frame.absolute
    return frame.absolute(x)


def add(v: Addable, *others: Addable) -> Addable:
    """
    Add vectors to a vector or to a point, left to right.
    """
    return reduce(lambda acc, u: acc.add(u), others, v)


def apply(t: GeoMatrix, x: GeoEntity) -> GeoEntity:
    return t.apply(x)


#########
# Guards
#

def is_frame(obj) -> bool:
    return isinstance(obj, GeoMatrix) and obj.is_frame()


def is_vector(obj) -> bool:
    return isinstance(obj, Vector)


def is_unit_vector(obj) -> bool:
    return isinstance(obj, UnitVector)


def is_point(obj) -> bool:
    return isinstance(obj, Point)


def is_ray(obj) -> bool:
    return isinstance(obj, Ray)


def _length(obj) -> Optional[int]:
    if isinstance(obj, ndarray):
        return obj.shape[0] if obj.ndim == 1 else None
    if isinstance(obj, (list, tuple)):
        return len(obj)
    return None


def is_vec3(obj) -> bool:
    """True for a flat sequence or array of 3 numbers."""
    return _length(obj) == 3


def is_vec4(obj) -> bool:
    return _length(obj) == 4


def is_finite(obj) -> bool:
    """
    True when every coordinate of an entity, every entry of a matrix pair, or
    every element of an array is finite.
    """
    if isinstance(obj, (GeoEntity, GeoMatrix)):
        return obj.is_finite()
    return bool(np.isfinite(np.asarray(obj, dtype=np.float64)).all())
