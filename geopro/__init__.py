"""
geopro: immutable points, vectors, rotations, transforms, frames and
projections in homogeneous coordinates, with rays, lines and planes built on
top of them.
"""

__version__ = version = "0.1.0"

import logging

# exposing the public API of the package
from geopro.math import EPSILON
from geopro.entities import Vector, UnitVector, Point
from geopro.rotation import Rotation
from geopro.base import GeoEntity, GeoMatrix
from geopro.transform import Transform
from geopro.frame import Frame
from geopro.projection import Projection
from geopro.ray import Ray, RayRole, line, plane, plane_line_intersection
from geopro.operations import (
    compose,
    relative,
    absolute,
    add,
    apply,
    is_frame,
    is_vector,
    is_unit_vector,
    is_point,
    is_ray,
    is_vec3,
    is_vec4,
    is_finite,
)
from geopro.utils import deg2rad, rad2deg, round_to
from geopro.log import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "EPSILON",
    "Vector",
    "UnitVector",
    "Point",
    "Rotation",
    "GeoEntity",
    "GeoMatrix",
    "Transform",
    "Frame",
    "Projection",
    "Ray",
    "RayRole",
    "line",
    "plane",
    "plane_line_intersection",
    "compose",
    "relative",
    "absolute",
    "add",
    "apply",
    "is_frame",
    "is_vector",
    "is_unit_vector",
    "is_point",
    "is_ray",
    "is_vec3",
    "is_vec4",
    "is_finite",
    "deg2rad",
    "rad2deg",
    "round_to",
    "setup_logging",
]
