import math
import unittest
import numpy as np

import geopro
from geopro import operations as ops
from geopro import (
    Frame,
    Transform,
    Projection,
    Rotation,
    Ray,
    Point,
    Vector,
    UnitVector,
    deg2rad,
)


class TestOperations(unittest.TestCase):
    def test_compose_opposite_transforms_is_identity(self):
        t1 = Transform.from_rotation_x(deg2rad(45))
        t2 = Transform.from_rotation_x(deg2rad(-45))
        self.assertTrue(ops.compose(t1, t2).is_identity)

    def test_compose_opposite_frames_is_world(self):
        move = Vector(0, 0, 0)
        f1 = Frame.from_transform(Transform.from_roto_translation(Rotation.rotation_x(deg2rad(45)), move))
        f2 = Frame.from_transform(Transform.from_roto_translation(Rotation.rotation_x(deg2rad(-45)), move))
        f3 = ops.compose(f1, f2)
        self.assertIsInstance(f3, Frame)
        self.assertTrue(f3.is_world)

    def test_compose_is_a_left_fold(self):
        a = Transform.from_translation(1, 0, 0)
        b = Transform.from_rotation_z(math.pi / 2)
        c = Transform.from_scale(2, 2, 2)
        self.assertEqual(ops.compose(a, b, c), a.compose(b).compose(c))
        self.assertIs(ops.compose(a), a)
        with self.assertRaises(ValueError):
            ops.compose()

    def test_map(self):
        move = ops.map(Transform.from_translation(10, 10, 10))
        self.assertEqual(move(Point(10, 20, 15)), Point(20, 30, 25))
        self.assertEqual(move(Vector(1, 2, 3)), Vector(1, 2, 3))
        with self.assertRaises(TypeError):
            ops.map(Rotation.identity())

    def test_add(self):
        p = ops.add(Point(10, 20, 15), Vector(10, 20, 15))
        self.assertEqual(p, Point(20, 40, 30))
        v = ops.add(Vector(1, 0, 0), Vector(0, 1, 0), Vector(0, 0, 1))
        self.assertEqual(v, Vector(1, 1, 1))
        self.assertEqual(ops.add(Vector(1, 2, 3)), Vector(1, 2, 3))

    def test_absolute_and_relative(self):
        frame = Frame.from_two_vectors(Point(10, 20, 15), Vector(0, 0, 1), Vector(1, 0, 0))

        abs_point = ops.absolute(frame)(Point(1, 1, 1))
        np.testing.assert_allclose(abs_point.vec3(), [11, 21, 16], atol=1e-12)

        rel_point = ops.relative(frame)(abs_point)
        np.testing.assert_allclose(rel_point.vec3(), [1, 1, 1], atol=1e-12)

        self.assertEqual(ops.absolute(frame, Point(1, 1, 1)), abs_point)
        self.assertEqual(ops.relative(frame, abs_point), rel_point)

    def test_apply(self):
        proj = Projection.perspective(math.pi / 4, 1, 0.1, 100)
        self.assertAlmostEqual(ops.apply(proj, Point(0, 0, -1)).z, 0.8018, places=4)
        self.assertEqual(ops.apply(Transform.identity(), Point(1, 2, 3)), Point(1, 2, 3))


class TestGuards(unittest.TestCase):
    def test_type_guards(self):
        self.assertTrue(ops.is_frame(Frame.world()))
        self.assertFalse(ops.is_frame(Transform.identity()))
        self.assertFalse(ops.is_frame(Point(0, 0, 0)))
        self.assertTrue(ops.is_vector(Vector(1, 0, 0)))
        self.assertFalse(ops.is_vector(UnitVector(1, 0, 0)))
        self.assertTrue(ops.is_unit_vector(UnitVector(1, 0, 0)))
        self.assertTrue(ops.is_point(Point(0, 0, 0)))
        self.assertFalse(ops.is_point(Vector(0, 0, 0)))
        self.assertTrue(ops.is_ray(Ray.plane(Point(0, 0, 0), Vector(0, 0, 1))))
        self.assertFalse(ops.is_ray(None))

    def test_shape_guards(self):
        self.assertTrue(ops.is_vec3([1, 2, 3]))
        self.assertTrue(ops.is_vec3(np.zeros(3)))
        self.assertFalse(ops.is_vec3(np.zeros((3, 1))))
        self.assertFalse(ops.is_vec3([1, 2, 3, 4]))
        self.assertTrue(ops.is_vec4((1, 2, 3, 4)))
        self.assertFalse(ops.is_vec4(Point(1, 2, 3)))
        self.assertFalse(ops.is_vec4(None))

    def test_is_finite(self):
        self.assertTrue(ops.is_finite(Point(1, 2, 3)))
        self.assertFalse(ops.is_finite(UnitVector(0, 0, 0)))
        self.assertFalse(ops.is_finite(Transform.from_matrix(np.zeros((4, 4)))))
        self.assertTrue(ops.is_finite(Frame.world()))
        self.assertFalse(ops.is_finite([1.0, math.nan]))
        self.assertTrue(ops.is_finite(np.ones(4)))

    def test_exported_at_package_level(self):
        self.assertIs(geopro.is_finite, ops.is_finite)
        self.assertIs(geopro.compose, ops.compose)
        # `map` is only reachable through geopro.operations
        self.assertFalse(hasattr(geopro, "map"))


if __name__ == "__main__":
    unittest.main()
