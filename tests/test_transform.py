import math
import unittest
import numpy as np

from geopro import Transform, Rotation, Frame, Point, Vector, UnitVector


class TestTransformCreation(unittest.TestCase):
    def test_identity(self):
        t = Transform.identity()
        np.testing.assert_array_equal(t.direct_matrix, np.eye(4))
        np.testing.assert_array_equal(t.inverse_matrix, np.eye(4))
        self.assertTrue(t.is_identity)
        self.assertFalse(t.is_frame())
        self.assertEqual(Transform(), t)

    def test_from_translation(self):
        t = Transform.from_translation(1, 2, 3)
        expected = np.eye(4)
        expected[:3, 3] = [1, 2, 3]
        np.testing.assert_array_equal(t.direct_matrix, expected)
        self.assertEqual(t.direct(0, 3), 1.0)
        self.assertEqual(t.inverse(2, 3), -3.0)
        self.assertEqual(t.apply(Point(1, 1, 1)), Point(2, 3, 4))

    def test_from_move(self):
        t = Transform.from_move(Vector(1, 2, 3))
        self.assertEqual(t, Transform.from_translation(1, 2, 3))

    def test_from_rotation_axes(self):
        cases = [
            (Transform.from_rotation_x, Point(0, 1, 0), [0, 0, 1]),
            (Transform.from_rotation_y, Point(0, 0, 1), [1, 0, 0]),
            (Transform.from_rotation_z, Point(1, 0, 0), [0, 1, 0]),
        ]
        for builder, p, expected in cases:
            np.testing.assert_allclose(builder(math.pi / 2).apply(p).vec3(), expected, atol=1e-12)

    def test_from_scale(self):
        t = Transform.from_scale(2, 4, 8)
        np.testing.assert_allclose(t.direct_matrix, np.diag([2, 4, 8, 1]))
        np.testing.assert_allclose(t.inverse_matrix, np.diag([0.5, 0.25, 0.125, 1]))
        np.testing.assert_allclose(t.scale_vector.vec3(), [2, 4, 8])

    def test_zero_scale_is_not_finite(self):
        t = Transform.from_scale(0, 1, 1)
        self.assertFalse(t.is_finite())

    def test_from_roto_translation(self):
        t = Transform.from_roto_translation(Rotation.rotation_z(math.pi / 2), Vector(0, 0, 1))
        np.testing.assert_allclose(t.apply(Point(1, 0, 0)).vec3(), [0, 1, 1], atol=1e-12)

    def test_from_roto_translation_scale(self):
        t = Transform.from_roto_translation_scale(
            Rotation.rotation_z(math.pi / 2), Vector(0, 0, 1), Vector(2, 1, 1))
        # scale, then rotate, then translate
        np.testing.assert_allclose(t.apply(Point(1, 0, 0)).vec3(), [0, 2, 1], atol=1e-12)
        np.testing.assert_allclose(t.scale_vector.vec3(), [2, 1, 1], atol=1e-12)
        np.testing.assert_allclose(t.position_vector.vec3(), [0, 0, 1], atol=1e-12)
        np.testing.assert_allclose(t.direct_matrix @ t.inverse_matrix, np.eye(4), atol=1e-12)

    def test_from_matrix(self):
        m = np.array([
            [2, 0, 0, 1],
            [0, 1, 0, 2],
            [0, 0, 4, 3],
            [0, 0, 0, 1],
        ], dtype=float)
        t = Transform.from_matrix(m)
        np.testing.assert_allclose(t.inverse_matrix, np.linalg.inv(m), atol=1e-12)
        # the input is copied
        m[0, 0] = 100
        self.assertEqual(t.direct(0, 0), 2.0)

    def test_from_matrix_rejects_bad_shape(self):
        with self.assertRaises(ValueError):
            Transform.from_matrix(np.eye(3))

    def test_from_singular_matrix_is_not_finite(self):
        t = Transform.from_matrix(np.zeros((4, 4)))
        self.assertFalse(t.is_finite())

    def test_from_matrices(self):
        d = Transform.from_translation(1, 0, 0)
        t = Transform.from_matrices(d.direct_matrix, d.inverse_matrix)
        self.assertEqual(t, d)

    def test_look_at(self):
        t = Transform.look_at(Point(0, 0, 5), Point(0, 0, 0), UnitVector(0, 1, 0))
        np.testing.assert_allclose(t.apply(Point(0, 0, 0)).vec3(), [0, 0, -5], atol=1e-12)
        np.testing.assert_allclose(t.apply(Point(0, 0, 5)).vec3(), [0, 0, 0], atol=1e-12)
        np.testing.assert_allclose(t.direct_matrix @ t.inverse_matrix, np.eye(4), atol=1e-12)

    def test_look_at_degenerate_is_identity(self):
        t = Transform.look_at(Point(1, 1, 1), Point(1, 1, 1), UnitVector(0, 1, 0))
        self.assertTrue(t.is_identity)


class TestTransformAlgebra(unittest.TestCase):
    def setUp(self):
        self.transforms = [
            Transform.from_translation(1, -2, 3),
            Transform.from_rotation(Rotation.from_angles(0.3, -0.5, 1.2)),
            Transform.from_scale(2, 3, 0.5),
            Transform.from_roto_translation_scale(
                Rotation.from_angles(1.0, 0.2, -0.4), Vector(5, 6, 7), Vector(1, 2, 3)),
            Transform.look_at(Point(3, 4, 5), Point(0, 1, 0), UnitVector(0, 1, 0)),
        ]

    def test_compose_with_inverse_is_identity(self):
        for t in self.transforms:
            c = t.compose(t.invert())
            self.assertTrue(c.is_identity)
            np.testing.assert_allclose(c.direct_matrix, np.eye(4), atol=1e-9)
            np.testing.assert_allclose(c.inverse_matrix, np.eye(4), atol=1e-9)

    def test_invert_swaps_matrices(self):
        t = self.transforms[3]
        inv = t.invert()
        np.testing.assert_array_equal(inv.direct_matrix, t.inverse_matrix)
        np.testing.assert_array_equal(inv.inverse_matrix, t.direct_matrix)

    def test_compose_order(self):
        move = Transform.from_translation(1, 0, 0)
        turn = Transform.from_rotation_z(math.pi / 2)
        # move first, then turn
        np.testing.assert_allclose(move.compose(turn).apply(Point(0, 0, 0)).vec3(), [0, 1, 0], atol=1e-12)
        # turn first, then move
        np.testing.assert_allclose(turn.compose(move).apply(Point(0, 0, 0)).vec3(), [1, 0, 0], atol=1e-12)

    def test_compose_result_inverse(self):
        a = self.transforms[1]
        b = self.transforms[0]
        c = a.compose(b)
        np.testing.assert_allclose(c.direct_matrix @ c.inverse_matrix, np.eye(4), atol=1e-12)

    def test_matmul(self):
        move = Transform.from_translation(1, 0, 0)
        turn = Transform.from_rotation_z(math.pi / 2)
        self.assertEqual(turn @ move, move.compose(turn))
        p = (turn @ move) @ Point(0, 0, 0)
        np.testing.assert_allclose(p.vec3(), [0, 1, 0], atol=1e-12)

    def test_compose_rejects_other_types(self):
        with self.assertRaises(TypeError):
            Transform.identity().compose(Rotation.identity())
        with self.assertRaises(TypeError):
            Transform.identity().apply(np.zeros(4))

    def test_relative(self):
        frame = Frame.rotation_z(Point(0, 0, 0), math.pi / 2)
        t = Transform.from_translation(1, 0, 0).relative(frame)
        self.assertIsInstance(t, Transform)
        # a move along the x axis of the rotated frame is a world move along y
        np.testing.assert_allclose(t.position_vector.vec3(), [0, 1, 0], atol=1e-12)

    def test_relative_to_translated_frame(self):
        frame = Frame.translation(Point(10, 0, 0))
        m = Transform.from_rotation_z(math.pi / 2)
        t = m.relative(frame)
        ft = frame.to_transform()
        self.assertTrue(t.is_close(ft.invert().compose(m).compose(ft)))
        # rotation about the frame origin rather than the world one
        np.testing.assert_allclose(t.apply(Point(11, 0, 0)).vec3(), [10, 1, 0], atol=1e-12)
        np.testing.assert_allclose(t.position_vector.vec3(), [10, -10, 0], atol=1e-12)
        np.testing.assert_allclose(t.apply(Point(10, 0, 0)).vec3(), [10, 0, 0], atol=1e-12)

    def test_absolute_undoes_relative(self):
        frame = Frame.rotation_x(Point(1, 2, 3), 0.7)
        t = self.transforms[3]
        self.assertTrue(t.relative(frame).absolute(frame).is_close(t))
        self.assertTrue(frame.absolute(frame.relative(t)).is_close(t))

    def test_relative_to_world_is_unchanged(self):
        t = self.transforms[3]
        self.assertTrue(t.relative(Frame.world()).is_close(t))

    def test_transpose(self):
        t = Transform.from_rotation(Rotation.from_angles(0.1, 0.2, 0.3))
        np.testing.assert_allclose(t.transpose().direct_matrix, t.inverse_matrix, atol=1e-12)

    def test_is_identity_falls_back_to_comparison(self):
        t = Transform.from_translation(1, 1, 1).compose(Transform.from_translation(-1, -1, -1))
        self.assertTrue(t.is_identity)
        self.assertFalse(Transform.from_translation(1, 0, 0).is_identity)

    def test_repr(self):
        self.assertTrue(repr(Transform.identity()).startswith("Transform(direct="))


if __name__ == "__main__":
    unittest.main()
