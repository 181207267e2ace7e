import math
import unittest
import numpy as np

from geopro import Projection, Transform, Frame, Point, Vector


class TestProjection(unittest.TestCase):
    def setUp(self):
        self.perspective = Projection.perspective(math.pi / 4, 1, 0.1, 100)
        self.orthographic = Projection.orthographic(-1, 1, -1, 1, 0.1, 100)

    def test_orthographic(self):
        p = self.orthographic.apply(Point(0, 0, -1))
        self.assertIsInstance(p, Point)
        self.assertAlmostEqual(p.x, 0.0)
        self.assertAlmostEqual(p.y, 0.0)
        self.assertAlmostEqual(p.z, -0.98198, places=5)
        self.assertEqual(p.w, 1.0)

    def test_orthographic_box_corners(self):
        near = self.orthographic.apply(Point(1, 1, -0.1))
        far = self.orthographic.apply(Point(-1, -1, -100))
        np.testing.assert_allclose(near.vec3(), [1, 1, -1], atol=1e-12)
        np.testing.assert_allclose(far.vec3(), [-1, -1, 1], atol=1e-12)

    def test_perspective(self):
        p = self.perspective.apply(Point(0, 0, -1))
        self.assertAlmostEqual(p.z, 0.8018, places=4)
        self.assertEqual(p.w, 1.0)

    def test_perspective_matrix(self):
        f = 1.0 / math.tan(math.pi / 8)
        expected = np.array([
            [f, 0, 0, 0],
            [0, f, 0, 0],
            [0, 0, -100.1 / 99.9, -20.0 / 99.9],
            [0, 0, -1, 0],
        ])
        np.testing.assert_allclose(self.perspective.direct_matrix, expected, atol=1e-12)

    def test_infinite_far_plane(self):
        p = Projection.perspective(math.pi / 4, 1, 0.1, math.inf).apply(Point(0, 0, -1))
        self.assertAlmostEqual(p.z, 0.8, places=12)
        self.assertTrue(Projection.perspective(math.pi / 4, 1, 0.1).is_finite())

    def test_round_trip(self):
        for proj in (self.perspective, self.orthographic):
            for point in (Point(0, 0, -1), Point(0.3, -0.2, -5), Point(2, 1, -50)):
                ndc = proj.apply(point)
                back = proj.invert().apply(ndc)
                np.testing.assert_allclose(back.vec3(), point.vec3(), atol=1e-5)

    def test_invert_is_projection(self):
        inv = self.perspective.invert()
        self.assertIsInstance(inv, Projection)
        np.testing.assert_array_equal(inv.direct_matrix, self.perspective.inverse_matrix)

    def test_zero_w_gives_nan_point(self):
        proj = Projection(np.diag([1.0, 1.0, 1.0, 0.0]))
        with self.assertLogs("geopro.projection", level="DEBUG"):
            p = proj.apply(Point(1, 2, 3))
        self.assertIsInstance(p, Point)
        self.assertTrue(all(math.isnan(c) for c in p.coordinates))
        self.assertFalse(p.is_finite())

    def test_vectors_skip_the_divide(self):
        v = self.perspective.apply(Vector(0, 0, -1))
        self.assertIsInstance(v, Vector)
        self.assertEqual(v.w, 0.0)
        self.assertAlmostEqual(v.z, 100.1 / 99.9)

    def test_compose_with_transform(self):
        composed = self.perspective.compose(Transform.from_translation(1, 0, 0))
        self.assertIsInstance(composed, Projection)
        p = composed.apply(Point(0, 0, -1))
        self.assertAlmostEqual(p.x, 1.0)
        self.assertAlmostEqual(p.z, 0.8018, places=4)

    def test_transform_then_projection(self):
        view = Transform.from_translation(0, 0, -1)
        composed = view.compose(self.perspective)
        self.assertIsInstance(composed, Projection)
        p = composed.apply(Point(0, 0, 0))
        self.assertAlmostEqual(p.z, 0.8018, places=4)
        # `@` dispatches to the projection apply
        q = composed @ Point(0, 0, 0)
        self.assertTrue(q.is_close(p))

    def test_to_transform(self):
        t = self.perspective.to_transform()
        self.assertIsInstance(t, Transform)
        self.assertFalse(self.perspective.is_frame())
        np.testing.assert_array_equal(t.direct_matrix, self.perspective.direct_matrix)

    def test_frame_compose_projection(self):
        camera = Frame.translation(Point(0, 0, 1))
        proj = camera.invert().compose(self.perspective)
        p = proj.apply(Point(0, 0, 0))
        self.assertAlmostEqual(p.z, 0.8018, places=4)


if __name__ == "__main__":
    unittest.main()
