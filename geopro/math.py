# math.py
import math
import numpy as np
from numpy import float64 as np_float64
from numpy import ndarray
from numba import njit

from numba.core.errors import NumbaPerformanceWarning
import warnings
warnings.filterwarnings("ignore", category=NumbaPerformanceWarning)

# tolerance for parallelism and degeneracy checks
EPSILON = 1e-6

# NOTE: kernels below are compiled with error_model="numpy" and without
# fastmath, so divisions by zero produce inf/nan instead of raising.


@njit(cache=True, error_model="numpy")
def inv4(m):
    """
    Analytic inverse of a 4x4 matrix.

    A singular matrix is not rejected: the reciprocal of a zero determinant
    is infinite and the result is filled with non-finite values.
    """
    s0 = m[0, 0]*m[1, 1] - m[1, 0]*m[0, 1]
    s1 = m[0, 0]*m[1, 2] - m[1, 0]*m[0, 2]
    s2 = m[0, 0]*m[1, 3] - m[1, 0]*m[0, 3]
    s3 = m[0, 1]*m[1, 2] - m[1, 1]*m[0, 2]
    s4 = m[0, 1]*m[1, 3] - m[1, 1]*m[0, 3]
    s5 = m[0, 2]*m[1, 3] - m[1, 2]*m[0, 3]

    c5 = m[2, 2]*m[3, 3] - m[3, 2]*m[2, 3]
    c4 = m[2, 1]*m[3, 3] - m[3, 1]*m[2, 3]
    c3 = m[2, 1]*m[3, 2] - m[3, 1]*m[2, 2]
    c2 = m[2, 0]*m[3, 3] - m[3, 0]*m[2, 3]
    c1 = m[2, 0]*m[3, 2] - m[3, 0]*m[2, 2]
    c0 = m[2, 0]*m[3, 1] - m[3, 0]*m[2, 1]

    det = (s0*c5 - s1*c4 + s2*c3 + s3*c2 - s4*c1 + s5*c0)
    inv_det = 1.0 / det

    # adjugate (transposed cofactor matrix)
    out = np.empty((4, 4), dtype=np_float64)

    out[0, 0] = (m[1, 1]*c5 - m[1, 2]*c4 + m[1, 3]*c3) * inv_det
    out[0, 1] = (-m[0, 1]*c5 + m[0, 2]*c4 - m[0, 3]*c3) * inv_det
    out[0, 2] = (m[3, 1]*s5 - m[3, 2]*s4 + m[3, 3]*s3) * inv_det
    out[0, 3] = (-m[2, 1]*s5 + m[2, 2]*s4 - m[2, 3]*s3) * inv_det

    out[1, 0] = (-m[1, 0]*c5 + m[1, 2]*c2 - m[1, 3]*c1) * inv_det
    out[1, 1] = (m[0, 0]*c5 - m[0, 2]*c2 + m[0, 3]*c1) * inv_det
    out[1, 2] = (-m[3, 0]*s5 + m[3, 2]*s2 - m[3, 3]*s1) * inv_det
    out[1, 3] = (m[2, 0]*s5 - m[2, 2]*s2 + m[2, 3]*s1) * inv_det

    out[2, 0] = (m[1, 0]*c4 - m[1, 1]*c2 + m[1, 3]*c0) * inv_det
    out[2, 1] = (-m[0, 0]*c4 + m[0, 1]*c2 - m[0, 3]*c0) * inv_det
    out[2, 2] = (m[3, 0]*s4 - m[3, 1]*s2 + m[3, 3]*s0) * inv_det
    out[2, 3] = (-m[2, 0]*s4 + m[2, 1]*s2 - m[2, 3]*s0) * inv_det

    out[3, 0] = (-m[1, 0]*c3 + m[1, 1]*c1 - m[1, 2]*c0) * inv_det
    out[3, 1] = (m[0, 0]*c3 - m[0, 1]*c1 + m[0, 2]*c0) * inv_det
    out[3, 2] = (-m[3, 0]*s3 + m[3, 1]*s1 - m[3, 2]*s0) * inv_det
    out[3, 3] = (m[2, 0]*s3 - m[2, 1]*s1 + m[2, 2]*s0) * inv_det

    return out


@njit(cache=True)
def quaternion_to_rotation(quaternion: ndarray) -> ndarray:
    """
    Convert a quaternion [x, y, z, w] to a 3x3 rotation matrix.

    Parameters:
        quaternion (ndarray): A 4-element array, scalar part last.

    Returns:
        ndarray: A 3x3 rotation matrix corresponding to the input quaternion.
    """
    x, y, z, w = quaternion[0], quaternion[1], quaternion[2], quaternion[3]

    # precompute products
    xx = x*x
    yy = y*y
    zz = z*z
    xy = x*y
    xz = x*z
    yz = y*z
    wx = w*x
    wy = w*y
    wz = w*z

    R = np.empty((3, 3), dtype=np_float64)
    R[0, 0] = 1 - 2*(yy + zz)
    R[0, 1] = 2*(xy - wz)
    R[0, 2] = 2*(xz + wy)

    R[1, 0] = 2*(xy + wz)
    R[1, 1] = 1 - 2*(xx + zz)
    R[1, 2] = 2*(yz - wx)

    R[2, 0] = 2*(xz - wy)
    R[2, 1] = 2*(yz + wx)
    R[2, 2] = 1 - 2*(xx + yy)
    return R


@njit(cache=True, error_model="numpy")
def rotation_to_quaternion(rotation: ndarray) -> ndarray:
    """
    Converts a 3x3 rotation matrix to a normalized quaternion [x, y, z, w].

    The columns are normalized first, so the rotational part of a scaled
    matrix is extracted. Depending on the trace, the branch with the largest
    pivot is used for numerical stability.

    Parameters:
        rotation (array_like): A 3x3 matrix whose columns are orthogonal.

    Returns:
        numpy.ndarray: A 1D array of 4 floats, scalar part last.
    """
    R = np.empty((3, 3), dtype=np_float64)
    for c in range(3):
        n = math.sqrt(rotation[0, c]*rotation[0, c] + rotation[1, c]
                      * rotation[1, c] + rotation[2, c]*rotation[2, c])
        for r in range(3):
            R[r, c] = rotation[r, c] / n

    a00, a01, a02 = R[0, 0], R[0, 1], R[0, 2]
    a10, a11, a12 = R[1, 0], R[1, 1], R[1, 2]
    a20, a21, a22 = R[2, 0], R[2, 1], R[2, 2]

    tr = a00 + a11 + a22

    if tr > 0.0:
        S = math.sqrt(tr + 1.0) * 2.0
        qw = 0.25 * S
        qx = (a21 - a12) / S
        qy = (a02 - a20) / S
        qz = (a10 - a01) / S
    else:
        # pick largest diagonal element
        if a00 > a11 and a00 > a22:
            S = math.sqrt(1.0 + a00 - a11 - a22) * 2.0
            qw = (a21 - a12) / S
            qx = 0.25 * S
            qy = (a01 + a10) / S
            qz = (a02 + a20) / S
        elif a11 > a22:
            S = math.sqrt(1.0 + a11 - a00 - a22) * 2.0
            qw = (a02 - a20) / S
            qx = (a01 + a10) / S
            qy = 0.25 * S
            qz = (a12 + a21) / S
        else:
            S = math.sqrt(1.0 + a22 - a00 - a11) * 2.0
            qw = (a10 - a01) / S
            qx = (a02 + a20) / S
            qy = (a12 + a21) / S
            qz = 0.25 * S

    # normalize (guards against numerical drift)
    norm = math.sqrt(qx*qx + qy*qy + qz*qz + qw*qw)

    out = np.empty(4, dtype=np_float64)
    out[0], out[1], out[2], out[3] = qx/norm, qy/norm, qz/norm, qw/norm
    return out


@njit(cache=True)
def rotation_to_euler(rotation: ndarray) -> tuple[float, float, float]:
    """
    Converts a 3x3 rotation matrix R = Rz @ Ry @ Rx to the angles (x, y, z)
    in radians.
    """
    sp = -rotation[2, 0]
    if sp > 1.0:
        sp = 1.0
    elif sp < -1.0:
        sp = -1.0
    pitch = np.arcsin(sp)

    cp = np.cos(pitch)
    roll = np.arctan2(rotation[2, 1]/cp, rotation[2, 2]/cp)
    yaw = np.arctan2(rotation[1, 0]/cp, rotation[0, 0]/cp)
    return roll, pitch, yaw


@njit(cache=True)
def euler_to_quaternion(ax: float, ay: float, az: float) -> ndarray:
    """
    Quaternion [x, y, z, w] of the rotation about the fixed X axis by `ax`,
    then about Y by `ay`, then about Z by `az` (radians).

    The matching matrix is R = Rz(az) @ Ry(ay) @ Rx(ax), so q = qz * qy * qx.
    """
    hr, hp, hy = ax*0.5, ay*0.5, az*0.5
    sr, cr = np.sin(hr), np.cos(hr)
    sp, cp = np.sin(hp), np.cos(hp)
    sy, cy = np.sin(hy), np.cos(hy)

    out = np.empty(4, dtype=np_float64)
    out[0] = sr*cp*cy - cr*sp*sy
    out[1] = cr*sp*cy + sr*cp*sy
    out[2] = cr*cp*sy - sr*sp*cy
    out[3] = cr*cp*cy + sr*sp*sy
    return out


@njit(cache=True, error_model="numpy")
def axis_angle_to_quaternion(axis: ndarray, angle: float) -> ndarray:
    """Quaternion [x, y, z, w] rotating by `angle` radians about `axis`."""
    n = math.sqrt(axis[0]*axis[0] + axis[1]*axis[1] + axis[2]*axis[2])
    s = math.sin(angle * 0.5) / n
    out = np.empty(4, dtype=np_float64)
    out[0] = axis[0] * s
    out[1] = axis[1] * s
    out[2] = axis[2] * s
    out[3] = math.cos(angle * 0.5)
    return out


@njit(cache=True)
def quaternion_multiply(a: ndarray, b: ndarray) -> ndarray:
    """Hamilton product a * b of two [x, y, z, w] quaternions."""
    ax, ay, az, aw = a[0], a[1], a[2], a[3]
    bx, by, bz, bw = b[0], b[1], b[2], b[3]
    out = np.empty(4, dtype=np_float64)
    out[0] = ax * bw + aw * bx + ay * bz - az * by
    out[1] = ay * bw + aw * by + az * bx - ax * bz
    out[2] = az * bw + aw * bz + ax * by - ay * bx
    out[3] = aw * bw - ax * bx - ay * by - az * bz
    return out


@njit(cache=True, error_model="numpy")
def quaternion_inverse(q: ndarray) -> ndarray:
    """Inverse of a [x, y, z, w] quaternion: conjugate over squared norm."""
    d = q[0]*q[0] + q[1]*q[1] + q[2]*q[2] + q[3]*q[3]
    out = np.empty(4, dtype=np_float64)
    out[0] = -q[0] / d
    out[1] = -q[1] / d
    out[2] = -q[2] / d
    out[3] = q[3] / d
    return out


@njit(cache=True, error_model="numpy")
def trs_matrix(translation: ndarray, rotation: ndarray, scale: ndarray) -> ndarray:
    """4x4 matrix T @ R @ S: scale first, then rotate, then translate."""
    m = np.eye(4, dtype=np_float64)
    for c in range(3):
        for r in range(3):
            m[r, c] = rotation[r, c] * scale[c]
        m[c, 3] = translation[c]
    return m


@njit(cache=True, error_model="numpy")
def trs_inverse_matrix(translation: ndarray, rotation: ndarray, scale: ndarray) -> ndarray:
    """Exact inverse of `trs_matrix`: S⁻¹ @ Rᵀ @ T⁻¹."""
    m = np.eye(4, dtype=np_float64)
    for r in range(3):
        for c in range(3):
            m[r, c] = rotation[c, r] / scale[r]
    for r in range(3):
        m[r, 3] = -(m[r, 0]*translation[0] + m[r, 1]
                    * translation[1] + m[r, 2]*translation[2])
    return m


@njit(cache=True, error_model="numpy")
def look_at_matrix(eye: ndarray, target: ndarray, up: ndarray) -> ndarray:
    """
    View matrix mapping world coordinates into the camera frame placed at
    `eye`, looking at `target` (camera -Z axis), with `up` hinting the Y axis.

    Returns the identity when `eye` and `target` coincide within EPSILON.
    """
    if (abs(eye[0] - target[0]) < EPSILON
            and abs(eye[1] - target[1]) < EPSILON
            and abs(eye[2] - target[2]) < EPSILON):
        return np.eye(4, dtype=np_float64)

    z0 = eye[0] - target[0]
    z1 = eye[1] - target[1]
    z2 = eye[2] - target[2]
    n = 1.0 / math.sqrt(z0*z0 + z1*z1 + z2*z2)
    z0 *= n
    z1 *= n
    z2 *= n

    x0 = up[1]*z2 - up[2]*z1
    x1 = up[2]*z0 - up[0]*z2
    x2 = up[0]*z1 - up[1]*z0
    n = math.sqrt(x0*x0 + x1*x1 + x2*x2)
    if n == 0.0:
        x0 = x1 = x2 = 0.0
    else:
        x0 /= n
        x1 /= n
        x2 /= n

    y0 = z1*x2 - z2*x1
    y1 = z2*x0 - z0*x2
    y2 = z0*x1 - z1*x0
    n = math.sqrt(y0*y0 + y1*y1 + y2*y2)
    if n == 0.0:
        y0 = y1 = y2 = 0.0
    else:
        y0 /= n
        y1 /= n
        y2 /= n

    out = np.eye(4, dtype=np_float64)
    out[0, 0], out[0, 1], out[0, 2] = x0, x1, x2
    out[1, 0], out[1, 1], out[1, 2] = y0, y1, y2
    out[2, 0], out[2, 1], out[2, 2] = z0, z1, z2
    out[0, 3] = -(x0*eye[0] + x1*eye[1] + x2*eye[2])
    out[1, 3] = -(y0*eye[0] + y1*eye[1] + y2*eye[2])
    out[2, 3] = -(z0*eye[0] + z1*eye[1] + z2*eye[2])
    return out


@njit(cache=True, error_model="numpy")
def perspective_matrix(fovy: float, aspect: float, near: float, far: float) -> ndarray:
    """
    OpenGL perspective matrix mapping the view frustum to clip space with z
    in [-1, 1]. An infinite `far` gives the infinite-far-plane limit.
    """
    f = 1.0 / math.tan(fovy / 2.0)
    out = np.zeros((4, 4), dtype=np_float64)
    out[0, 0] = f / aspect
    out[1, 1] = f
    out[3, 2] = -1.0
    if math.isinf(far):
        out[2, 2] = -1.0
        out[2, 3] = -2.0 * near
    else:
        nf = 1.0 / (near - far)
        out[2, 2] = (far + near) * nf
        out[2, 3] = 2.0 * far * near * nf
    return out


@njit(cache=True, error_model="numpy")
def orthographic_matrix(left: float, right: float, bottom: float, top: float, near: float, far: float) -> ndarray:
    """OpenGL orthographic matrix mapping the view box to the [-1, 1] cube."""
    lr = 1.0 / (left - right)
    bt = 1.0 / (bottom - top)
    nf = 1.0 / (near - far)
    out = np.eye(4, dtype=np_float64)
    out[0, 0] = -2.0 * lr
    out[1, 1] = -2.0 * bt
    out[2, 2] = 2.0 * nf
    out[0, 3] = (left + right) * lr
    out[1, 3] = (top + bottom) * bt
    out[2, 3] = (far + near) * nf
    return out
