"""Rotation matrix operations for device orientation.

Matrices map device coordinates to a world frame with X east, Y north
and Z up. Device axes: X to the right of the screen, Y to the top of the
screen, Z out of the screen.
"""

from typing import Dict, Optional, Tuple
import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation

from .types import Orientation, ScreenRotation

STANDARD_GRAVITY = 9.80665

# Signed axis pairs (world X, world Y) for each screen rotation, as
# (axis index, sign) tuples.
_AXIS_X = (0, 1.0)
_AXIS_Y = (1, 1.0)
_AXIS_MINUS_X = (0, -1.0)
_AXIS_MINUS_Y = (1, -1.0)

REMAP_TABLE: Dict[ScreenRotation, Tuple[Tuple[int, float], Tuple[int, float]]] = {
    ScreenRotation.ROTATION_0: (_AXIS_X, _AXIS_Y),
    ScreenRotation.ROTATION_90: (_AXIS_Y, _AXIS_MINUS_X),
    ScreenRotation.ROTATION_180: (_AXIS_MINUS_X, _AXIS_MINUS_Y),
    ScreenRotation.ROTATION_270: (_AXIS_MINUS_Y, _AXIS_X),
}


class RotationOps:
    """Static methods for rotation matrix operations."""

    @staticmethod
    def from_rotation_vector(rotation_vector: NDArray[np.float64]) -> NDArray[np.float64]:
        """Convert a rotation-vector sample to a rotation matrix.

        The sample carries quaternion components [x, y, z] and optionally
        the scalar w. When w is missing it is derived from the unit norm.

        Args:
            rotation_vector: Rotation vector sample (3 or more values).

        Returns:
            3x3 rotation matrix.

        Raises:
            ValueError: If the quaternion has zero norm.
        """
        x, y, z = (float(v) for v in rotation_vector[:3])
        if len(rotation_vector) >= 4:
            w = float(rotation_vector[3])
        else:
            w = float(np.sqrt(max(0.0, 1.0 - x * x - y * y - z * z)))

        return Rotation.from_quat([x, y, z, w]).as_matrix()

    @staticmethod
    def from_gravity_and_geomagnetic(
        gravity: NDArray[np.float64],
        geomagnetic: NDArray[np.float64],
        min_gravity_ratio: float = 0.1,
        min_field_norm: float = 0.1
    ) -> Optional[NDArray[np.float64]]:
        """Build a rotation matrix from gravity and magnetic field.

        Constructs an orthonormal frame: east = field x gravity,
        north = gravity x east, up = gravity.

        Args:
            gravity: Accelerometer vector in m/s^2 (device frame).
            geomagnetic: Magnetometer vector in uT (device frame).
            min_gravity_ratio: Minimum gravity norm as a fraction of g.
            min_field_norm: Minimum norm of the east vector before
                normalization.

        Returns:
            3x3 rotation matrix, or None when the device is in free fall
            or the field is parallel to gravity.
        """
        acc = np.asarray(gravity, dtype=np.float64)
        mag = np.asarray(geomagnetic, dtype=np.float64)

        acc_norm = np.linalg.norm(acc)
        if acc_norm < min_gravity_ratio * STANDARD_GRAVITY:
            return None

        east = np.cross(mag, acc)
        east_norm = np.linalg.norm(east)
        if east_norm < min_field_norm:
            return None

        east = east / east_norm
        up = acc / acc_norm
        north = np.cross(up, east)

        return np.vstack([east, north, up])

    @staticmethod
    def remap_axes(
        R: NDArray[np.float64],
        screen_rotation: ScreenRotation
    ) -> NDArray[np.float64]:
        """Remap a rotation matrix for the current screen rotation.

        Args:
            R: 3x3 rotation matrix.
            screen_rotation: Current display rotation.

        Returns:
            Remapped 3x3 rotation matrix.
        """
        (x_axis, x_sign), (y_axis, y_sign) = REMAP_TABLE[screen_rotation]

        P = np.zeros((3, 3))
        P[0, x_axis] = x_sign
        P[1, y_axis] = y_sign
        P[2] = np.cross(P[0], P[1])

        return R @ P

    @staticmethod
    def to_orientation(R: NDArray[np.float64]) -> Orientation:
        """Extract azimuth, pitch and roll from a rotation matrix.

        Args:
            R: 3x3 rotation matrix.

        Returns:
            Orientation in degrees. Azimuth is in (-180, 180].
        """
        azimuth = np.arctan2(R[0, 1], R[1, 1])
        pitch = np.arcsin(np.clip(-R[2, 1], -1.0, 1.0))
        roll = np.arctan2(-R[2, 0], R[2, 2])

        return Orientation(
            azimuth_deg=float(np.rad2deg(azimuth)),
            pitch_deg=float(np.rad2deg(pitch)),
            roll_deg=float(np.rad2deg(roll)),
        )
