"""Easing curves and interpolation of scalars, vectors, rotations, tracks and transforms."""

from __future__ import annotations

import math
import struct
import sys
from dataclasses import dataclass, field
from typing import Sequence

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]
Quat = tuple[float, float, float, float]

_EPSILON = sys.float_info.epsilon


def _coeff_a(c1: float, c2: float) -> float:
    return 1.0 - 3.0 * c2 + 3.0 * c1


def _coeff_b(c1: float, c2: float) -> float:
    return 3.0 * c2 - 6.0 * c1


def _coeff_c(c1: float) -> float:
    return 3.0 * c1


def _bezier(d: float, c1: float, c2: float) -> float:
    return ((_coeff_a(c1, c2) * d + _coeff_b(c1, c2)) * d + _coeff_c(c1)) * d


def _slope(d: float, c1: float, c2: float) -> float:
    return 3.0 * _coeff_a(c1, c2) * d * d + 2.0 * _coeff_b(c1, c2) * d + _coeff_c(c1)


class CubicBezierEasing:
    """A cubic Bézier easing curve running from (0, 0) to (1, 1)."""

    def __init__(self, p1: Sequence[float], p2: Sequence[float]) -> None:
        self.p1: Vec2 = (float(p1[0]), float(p1[1]))
        self.p2: Vec2 = (float(p2[0]), float(p2[1]))

    def get(self, x: float) -> float:
        """Map time ``x`` in [0, 1] to the eased progress."""
        (x1, y1), (x2, y2) = self.p1, self.p2
        if x1 == y1 and x2 == y2:
            return x
        return _bezier(self._percent(x), y1, y2)

    def _percent(self, x: float) -> float:
        # Newton-Raphson search for the curve parameter whose x equals ``x``.
        x1, x2 = self.p1[0], self.p2[0]
        guess = x
        for _ in range(32):
            slope = _slope(guess, x1, x2)
            if slope == 0.0:
                return guess
            guess -= (_bezier(guess, x1, x2) - x) / slope
        return guess


def _like(start, end, value):
    """Truncate towards zero when both endpoints are integers."""
    if isinstance(start, int) and isinstance(end, int):
        return int(value)
    return value


def lerp(start, end, t: float):
    """Linear interpolation; integer endpoints give a truncated integer."""
    return _like(start, end, start + (end - start) * t)


def ease(start, end, control1: Sequence[float], control2: Sequence[float], t: float):
    """Interpolate along a cubic Bézier easing curve."""
    factor = CubicBezierEasing(control1, control2).get(t)
    return _like(start, end, start + (end - start) * factor)


def _check_dim(start: Sequence, end: Sequence) -> None:
    if len(start) != len(end) or not 2 <= len(start) <= 4:
        raise ValueError("vectors must have the same dimension, between 2 and 4")


def lerp_vec(start: Sequence, end: Sequence, t: float) -> tuple:
    """Component-wise linear interpolation of a 2-, 3- or 4-vector."""
    _check_dim(start, end)
    return tuple(lerp(a, b, t) for a, b in zip(start, end))


def ease_vec(start: Sequence, end: Sequence, control1: Sequence[float], control2: Sequence[float], t: float) -> tuple:
    """Component-wise eased interpolation of a 2-, 3- or 4-vector."""
    _check_dim(start, end)
    factor = CubicBezierEasing(control1, control2).get(t)
    return tuple(_like(a, b, a + (b - a) * factor) for a, b in zip(start, end))


def _quat_from_euler(angles: Vec3) -> Quat:
    cx, cy, cz = (math.cos(a * 0.5) for a in angles)
    sx, sy, sz = (math.sin(a * 0.5) for a in angles)
    return (
        cx * cy * cz + sx * sy * sz,
        sx * cy * cz - cx * sy * sz,
        cx * sy * cz + sx * cy * sz,
        cx * cy * sz - sx * sy * cz,
    )


def _slerp(q1: Quat, q2: Quat, a: float) -> Quat:
    cos_theta = sum(p * q for p, q in zip(q1, q2))
    if cos_theta < 0.0:
        q2 = tuple(-c for c in q2)
        cos_theta = -cos_theta
    if cos_theta > 1.0 - _EPSILON:
        return tuple(p + (q - p) * a for p, q in zip(q1, q2))
    angle = math.acos(cos_theta)
    s = math.sin(angle)
    w1, w2 = math.sin((1.0 - a) * angle), math.sin(a * angle)
    return tuple((w1 * p + w2 * q) / s for p, q in zip(q1, q2))


def _near_zero(*values: float) -> bool:
    return all(abs(v) <= _EPSILON for v in values)


def _euler_from_quat(q: Quat) -> Vec3:
    w, x, y, z = q
    pitch_y = 2.0 * (y * z + w * x)
    pitch_x = w * w - x * x - y * y + z * z
    pitch = 2.0 * math.atan2(x, w) if _near_zero(pitch_y, pitch_x) else math.atan2(pitch_y, pitch_x)
    yaw = math.asin(max(-1.0, min(1.0, -2.0 * (x * z - w * y))))
    roll_y = 2.0 * (x * y + w * z)
    roll_x = w * w + x * x - y * y - z * z
    roll = 0.0 if _near_zero(roll_y, roll_x) else math.atan2(roll_y, roll_x)
    return pitch, yaw, roll


def interpolate_rotation(start: Sequence[float], end: Sequence[float], t: float) -> Vec3:
    """Spherically interpolate two Euler rotations given in degrees."""
    q1 = _quat_from_euler(tuple(math.radians(a) for a in start))
    q2 = _quat_from_euler(tuple(math.radians(a) for a in end))
    return tuple(math.degrees(a) for a in _euler_from_quat(_slerp(q1, q2, t)))


@dataclass
class LensDistortion:
    """Lens distortion parameters of a camera track."""

    center_shift: Vec2 = (0.0, 0.0)
    k1k2: Vec2 = (0.0, 0.0)
    distortion_scale: float = 0.0


_TRACK_LAYOUT = struct.Struct("<20f")
_TRANSFORM_LAYOUT = struct.Struct("<9d")


@dataclass
class Track:
    """Camera tracking data; serialised as twenty little-endian 32-bit floats."""

    location: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    fov: float = 0.0
    focus: float = 0.0
    zoom: float = 0.0
    render_ratio: float = 0.0
    sensor_size: Vec2 = (0.0, 0.0)
    pixel_aspect_ratio: float = 0.0
    nodal_offset: float = 0.0
    focus_distance: float = 0.0
    lens_distortion: LensDistortion = field(default_factory=LensDistortion)

    def to_bytes(self) -> bytes:
        ld = self.lens_distortion
        return _TRACK_LAYOUT.pack(
            *self.location,
            *self.rotation,
            self.fov,
            self.focus,
            self.zoom,
            self.render_ratio,
            *self.sensor_size,
            self.pixel_aspect_ratio,
            self.nodal_offset,
            self.focus_distance,
            *ld.center_shift,
            *ld.k1k2,
            ld.distortion_scale,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> Track:
        v = _TRACK_LAYOUT.unpack(bytes(data))
        return cls(
            location=v[0:3],
            rotation=v[3:6],
            fov=v[6],
            focus=v[7],
            zoom=v[8],
            render_ratio=v[9],
            sensor_size=v[10:12],
            pixel_aspect_ratio=v[12],
            nodal_offset=v[13],
            focus_distance=v[14],
            lens_distortion=LensDistortion(v[15:17], v[17:19], v[19]),
        )


@dataclass
class Transform:
    """Position, Euler rotation in degrees and scale; serialised as nine little-endian doubles."""

    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (0.0, 0.0, 0.0)

    def to_bytes(self) -> bytes:
        return _TRANSFORM_LAYOUT.pack(*self.position, *self.rotation, *self.scale)

    @classmethod
    def from_bytes(cls, data: bytes) -> Transform:
        v = _TRANSFORM_LAYOUT.unpack(bytes(data))
        return cls(position=v[0:3], rotation=v[3:6], scale=v[6:9])


def lerp_track(start: Track, end: Track, t: float) -> Track:
    """Interpolate every field of two tracks; the rotation spherically."""
    a, b = start.lens_distortion, end.lens_distortion
    return Track(
        location=lerp_vec(start.location, end.location, t),
        rotation=interpolate_rotation(start.rotation, end.rotation, t),
        fov=lerp(start.fov, end.fov, t),
        focus=lerp(start.focus, end.focus, t),
        zoom=lerp(start.zoom, end.zoom, t),
        render_ratio=lerp(start.render_ratio, end.render_ratio, t),
        sensor_size=lerp_vec(start.sensor_size, end.sensor_size, t),
        pixel_aspect_ratio=lerp(start.pixel_aspect_ratio, end.pixel_aspect_ratio, t),
        nodal_offset=lerp(start.nodal_offset, end.nodal_offset, t),
        focus_distance=lerp(start.focus_distance, end.focus_distance, t),
        lens_distortion=LensDistortion(
            center_shift=lerp_vec(a.center_shift, b.center_shift, t),
            k1k2=lerp_vec(a.k1k2, b.k1k2, t),
            distortion_scale=lerp(a.distortion_scale, b.distortion_scale, t),
        ),
    )


def lerp_transform(start: Transform, end: Transform, t: float) -> Transform:
    """Linearly interpolate two transforms; the rotation spherically."""
    return Transform(
        position=lerp_vec(start.position, end.position, t),
        rotation=interpolate_rotation(start.rotation, end.rotation, t),
        scale=lerp_vec(start.scale, end.scale, t),
    )


def ease_transform(
    start: Transform, end: Transform, control1: Sequence[float], control2: Sequence[float], t: float
) -> Transform:
    """Interpolate two transforms along a cubic Bézier easing curve."""
    eased = CubicBezierEasing(control1, control2).get(t)
    return Transform(
        position=ease_vec(start.position, end.position, control1, control2, t),
        rotation=interpolate_rotation(start.rotation, end.rotation, eased),
        scale=ease_vec(start.scale, end.scale, control1, control2, t),
    )