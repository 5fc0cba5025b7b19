"""Time-scheduled animation of pin values."""

from __future__ import annotations

import copy
import enum
import heapq
import itertools
import logging
import struct
import threading
import time
from dataclasses import dataclass
from typing import Callable, ClassVar, Hashable, Sequence, Union

from nosplug.easing import (
    CubicBezierEasing,
    Track,
    Transform,
    ease,
    ease_transform,
    ease_vec,
    lerp,
    lerp_track,
    lerp_transform,
    lerp_vec,
)

_log = logging.getLogger(__name__)


class Interpolation(enum.Enum):
    """How an animation moves from its start value to its end value."""

    CONSTANT = "Constant"
    LERP = "Lerp"
    CUBIC_BEZIER = "CubicBezier"


@dataclass
class LerpInterp:
    """Linear interpolation; an empty start is taken from the pin's current value."""

    start: bytes = b""
    end: bytes = b""
    mode: ClassVar[Interpolation] = Interpolation.LERP


@dataclass
class CubicBezierInterp:
    """Eased interpolation; an empty start is taken from the pin's current value."""

    start: bytes = b""
    end: bytes = b""
    control1: tuple[float, float] = (0.0, 0.0)
    control2: tuple[float, float] = (1.0, 1.0)
    mode: ClassVar[Interpolation] = Interpolation.CUBIC_BEZIER


@dataclass
class ConstantInterp:
    """Holds the pin at one value for the animation's duration."""

    value: bytes = b""
    mode: ClassVar[Interpolation] = Interpolation.CONSTANT


Interp = Union[LerpInterp, CubicBezierInterp, ConstantInterp]
InterpolatorFn = Callable[[Interp, float], bytes]


@dataclass
class AnimatePin:
    """A request to animate a pin, with duration and delay in milliseconds."""

    interpolate: Interp
    duration: int = 0
    delay: int = 0
    pin_path: str = ""


@dataclass
class AnimationData:
    """A scheduled animation of one pin."""

    pin_id: Hashable
    type_name: str
    interp: Interp
    start_time: int
    duration: int
    started: bool = False


@dataclass
class PathInfo:
    """Frame bookkeeping of a running execution path."""

    start_fsm: int = 0
    cur_frame: int = 0


def milliseconds_to_frame_number(ms: int, delta_seconds: Sequence[int]) -> int:
    """Convert milliseconds to frames for a frame time of ``x / y`` seconds."""
    x, y = delta_seconds
    return (ms * y) // x // 1000


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


_SCALAR_FORMATS = {
    "int": "i",
    "float": "f",
    "double": "d",
    "byte": "b",
    "short": "h",
    "long": "i",
    "ulong": "q",
    "ubyte": "B",
    "ushort": "H",
}

_VECTOR_FORMATS = {
    "nos.fb.vec2": "2f",
    "nos.fb.vec3": "3f",
    "nos.fb.vec4": "4f",
    "nos.fb.vec2d": "2d",
    "nos.fb.vec3d": "3d",
    "nos.fb.vec4d": "4d",
    "nos.fb.vec2u": "2I",
    "nos.fb.vec3u": "3I",
    "nos.fb.vec4u": "4I",
    "nos.fb.vec2i": "2i",
    "nos.fb.vec3i": "3i",
    "nos.fb.vec4i": "4i",
    "nos.fb.vec4u8": "4B",
}


def _scalar_interpolators(layout: struct.Struct) -> tuple[InterpolatorFn, InterpolatorFn]:
    def lerp_fn(interp, t):
        (start,), (end,) = layout.unpack(interp.start), layout.unpack(interp.end)
        return layout.pack(lerp(start, end, t))

    def bezier_fn(interp, t):
        (start,), (end,) = layout.unpack(interp.start), layout.unpack(interp.end)
        return layout.pack(ease(start, end, interp.control1, interp.control2, t))

    return lerp_fn, bezier_fn


def _vector_interpolators(layout: struct.Struct) -> tuple[InterpolatorFn, InterpolatorFn]:
    def lerp_fn(interp, t):
        return layout.pack(*lerp_vec(layout.unpack(interp.start), layout.unpack(interp.end), t))

    def bezier_fn(interp, t):
        start, end = layout.unpack(interp.start), layout.unpack(interp.end)
        return layout.pack(*ease_vec(start, end, interp.control1, interp.control2, t))

    return lerp_fn, bezier_fn


def _track_lerp(interp, t):
    return lerp_track(Track.from_bytes(interp.start), Track.from_bytes(interp.end), t).to_bytes()


def _track_bezier(interp, t):
    eased = CubicBezierEasing(interp.control1, interp.control2).get(t)
    return lerp_track(Track.from_bytes(interp.start), Track.from_bytes(interp.end), eased).to_bytes()


def _transform_lerp(interp, t):
    return lerp_transform(Transform.from_bytes(interp.start), Transform.from_bytes(interp.end), t).to_bytes()


def _transform_bezier(interp, t):
    start, end = Transform.from_bytes(interp.start), Transform.from_bytes(interp.end)
    return ease_transform(start, end, interp.control1, interp.control2, t).to_bytes()


class PinDataAnimator:
    """Schedules animations per pin and produces each frame's pin value."""

    def __init__(
        self,
        set_pin_value: Callable[[Hashable, bytes], None] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._set_pin_value = set_pin_value
        self._clock = clock or _now_ms
        self._lock = threading.RLock()
        self._path_lock = threading.Lock()
        self._seq = itertools.count()
        self._animations: dict[Hashable, list[tuple[int, int, AnimationData]]] = {}
        self._path_infos: dict[Hashable, PathInfo] = {}
        self._interpolators: dict[tuple[Interpolation, str], InterpolatorFn] = {}

        for type_name, fmt in _SCALAR_FORMATS.items():
            self._add_pair(type_name, _scalar_interpolators(struct.Struct("<" + fmt)))
        for type_name, fmt in _VECTOR_FORMATS.items():
            self._add_pair(type_name, _vector_interpolators(struct.Struct("<" + fmt)))
        self._add_pair("nos.fb.Track", (_track_lerp, _track_bezier))
        self._add_pair("nos.fb.Transform", (_transform_lerp, _transform_bezier))

    def _add_pair(self, type_name: str, fns: tuple[InterpolatorFn, InterpolatorFn]) -> None:
        self.add_interpolator(Interpolation.LERP, type_name, fns[0])
        self.add_interpolator(Interpolation.CUBIC_BEZIER, type_name, fns[1])

    def add_interpolator(self, mode: Interpolation, type_name: str, fn: InterpolatorFn) -> None:
        """Register ``fn(interp, t) -> bytes`` for a mode and a type."""
        self._interpolators[(mode, type_name)] = fn

    def add_animation(self, pin_id: Hashable, type_name: str, animate: AnimatePin) -> AnimationData:
        """Schedule an animation; raise KeyError if no interpolator handles it."""
        interp = copy.deepcopy(animate.interpolate)
        if interp.mode is not Interpolation.CONSTANT and (interp.mode, type_name) not in self._interpolators:
            _log.error("No interpolator found for %s and %s.", type_name, interp.mode.value)
            raise KeyError(f"No interpolator found for {type_name} and {interp.mode.value}.")
        data = AnimationData(
            pin_id=pin_id,
            type_name=type_name,
            interp=interp,
            start_time=self._clock() + animate.delay,
            duration=animate.duration,
        )
        with self._lock:
            heapq.heappush(self._animations.setdefault(pin_id, []), (data.start_time, next(self._seq), data))
        _log.debug("Animation added for pin %s", pin_id)
        return data

    def update_pin(
        self, pin_id: Hashable, delta_seconds: Sequence[int], cur_fsm: int, current_data: bytes
    ) -> bytes | None:
        """Advance the pin's current animation to frame ``cur_fsm``; return the value set, if any."""
        with self._lock:
            queue = self._animations.get(pin_id)
            if queue is None:
                return None
            if not queue:
                del self._animations[pin_id]
                return None
            anim = queue[0][2]
            diff = cur_fsm - milliseconds_to_frame_number(anim.start_time, delta_seconds)
            if diff < 0:
                return None
            if not anim.started:
                if isinstance(anim.interp, (LerpInterp, CubicBezierInterp)) and not anim.interp.start:
                    anim.interp.start = bytes(current_data)
                anim.started = True
            frames = milliseconds_to_frame_number(anim.duration, delta_seconds)
            if frames == 0:
                if diff == 0:
                    return None
                t = 1.0
            else:
                t = min(max(diff / frames, 0.0), 1.0)
            if isinstance(anim.interp, ConstantInterp):
                value = bytes(anim.interp.value)
            else:
                value = self._interpolators[(anim.interp.mode, anim.type_name)](anim.interp, t)
            if t >= 1.0:
                heapq.heappop(queue)
                if not queue:
                    del self._animations[pin_id]
        if self._set_pin_value is not None:
            self._set_pin_value(pin_id, value)
        return value

    def is_pin_animating(self, pin_id: Hashable) -> bool:
        """True while the pin has scheduled animations."""
        with self._lock:
            return pin_id in self._animations

    def on_pin_deleted(self, pin_id: Hashable) -> None:
        """Drop every animation of the pin."""
        with self._lock:
            self._animations.pop(pin_id, None)

    def get_animatable_types(self) -> set[str]:
        """Return the type names that have an interpolator."""
        return {type_name for _, type_name in self._interpolators}

    def get_path_info(self, scheduled_node_id: Hashable) -> PathInfo | None:
        """Return a copy of the path's frame info, or None if it is not running."""
        with self._path_lock:
            info = self._path_infos.get(scheduled_node_id)
            return None if info is None else PathInfo(info.start_fsm, info.cur_frame)

    def create_path_info(self, scheduled_node_id: Hashable, delta_sec: Sequence[int]) -> None:
        """Start frame bookkeeping for a path from the current time."""
        start = milliseconds_to_frame_number(self._clock(), delta_sec)
        with self._path_lock:
            self._path_infos[scheduled_node_id] = PathInfo(start_fsm=start)

    def delete_path_info(self, scheduled_node_id: Hashable) -> None:
        """Forget the path's frame bookkeeping."""
        with self._path_lock:
            self._path_infos.pop(scheduled_node_id, None)

    def path_execution_finished(self, scheduled_node_id: Hashable) -> None:
        """Count one more executed frame of the path."""
        with self._path_lock:
            self._path_infos.setdefault(scheduled_node_id, PathInfo()).cur_frame += 1