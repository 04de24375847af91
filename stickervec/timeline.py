"""Keyframe timeline with linear interpolation."""
import bisect
import math
from typing import Iterable, Iterator, List, Optional, Tuple

from stickervec.types import Keyframe, Transform

_FIELDS = ("x", "y", "rotation", "scale_x", "scale_y", "opacity")


class Timeline:
    """
    Sorted keyframe list owned by a single layer.

    Keyframes are kept ascending by time. Adding a keyframe at a time that
    already exists replaces it, so the most recent insertion is the
    authoritative value for that instant.
    """

    def __init__(self, keyframes: Optional[Iterable[Keyframe]] = None):
        self._keyframes: List[Keyframe] = []
        for keyframe in keyframes or ():
            self.add(keyframe)

    def __len__(self) -> int:
        return len(self._keyframes)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(tuple(self._keyframes))

    def __getitem__(self, index: int) -> Keyframe:
        return self._keyframes[index]

    @property
    def times(self) -> List[float]:
        return [kf.time for kf in self._keyframes]

    def snapshot(self) -> Tuple[Keyframe, ...]:
        """Return an immutable copy of the keyframe list."""
        return tuple(self._keyframes)

    def add(self, keyframe: Keyframe) -> None:
        """Insert a keyframe, replacing any keyframe at the same time."""
        times = self.times
        index = bisect.bisect_left(times, keyframe.time)
        if index < len(times) and times[index] == keyframe.time:
            self._keyframes[index] = keyframe
        else:
            self._keyframes.insert(index, keyframe)

    def remove(self, time: float) -> Keyframe:
        """
        Remove the keyframe at ``time``.

        Raises:
            KeyError: If no keyframe exists at that time
        """
        times = self.times
        index = bisect.bisect_left(times, time)
        if index >= len(times) or times[index] != time:
            raise KeyError(f"No keyframe at {time} ms")
        return self._keyframes.pop(index)

    def clear(self) -> None:
        self._keyframes.clear()

    def value_at(self, t: float, default: Transform) -> Transform:
        """
        Compute the transform at time ``t``.

        Args:
            t: Time in milliseconds (any value; out of range clamps)
            default: Static transform returned when there are no keyframes

        Returns:
            Interpolated transform
        """
        keyframes = self._keyframes
        if not keyframes:
            return default

        first = keyframes[0]
        last = keyframes[-1]
        # NaN compares false everywhere; pin it to the start
        if len(keyframes) == 1 or math.isnan(t) or t <= first.time:
            return first.transform
        if t >= last.time:
            return last.transform

        # first.time < t < last.time, so 1 <= index <= len - 1
        index = bisect.bisect_left(self.times, t)
        prev = keyframes[index - 1]
        nxt = keyframes[index]

        span = nxt.time - prev.time
        if span == 0:
            return nxt.transform

        k = (t - prev.time) / span
        return Transform(**{
            name: getattr(prev, name) + (getattr(nxt, name) - getattr(prev, name)) * k
            for name in _FIELDS
        })


def value_at(layer, t: float) -> Transform:
    """Transform of ``layer`` at time ``t`` (ms)."""
    return layer.timeline.value_at(t, layer.transform)


def add_keyframe(layer, time: float, snapshot: Optional[Transform] = None) -> Keyframe:
    """
    Record ``snapshot`` as a keyframe of ``layer`` at ``time``.

    Args:
        layer: Layer owning the timeline
        time: Keyframe time in milliseconds
        snapshot: Transform to store (default: the layer's static transform)

    Returns:
        The keyframe that was stored
    """
    keyframe = Keyframe.from_transform(time, snapshot or layer.transform)
    layer.timeline.add(keyframe)
    return keyframe


def remove_keyframe(layer, time: float) -> Keyframe:
    """Delete the keyframe of ``layer`` at ``time``."""
    return layer.timeline.remove(time)


def total_frames(duration_ms: float, fps: int) -> int:
    """Number of frames covering ``duration_ms`` at ``fps``."""
    # Multiply first so whole-millisecond durations stay exact
    return int(math.ceil(duration_ms * fps / 1000.0))


def sample_frames(layer, duration_ms: float, fps: int) -> List[Transform]:
    """
    Interpolated transform at the start of every frame.

    Args:
        layer: Layer to sample
        duration_ms: Composition duration
        fps: Frame rate

    Returns:
        One transform per frame, frame ``i`` at ``i * 1000 / fps`` ms
    """
    frame_ms = 1000.0 / fps
    return [value_at(layer, i * frame_ms) for i in range(total_frames(duration_ms, fps))]
