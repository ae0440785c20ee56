"""
Keyframe timelines.
A timeline holds the control values of one adjustment and yields the value
for any frame by interpolating across the whole (unfiltered) sequence.
"""
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from lapsify.errors import ValidationError


def binomial_coefficient(n: int, k: int) -> int:
    """C(n, k) with integer arithmetic, exact for any n."""
    if k < 0 or k > n:
        return 0
    if k == 0 or k == n:
        return 1
    result = 1
    for i in range(k):
        # division is exact at every step
        result = result * (n - i) // (i + 1)
    return result


def bezier_interpolate(control_points: Sequence[float], t: float) -> float:
    """
    Bernstein polynomial blend of all control points:
    B(t) = sum C(n, i) * P_i * (1 - t)^(n - i) * t^i
    """
    n = len(control_points) - 1
    if n == 0:
        return float(control_points[0])

    result = 0.0
    for i, point in enumerate(control_points):
        coefficient = binomial_coefficient(n, i)
        result += coefficient * point * (1.0 - t) ** (n - i) * t ** i
    return result


@dataclass(frozen=True)
class ValueTimeline:
    """Control values for one adjustable parameter (length >= 1)."""

    values: Tuple[float, ...]

    def __init__(self, values: Iterable[float]):
        values = tuple(float(v) for v in values)
        if not values:
            raise ValidationError("A timeline needs at least one control value")
        object.__setattr__(self, 'values', values)

    @classmethod
    def constant(cls, value: float) -> "ValueTimeline":
        return cls((value,))

    def __len__(self) -> int:
        return len(self.values)

    def value_at(self, frame_index: int, total_frames: int) -> float:
        """
        Value for `frame_index` within a sequence of `total_frames` frames.

        Both refer to the original sequence so trimming a frame range only
        changes which part of the curve is sampled.
        """
        if total_frames < 1:
            raise ValueError(f"total_frames must be >= 1, got {total_frames}")

        values = self.values
        if len(values) == 1 or total_frames == 1:
            return values[0]

        t = frame_index / (total_frames - 1)
        if len(values) == 2:
            return values[0] + (values[1] - values[0]) * t
        return bezier_interpolate(values, t)

    def __str__(self) -> str:
        if len(self.values) == 1:
            return f"{self.values[0]:g}"
        return "[" + ", ".join(f"{v:g}" for v in self.values) + "]"
