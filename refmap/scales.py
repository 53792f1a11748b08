"""
Linear scales and curve geometry, matching what D3 draws on the client so
server-computed positions line up with the axes it renders.
"""
import math
from typing import Iterable, List, Optional, Sequence, Tuple

E10 = math.sqrt(50)
E5 = math.sqrt(10)
E2 = math.sqrt(2)


def _js_round(x: float) -> int:
    return math.floor(x + 0.5)


def _factor(error: float) -> int:
    if error >= E10:
        return 10
    if error >= E5:
        return 5
    if error >= E2:
        return 2
    return 1


def tick_increment(start: float, stop: float, count: int) -> float:
    step = (stop - start) / max(0, count)
    if step <= 0 or not math.isfinite(step):
        return 0
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    if power >= 0:
        return _factor(error) * 10 ** power
    return -(10 ** -power) / _factor(error)


def _tick_spec(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0, count)
    power = math.floor(math.log10(step))
    error = step / 10 ** power
    factor = _factor(error)
    if power < 0:
        inc = 10 ** -power / factor
        i1 = _js_round(start * inc)
        i2 = _js_round(stop * inc)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = 10 ** power * factor
        i1 = _js_round(start / inc)
        i2 = _js_round(stop / inc)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return i1, i2, inc


def ticks(start: float, stop: float, count: int = 10) -> List[float]:
    if not count > 0:
        return []
    if start == stop:
        return [start]
    reverse = stop < start
    if reverse:
        start, stop = stop, start
    i1, i2, inc = _tick_spec(start, stop, count)
    if not i2 >= i1:
        return []
    if inc < 0:
        out = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        out = [(i1 + i) * inc for i in range(i2 - i1 + 1)]
    if reverse:
        out.reverse()
    return out


def extent(values: Iterable[Optional[float]]) -> Optional[Tuple[float, float]]:
    vals = [v for v in values if v is not None]
    if not vals:
        return None
    return min(vals), max(vals)


class LinearScale:
    """Continuous linear map from a [d0, d1] domain onto a [r0, r1] range."""

    def __init__(self, domain: Sequence[float], range_: Sequence[float]):
        self.domain = [float(domain[0]), float(domain[1])]
        self.range = [float(range_[0]), float(range_[1])]

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        span = d1 - d0
        t = (value - d0) / span if span else 0.5
        return r0 + t * (r1 - r0)

    def nice(self, count: int = 10) -> "LinearScale":
        start, stop = self.domain
        flipped = stop < start
        if flipped:
            start, stop = stop, start
        prestep = None
        for _ in range(10):
            step = tick_increment(start, stop, count)
            if step == prestep:
                break
            if step > 0:
                start = math.floor(start / step) * step
                stop = math.ceil(stop / step) * step
            elif step < 0:
                start = math.ceil(start * step) / step
                stop = math.floor(stop * step) / step
            else:
                break
            prestep = step
        self.domain = [stop, start] if flipped else [start, stop]
        return self

    def ticks(self, count: int = 10) -> List[float]:
        return ticks(self.domain[0], self.domain[1], count)


def _control_points(x: Sequence[float]):
    n = len(x) - 1
    a = [0.0] * n
    b = [0.0] * n
    r = [0.0] * n
    a[0], b[0], r[0] = 0, 2, x[0] + 2 * x[1]
    for i in range(1, n - 1):
        a[i], b[i], r[i] = 1, 4, 4 * x[i] + 2 * x[i + 1]
    a[n - 1], b[n - 1], r[n - 1] = 2, 7, 8 * x[n - 1] + x[n]
    for i in range(1, n):
        m = a[i] / b[i - 1]
        b[i] -= m
        r[i] -= m * r[i - 1]
    a[n - 1] = r[n - 1] / b[n - 1]
    for i in range(n - 2, -1, -1):
        a[i] = (r[i] - a[i + 1]) / b[i]
    b[n - 1] = (x[n] + a[n - 1]) / 2
    for i in range(n - 1):
        b[i] = 2 * x[i + 1] - a[i + 1]
    return a, b


def _fmt(v: float) -> str:
    v = round(v, 3)
    if v == int(v):
        return str(int(v))
    return repr(v)


def natural_curve_path(points: Sequence[Tuple[float, float]]) -> str:
    """SVG path data for a natural cubic spline through the points."""
    if not points:
        return ""
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    d = f"M{_fmt(xs[0])},{_fmt(ys[0])}"
    if len(points) == 2:
        return d + f"L{_fmt(xs[1])},{_fmt(ys[1])}"
    if len(points) > 2:
        px = _control_points(xs)
        py = _control_points(ys)
        for i0 in range(len(points) - 1):
            i1 = i0 + 1
            d += "C{},{},{},{},{},{}".format(
                _fmt(px[0][i0]), _fmt(py[0][i0]),
                _fmt(px[1][i0]), _fmt(py[1][i0]),
                _fmt(xs[i1]), _fmt(ys[i1]),
            )
    return d
