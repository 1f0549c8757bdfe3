from typing import List, Literal, NamedTuple, Sequence

from stock_analyzer.models.analysis import LevelSet

class PivotLevels(NamedTuple):
    pivot: float
    r1: float
    r2: float
    r3: float
    s1: float
    s2: float
    s3: float

def calculate_pivot_points(high: float, low: float, close: float) -> PivotLevels:
    """Classic floor-trader pivots"""
    pivot = (high + low + close) / 3
    return PivotLevels(
        pivot=pivot,
        r1=2 * pivot - low,
        r2=pivot + (high - low),
        r3=high + 2 * (pivot - low),
        s1=2 * pivot - high,
        s2=pivot - (high - low),
        s3=low - 2 * (high - pivot)
    )

def find_swing_points(values: Sequence[float], kind: Literal['high', 'low'], lookback: int = 5) -> List[float]:
    """Local extrema confirmed by ``lookback`` bars on each side.

    A swing high is >= every neighbour in the window, a swing low <= every
    neighbour. Points closer than ``lookback`` to either edge are skipped.
    """
    points = []
    for i in range(lookback, len(values) - lookback):
        current = values[i]
        neighbours = list(values[i - lookback:i]) + list(values[i + 1:i + lookback + 1])
        if kind == 'high' and all(v <= current for v in neighbours):
            points.append(current)
        elif kind == 'low' and all(v >= current for v in neighbours):
            points.append(current)
    return points

def calculate_support_resistance(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    current_price: float,
    window: int = 50,
    pivot_window: int = 20,
    lookback: int = 5,
    max_levels: int = 3
) -> LevelSet:
    """Pivot levels plus swing extrema, split around the current price.

    Resistance holds the closest ``max_levels`` candidates above the price in
    ascending order; support the closest below it in descending order.
    """
    if len(closes) == 0:
        raise ValueError("Support/resistance needs at least one bar")
    recent_highs = list(highs[-window:])
    recent_lows = list(lows[-window:])
    recent_closes = list(closes[-window:])

    pivots = calculate_pivot_points(
        high=max(recent_highs[-pivot_window:]),
        low=min(recent_lows[-pivot_window:]),
        close=recent_closes[-1]
    )

    swing_highs = find_swing_points(recent_highs, 'high', lookback)
    swing_lows = find_swing_points(recent_lows, 'low', lookback)

    resistance = sorted(
        level for level in [pivots.r1, pivots.r2, pivots.r3, *swing_highs]
        if level > current_price
    )[:max_levels]
    support = sorted(
        (level for level in [pivots.s1, pivots.s2, pivots.s3, *swing_lows]
         if level < current_price),
        reverse=True
    )[:max_levels]

    return LevelSet(
        support=[float(level) for level in support],
        resistance=[float(level) for level in resistance],
        pivot=float(pivots.pivot)
    )
