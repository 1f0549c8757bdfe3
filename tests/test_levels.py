import numpy as np
import pytest

from stock_analyzer.analysis.levels import (
    calculate_pivot_points, calculate_support_resistance, find_swing_points,
)

def test_pivot_points():
    levels = calculate_pivot_points(high=110, low=90, close=100)
    assert levels.pivot == pytest.approx(100)
    assert levels.r1 == pytest.approx(110)
    assert levels.r2 == pytest.approx(120)
    assert levels.r3 == pytest.approx(130)
    assert levels.s1 == pytest.approx(90)
    assert levels.s2 == pytest.approx(80)
    assert levels.s3 == pytest.approx(70)

def test_swing_points_need_full_window():
    values = [1, 2, 3, 9, 3, 2, 1, 2, 3]
    assert find_swing_points(values, 'high', lookback=3) == [9]
    # the trough at index 6 is within lookback of the end
    assert find_swing_points(values, 'low', lookback=3) == []

def test_swing_low():
    values = [5, 4, 3, 1, 3, 4, 5]
    assert find_swing_points(values, 'low', lookback=3) == [1]

def _wave(n=120):
    x = np.arange(n)
    closes = 100 + 10 * np.sin(x / 4.0)
    return closes + 1, closes - 1, closes

def test_levels_split_around_price():
    highs, lows, closes = _wave()
    price = closes[-1]
    levels = calculate_support_resistance(highs, lows, closes, price)

    assert all(level > price for level in levels.resistance)
    assert all(level < price for level in levels.support)
    assert levels.resistance == sorted(levels.resistance)
    assert levels.support == sorted(levels.support, reverse=True)
    assert len(levels.resistance) <= 3
    assert len(levels.support) <= 3

def test_max_levels():
    highs, lows, closes = _wave()
    levels = calculate_support_resistance(highs, lows, closes, closes[-1], max_levels=1)
    assert len(levels.resistance) <= 1
    assert len(levels.support) <= 1

def test_short_history_uses_pivots_only():
    highs, lows, closes = [11.0, 12.0, 13.0], [9.0, 10.0, 11.0], [10.0, 11.0, 12.0]
    levels = calculate_support_resistance(highs, lows, closes, 12.0)
    pivots = calculate_pivot_points(13.0, 9.0, 12.0)
    assert levels.pivot == pytest.approx(pivots.pivot)
    assert levels.resistance == pytest.approx([pivots.r1, pivots.r2, pivots.r3])
    assert levels.support == pytest.approx([pivots.s1, pivots.s2, pivots.s3])

def test_empty_input_raises():
    with pytest.raises(ValueError):
        calculate_support_resistance([], [], [], 10.0)
