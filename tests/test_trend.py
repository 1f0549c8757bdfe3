import numpy as np
import pytest

from stock_analyzer.analysis.trend import (
    TREND_RULES, TrendInputs, detect_trend, match_trend_rule, strength_label,
    trend_from_values,
)
from stock_analyzer.indicators.base import calculate_ema
from stock_analyzer.indicators.technical import calculate_adx
from stock_analyzer.models.analysis import TrendDirection

def test_uptrend_strength():
    trend = detect_trend(ema9=110, ema21=105, ema50=100, adx=30, price=112)
    assert trend.direction == TrendDirection.UPTREND
    assert trend.strength == pytest.approx(75.0)
    assert "uptrend" in trend.explanation

def test_downtrend_strength_capped():
    trend = detect_trend(ema9=90, ema21=95, ema50=100, adx=45, price=88)
    assert trend.direction == TrendDirection.DOWNTREND
    assert trend.strength == 100

def test_aligned_emas_need_price_confirmation():
    # EMAs stacked bullish but price below the fast EMA
    trend = detect_trend(ema9=110, ema21=105, ema50=100, adx=30, price=108)
    assert trend.direction == TrendDirection.SIDEWAYS
    assert trend.strength == pytest.approx(60.0)

def test_weak_adx_sideways_strength_inverts():
    trend = detect_trend(ema9=100, ema21=101, ema50=99, adx=10, price=100)
    assert trend.direction == TrendDirection.SIDEWAYS
    assert trend.strength == pytest.approx(80.0)

def test_sideways_default_strength():
    trend = detect_trend(ema9=100, ema21=101, ema50=99, adx=35, price=100)
    assert trend.strength == pytest.approx(70.0)

def test_rules_evaluated_in_order():
    inputs = TrendInputs(ema9=110, ema21=105, ema50=100, adx=5, price=112)
    # uptrend wins even though the weak-ADX sideways rule also matches
    assert match_trend_rule(inputs) is TREND_RULES[0]

def test_rising_series_is_uptrend(rising_bars):
    closes = np.array([b.close for b in rising_bars])
    highs = [b.high for b in rising_bars]
    lows = [b.low for b in rising_bars]
    adx = calculate_adx(highs, lows, closes)
    assert adx > 25

    trend = trend_from_values(
        calculate_ema(closes, 9)[-1],
        calculate_ema(closes, 21)[-1],
        calculate_ema(closes, 50)[-1],
        adx,
        closes[-1]
    )
    assert trend.direction == TrendDirection.UPTREND
    assert trend.strength == pytest.approx(min(100, adx * 2.5))

def test_falling_series_is_downtrend(falling_bars):
    closes = np.array([b.close for b in falling_bars])
    adx = calculate_adx([b.high for b in falling_bars], [b.low for b in falling_bars], closes)
    trend = trend_from_values(
        calculate_ema(closes, 9)[-1],
        calculate_ema(closes, 21)[-1],
        calculate_ema(closes, 50)[-1],
        adx,
        closes[-1]
    )
    assert trend.direction == TrendDirection.DOWNTREND

def test_missing_inputs_give_no_trend():
    assert trend_from_values(None, 1.0, 1.0, 20.0, 1.0) is None
    assert trend_from_values(1.0, 1.0, float('nan'), 20.0, 1.0) is None
    assert trend_from_values(1.0, 1.0, 1.0, float('nan'), 1.0) is None

@pytest.mark.parametrize("strength,label", [(80, "strong"), (70, "moderate"), (41, "moderate"), (40, "weak")])
def test_strength_label(strength, label):
    assert strength_label(strength) == label

def test_balanced_range_reads_as_moderate_sideways():
    highs = [102.0 if i % 2 else 101.0 for i in range(40)]
    lows = [100.0 if i % 2 else 99.0 for i in range(40)]
    closes = [101.0 if i % 2 else 100.0 for i in range(40)]
    adx = calculate_adx(highs, lows, closes)
    assert adx == 25.0

    trend = detect_trend(ema9=100, ema21=101, ema50=99, adx=adx, price=100)
    assert trend.direction == TrendDirection.SIDEWAYS
    assert trend.strength == pytest.approx(50.0)
