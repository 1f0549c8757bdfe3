import math
from typing import Dict, List, Sequence

from stock_analyzer.indicators.base import linear_regression_slope
from stock_analyzer.models.analysis import Prediction, TrendDirection

TREND_MULTIPLIERS: Dict[TrendDirection, float] = {
    TrendDirection.UPTREND: 1.2,
    TrendDirection.DOWNTREND: 0.8,
    TrendDirection.SIDEWAYS: 1.0,
}

VOLATILITY_BAND_WIDTH = 1.5

def prediction_confidence(days: int) -> float:
    """Falls one point per day from 85, floored at 30"""
    return max(30, 85 - days)

def calculate_prediction(current_price: float, slope: float, atr: float, days: int, trend_multiplier: float) -> Prediction:
    """Project price ``days`` ahead along the slope, banded by sqrt(days) * ATR"""
    expected = current_price + slope * days * trend_multiplier
    band = math.sqrt(days) * atr * VOLATILITY_BAND_WIDTH

    return Prediction(
        horizon=days,
        expected=max(0.0, expected),
        min=max(0.0, expected - band),
        max=expected + band,
        confidence=prediction_confidence(days)
    )

def generate_predictions(
    closes: Sequence[float],
    direction: TrendDirection,
    atr: float,
    current_price: float,
    horizons: Sequence[int] = (7, 14, 30),
    window: int = 30
) -> List[Prediction]:
    """Projections for each horizon; empty when the slope or ATR is undefined"""
    slope = linear_regression_slope(list(closes)[-window:])
    if math.isnan(slope) or math.isnan(atr):
        return []

    multiplier = TREND_MULTIPLIERS[direction]
    return [calculate_prediction(current_price, slope, atr, days, multiplier) for days in horizons]
