"""Numeric primitives shared by every indicator.

Arrays are aligned with their input: position ``i`` of an output describes
bar ``i``. Positions without enough history hold ``NaN``.
"""
from typing import Sequence, Union
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from .registry import IndicatorRegistry

ArrayLike = Union[Sequence[float], np.ndarray]

def validate_period(period: int) -> int:
    if period < 1:
        raise ValueError(f"Period must be a positive integer, got {period}")
    return int(period)

def to_array(values: ArrayLike) -> np.ndarray:
    return np.asarray(values, dtype=float)

def nan_array(length: int) -> np.ndarray:
    return np.full(length, np.nan)

@IndicatorRegistry.register('sma')
def calculate_sma(values: ArrayLike, period: int) -> np.ndarray:
    """Simple moving average, NaN for the first period-1 positions"""
    period = validate_period(period)
    prices = to_array(values)
    if len(prices) < period:
        return nan_array(len(prices))
    sma = sliding_window_view(prices, period).mean(axis=1)
    return np.pad(sma, (period-1, 0), mode='constant', constant_values=np.nan)

@IndicatorRegistry.register('ema')
def calculate_ema(values: ArrayLike, period: int) -> np.ndarray:
    """Exponential moving average seeded with the SMA of the first period values"""
    period = validate_period(period)
    prices = to_array(values)
    ema = nan_array(len(prices))
    if len(prices) < period:
        return ema

    k = 2 / (period + 1)
    ema[period-1] = prices[:period].mean()
    for i in range(period, len(prices)):
        ema[i] = prices[i] * k + ema[i-1] * (1 - k)
    return ema

def calculate_stddev(window: ArrayLike) -> float:
    """Population standard deviation (divides by N)"""
    data = to_array(window)
    if len(data) == 0:
        return np.nan
    return float(np.std(data, ddof=0))

@IndicatorRegistry.register('rolling_std')
def calculate_rolling_stddev(values: ArrayLike, period: int) -> np.ndarray:
    """Population standard deviation over each trailing window"""
    period = validate_period(period)
    prices = to_array(values)
    if len(prices) < period:
        return nan_array(len(prices))
    std = sliding_window_view(prices, period).std(axis=1, ddof=0)
    return np.pad(std, (period-1, 0), mode='constant', constant_values=np.nan)

def linear_regression_slope(values: ArrayLike) -> float:
    """OLS slope of values against their index 0..N-1.

    Returns NaN when N <= 1 since the index has no variance; callers guard.
    """
    y = to_array(values)
    n = len(y)
    if n <= 1:
        return np.nan
    x = np.arange(n, dtype=float)
    denominator = n * (x * x).sum() - x.sum() ** 2
    return float((n * (x * y).sum() - x.sum() * y.sum()) / denominator)

@IndicatorRegistry.register('true_range')
def calculate_true_range(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> np.ndarray:
    """True range per bar; the first bar has no previous close and stays NaN"""
    highs, lows, closes = to_array(highs), to_array(lows), to_array(closes)
    tr = nan_array(len(closes))
    if len(closes) < 2:
        return tr
    tr[1:] = np.maximum.reduce([
        highs[1:] - lows[1:],
        np.abs(highs[1:] - closes[:-1]),
        np.abs(lows[1:] - closes[:-1])
    ])
    return tr
