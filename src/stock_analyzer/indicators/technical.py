"""Indicator library built on the series primitives.

Two call shapes are exposed. The per-bar functions return arrays aligned with
the input series (chart overlays, ``IndicatorSet``). The scalar functions
return the reading at the latest bar (scoring, trend detection) and report
missing data as ``None`` or ``NaN`` instead of raising.
"""
from typing import Any, Dict, List, NamedTuple, Optional, Sequence
import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .base import (
    ArrayLike, calculate_ema, calculate_rolling_stddev, calculate_sma,
    calculate_true_range, nan_array, to_array, validate_period,
)
from .registry import IndicatorRegistry
from stock_analyzer.models.analysis_config import IndicatorConfig
from stock_analyzer.models.indicators import IndicatorSet, MACDResult, OverlayPoint
from stock_analyzer.models.market_data import MarketData

# Substituted when the directional index is zero or cannot be computed
ADX_FALLBACK = 25.0

# Indicators that need highs and lows besides closes
HLC_INDICATORS = {'atr', 'adx'}

class MACDSeries(NamedTuple):
    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray

class BollingerBands(NamedTuple):
    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray

def _latest(values: np.ndarray) -> Optional[float]:
    if len(values) == 0 or np.isnan(values[-1]):
        return None
    return float(values[-1])

def _trailing_sum(values: np.ndarray, period: int) -> np.ndarray:
    """Sum of the trailing period values, skipping the leading NaN bar"""
    out = nan_array(len(values))
    if len(values) < period + 1:
        return out
    out[period:] = sliding_window_view(values[1:], period).sum(axis=1)
    return out

@IndicatorRegistry.register('rsi')
def calculate_rsi(closes: ArrayLike, period: int = 14) -> np.ndarray:
    """Wilder's RSI.

    The first value sits at index ``period``, once ``period`` price changes
    exist. Average gain and loss are seeded with the simple mean of the first
    ``period`` changes and smoothed with ``(avg*(period-1) + current)/period``
    afterwards. A zero average loss reports 100.
    """
    period = validate_period(period)
    prices = to_array(closes)
    rsi = nan_array(len(prices))
    if len(prices) < period + 1:
        return rsi

    deltas = np.diff(prices)
    seed = deltas[:period]
    avg_gain = seed[seed > 0].sum() / period
    avg_loss = -seed[seed < 0].sum() / period
    rsi[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, len(prices)):
        delta = deltas[i-1]
        gain = delta if delta > 0 else 0.0
        loss = -delta if delta < 0 else 0.0
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rsi[i] = _rsi_value(avg_gain, avg_loss)

    return rsi

def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)

def current_rsi(closes: ArrayLike, period: int = 14) -> Optional[float]:
    """RSI at the latest bar, None with fewer than period+1 closes"""
    return _latest(calculate_rsi(closes, period))

def calculate_macd_series(closes: ArrayLike, fast: int = 12, slow: int = 26, signal: int = 9) -> MACDSeries:
    """Per-bar MACD line, signal line and histogram.

    The signal EMA runs over the non-null part of the MACD line only and is
    mapped back onto the bars it came from.
    """
    prices = to_array(closes)
    macd_line = calculate_ema(prices, fast) - calculate_ema(prices, slow)

    signal_line = nan_array(len(prices))
    valid = ~np.isnan(macd_line)
    signal_line[valid] = calculate_ema(macd_line[valid], signal)

    return MACDSeries(macd_line, signal_line, macd_line - signal_line)

def calculate_macd(closes: ArrayLike, fast: int = 12, slow: int = 26, signal: int = 9) -> MACDResult:
    """MACD, signal and histogram at the latest bar"""
    series = calculate_macd_series(closes, fast, slow, signal)
    return MACDResult(
        macd=_latest(series.macd),
        signal=_latest(series.signal),
        histogram=_latest(series.histogram)
    )

def _directional_movement(highs: np.ndarray, lows: np.ndarray):
    plus_dm = nan_array(len(highs))
    minus_dm = nan_array(len(highs))
    if len(highs) < 2:
        return plus_dm, minus_dm

    high_diff = highs[1:] - highs[:-1]
    low_diff = lows[:-1] - lows[1:]
    plus_dm[1:] = np.where((high_diff > low_diff) & (high_diff > 0), high_diff, 0.0)
    minus_dm[1:] = np.where((low_diff > high_diff) & (low_diff > 0), low_diff, 0.0)
    return plus_dm, minus_dm

@IndicatorRegistry.register('adx')
def calculate_adx_series(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> np.ndarray:
    """Simplified ADX: DX over simple trailing sums of DM and TR.

    No Wilder smoothing is applied. Bars where the trailing true range is
    zero, or DX is zero or undefined, carry ``ADX_FALLBACK``.
    """
    period = validate_period(period)
    highs, lows, closes = to_array(highs), to_array(lows), to_array(closes)

    plus_dm, minus_dm = _directional_movement(highs, lows)
    tr_sum = _trailing_sum(calculate_true_range(highs, lows, closes), period)
    plus_sum = _trailing_sum(plus_dm, period)
    minus_sum = _trailing_sum(minus_dm, period)

    adx = nan_array(len(closes))
    ready = ~np.isnan(tr_sum)
    with np.errstate(divide='ignore', invalid='ignore'):
        plus_di = plus_sum[ready] / tr_sum[ready] * 100
        minus_di = minus_sum[ready] / tr_sum[ready] * 100
        dx = np.abs(plus_di - minus_di) / (plus_di + minus_di) * 100
    adx[ready] = np.where(np.isfinite(dx) & (dx != 0) & (tr_sum[ready] != 0), dx, ADX_FALLBACK)
    return adx

def calculate_adx(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> float:
    """ADX at the latest bar; NaN with fewer than period+1 bars"""
    value = _latest(calculate_adx_series(highs, lows, closes, period))
    return np.nan if value is None else value

@IndicatorRegistry.register('atr')
def calculate_atr_series(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> np.ndarray:
    """Simple mean of the trailing period true ranges"""
    period = validate_period(period)
    tr = calculate_true_range(highs, lows, closes)
    return _trailing_sum(tr, period) / period

def calculate_atr(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = 14) -> float:
    """ATR at the latest bar; NaN with fewer than period+1 bars"""
    value = _latest(calculate_atr_series(highs, lows, closes, period))
    return np.nan if value is None else value

def calculate_bollinger_bands(closes: ArrayLike, period: int = 20, std_multiplier: float = 2.0) -> BollingerBands:
    """SMA middle band with population-stddev envelopes"""
    middle = calculate_sma(closes, period)
    width = calculate_rolling_stddev(closes, period) * std_multiplier
    return BollingerBands(middle + width, middle, middle - width)

def to_optional_list(values: np.ndarray, decimals: Optional[int] = None) -> List[Optional[float]]:
    """NaN becomes None; optional rounding for display payloads"""
    out = []
    for value in values:
        if np.isnan(value):
            out.append(None)
        else:
            out.append(round(float(value), decimals) if decimals is not None else float(value))
    return out

def _price_arrays(bars: Sequence[MarketData]):
    closes = np.array([bar.close for bar in bars], dtype=float)
    highs = np.array([bar.high for bar in bars], dtype=float)
    lows = np.array([bar.low for bar in bars], dtype=float)
    return highs, lows, closes

def calculate_indicators_vectorized(bars: Sequence[MarketData], indicator_names: Sequence[str]) -> Dict[str, np.ndarray]:
    """Compute registered indicators named ``<name>_<period>`` in one pass.

    ``sma_20`` resolves to the registered ``sma`` with period 20; names
    without a period use 14.
    """
    highs, lows, closes = _price_arrays(bars)

    indicator_values = {}
    for name in indicator_names:
        # Parse indicator name and period
        if '_' in name and name.rsplit('_', 1)[1].isdigit():
            base_name, period = name.rsplit('_', 1)
            period = int(period)
        else:
            base_name, period = name, 14

        if base_name in HLC_INDICATORS:
            values = IndicatorRegistry.compute(base_name, highs, lows, closes, period)
        else:
            values = IndicatorRegistry.compute(base_name, closes, period)
        indicator_values[name] = values

    return indicator_values

def calculate_indicator_set(bars: Sequence[MarketData], config: Optional[IndicatorConfig] = None) -> IndicatorSet:
    """Every per-bar indicator for a series, NaN positions mapped to None"""
    config = config or IndicatorConfig()
    highs, lows, closes = _price_arrays(bars)
    short_sma, medium_sma, long_sma = config.sma_periods

    macd = calculate_macd_series(closes, config.macd_fast, config.macd_slow, config.macd_signal)
    bands = calculate_bollinger_bands(closes, config.bollinger_period, config.bollinger_std)

    return IndicatorSet(
        timestamps=[bar.timestamp for bar in bars],
        ema9=to_optional_list(calculate_ema(closes, config.ema_short)),
        ema21=to_optional_list(calculate_ema(closes, config.ema_medium)),
        ema50=to_optional_list(calculate_ema(closes, config.ema_long)),
        sma20=to_optional_list(calculate_sma(closes, short_sma)),
        sma50=to_optional_list(calculate_sma(closes, medium_sma)),
        sma200=to_optional_list(calculate_sma(closes, long_sma)),
        rsi=to_optional_list(calculate_rsi(closes, config.rsi_period)),
        macd=to_optional_list(macd.macd),
        macd_signal=to_optional_list(macd.signal),
        macd_histogram=to_optional_list(macd.histogram),
        adx=to_optional_list(calculate_adx_series(highs, lows, closes, config.adx_period)),
        atr=to_optional_list(calculate_atr_series(highs, lows, closes, config.atr_period)),
        bb_upper=to_optional_list(bands.upper),
        bb_middle=to_optional_list(bands.middle),
        bb_lower=to_optional_list(bands.lower)
    )

def build_chart_overlay(bars: Sequence[MarketData], config: Optional[IndicatorConfig] = None) -> List[OverlayPoint]:
    """Time-aligned overlay rows (SMA, EMA, Bollinger) for plotting"""
    config = config or IndicatorConfig()
    short_sma, medium_sma, long_sma = config.sma_periods
    columns = {
        'sma20': f'sma_{short_sma}',
        'sma50': f'sma_{medium_sma}',
        'sma200': f'sma_{long_sma}',
        'ema9': f'ema_{config.ema_short}',
        'ema21': f'ema_{config.ema_medium}',
        'ema50': f'ema_{config.ema_long}',
    }
    values = calculate_indicators_vectorized(bars, list(columns.values()))
    bands = calculate_bollinger_bands([bar.close for bar in bars], config.bollinger_period, config.bollinger_std)

    series: Dict[str, List[Optional[float]]] = {
        field: to_optional_list(values[name], 2) for field, name in columns.items()
    }
    series['bb_upper'] = to_optional_list(bands.upper, 2)
    series['bb_middle'] = to_optional_list(bands.middle, 2)
    series['bb_lower'] = to_optional_list(bands.lower, 2)

    points = []
    for i, bar in enumerate(bars):
        row: Dict[str, Any] = {field: column[i] for field, column in series.items()}
        points.append(OverlayPoint(
            time=bar.timestamp.date().isoformat(),
            timestamp=int(bar.timestamp.timestamp()),
            open=bar.open,
            high=bar.high,
            low=bar.low,
            close=bar.close,
            volume=bar.volume,
            **row
        ))
    return points
