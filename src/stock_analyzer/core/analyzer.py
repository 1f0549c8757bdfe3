import logging
import math
from typing import List, Optional, Sequence
import numpy as np

from stock_analyzer.analysis.insights import generate_insights, indicator_signals
from stock_analyzer.analysis.levels import calculate_support_resistance
from stock_analyzer.analysis.prediction import generate_predictions
from stock_analyzer.analysis.scoring import (
    RuleProfile, SINGLE_STOCK_RULES, SignalSnapshot, calculate_ai_score,
    calculate_entry_exit, classify, describe_category, get_rating,
)
from stock_analyzer.analysis.trend import trend_from_values
from stock_analyzer.indicators.base import calculate_ema, calculate_sma
from stock_analyzer.indicators.technical import (
    build_chart_overlay, calculate_adx, calculate_atr, calculate_indicator_set,
    calculate_macd, current_rsi,
)
from stock_analyzer.models.analysis import ChartAnalysis, IndicatorSummary, StockAnalysis
from stock_analyzer.models.analysis_config import AnalysisConfig
from stock_analyzer.models.indicators import IndicatorSet, OverlayPoint
from stock_analyzer.models.market_data import MarketData, Quote

logger = logging.getLogger(__name__)

def _latest(values: np.ndarray) -> Optional[float]:
    if len(values) == 0 or np.isnan(values[-1]):
        return None
    return float(values[-1])

def _optional(value: float) -> Optional[float]:
    return None if value is None or math.isnan(value) else float(value)

def _round(value: Optional[float], digits: int) -> Optional[float]:
    return round(value, digits) if value is not None else None

def _pct_change(current: float, previous: float) -> Optional[float]:
    if previous == 0:
        return None
    return (current - previous) / previous * 100

class StockAnalyzer:
    """Stateless analysis of one series plus its quote.

    Every method is a pure function of its arguments, so one analyzer can
    be shared across threads scanning different symbols.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def indicator_set(self, bars: Sequence[MarketData]) -> IndicatorSet:
        return calculate_indicator_set(bars, self.config.indicators)

    def overlay(self, bars: Sequence[MarketData]) -> List[OverlayPoint]:
        return build_chart_overlay(bars, self.config.indicators)

    def _volume_stats(self, bars: Sequence[MarketData]):
        # Average over the bars that report volume, not a fixed divisor
        window = [bar.volume for bar in bars[-self.config.volume_window:] if bar.volume is not None]
        avg_volume = sum(window) / len(window) if window else None
        current_volume = bars[-1].volume if bars[-1].volume else avg_volume
        if avg_volume and current_volume is not None:
            return current_volume, avg_volume, current_volume / avg_volume
        return current_volume, avg_volume, None

    def analyze(self, bars: Sequence[MarketData], quote: Quote,
                profile: RuleProfile = SINGLE_STOCK_RULES) -> StockAnalysis:
        """Scalar summary: score, rating, category and trade levels"""
        if not bars:
            raise ValueError(f"No bars to analyze for {quote.symbol}")
        cfg = self.config.indicators
        closes = np.array([bar.close for bar in bars], dtype=float)
        price = quote.price

        rsi = current_rsi(closes, cfg.rsi_period)
        macd = calculate_macd(closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
        sma50 = _latest(calculate_sma(closes, cfg.sma_periods[1]))
        sma200 = _latest(calculate_sma(closes, cfg.sma_periods[2]))
        current_volume, avg_volume, volume_ratio = self._volume_stats(bars)

        price_change_5d = _pct_change(closes[-1], closes[-6]) if len(closes) >= 6 else None
        price_change_20d = _pct_change(closes[-1], closes[-21]) if len(closes) >= 21 else None

        high_52w = quote.fifty_two_week_high or max(bar.high for bar in bars)
        low_52w = quote.fifty_two_week_low or min(bar.low for bar in bars)
        near_high = (high_52w - price) / high_52w * 100 if high_52w else None
        near_low = (price - low_52w) / low_52w * 100 if low_52w else None

        price_vs_sma50 = _pct_change(price, sma50) if sma50 else None
        price_vs_sma200 = _pct_change(price, sma200) if sma200 else None

        ai_score = calculate_ai_score(rsi, macd.histogram, price_vs_sma50, price_vs_sma200, volume_ratio)
        rating = get_rating(ai_score)
        entry_point, exit_point = calculate_entry_exit(price, sma50, high_52w, low_52w)

        snapshot = SignalSnapshot(
            price=price,
            ai_score=ai_score,
            rsi=rsi,
            macd_histogram=macd.histogram,
            sma50=sma50,
            sma200=sma200,
            volume_ratio=volume_ratio,
            price_change_5d=price_change_5d,
            near_low_52w=near_low
        )
        category = classify(snapshot, profile)
        detail = describe_category(category, snapshot, entry_point, exit_point, profile)
        logger.debug(f"{quote.symbol}: score={ai_score} rating={rating.rating} category={category.value}")

        return StockAnalysis(
            symbol=quote.symbol,
            name=quote.name or quote.symbol,
            price=price,
            change=quote.change,
            change_percent=quote.change_percent,
            market_cap=quote.market_cap,
            volume=current_volume,
            avg_volume=avg_volume,
            volume_ratio=_round(volume_ratio, 2),
            indicators=IndicatorSummary(
                rsi=_round(rsi, 1),
                macd_histogram=_round(macd.histogram, 3),
                sma50=_round(sma50, 2),
                sma200=_round(sma200, 2),
                price_change_5d=_round(price_change_5d, 2),
                price_change_20d=_round(price_change_20d, 2),
                near_high_52w=_round(near_high, 2)
            ),
            ai_score=ai_score,
            rating=rating.rating,
            rating_class=rating.rating_class,
            category=category,
            reason=detail.reason,
            horizon=detail.horizon,
            horizon_thai=detail.horizon_thai,
            recommendation=detail.recommendation,
            analysis=detail.analysis,
            entry_point=entry_point,
            exit_point=exit_point,
            risk_level=detail.risk_level
        )

    def analyze_chart(self, bars: Sequence[MarketData], quote: Quote) -> ChartAnalysis:
        """Trend, support/resistance, projections and insights for the chart view.

        Sections that lack history (fewer bars than the slow EMA, for
        instance) are left empty rather than raising.
        """
        if not bars:
            raise ValueError(f"No bars to analyze for {quote.symbol}")
        cfg = self.config.indicators
        highs = np.array([bar.high for bar in bars], dtype=float)
        lows = np.array([bar.low for bar in bars], dtype=float)
        closes = np.array([bar.close for bar in bars], dtype=float)
        price = quote.price

        rsi = current_rsi(closes, cfg.rsi_period)
        macd = calculate_macd(closes, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)
        adx = _optional(calculate_adx(highs, lows, closes, cfg.adx_period))
        atr = _optional(calculate_atr(highs, lows, closes, cfg.atr_period))

        trend = trend_from_values(
            _latest(calculate_ema(closes, cfg.ema_short)),
            _latest(calculate_ema(closes, cfg.ema_medium)),
            _latest(calculate_ema(closes, cfg.ema_long)),
            adx,
            price
        )
        levels = calculate_support_resistance(
            highs, lows, closes, price,
            window=self.config.level_window,
            pivot_window=self.config.pivot_window,
            lookback=self.config.swing_lookback,
            max_levels=self.config.max_levels
        )

        predictions = []
        insights = None
        if trend is not None:
            if atr is not None:
                predictions = generate_predictions(
                    closes, trend.direction, atr, price,
                    horizons=self.config.horizons,
                    window=self.config.regression_window
                )
            if rsi is not None:
                insights = generate_insights(trend, rsi, macd, levels, quote.symbol)
        else:
            logger.info(f"{quote.symbol}: {len(bars)} bars is not enough history for trend detection")

        return ChartAnalysis(
            symbol=quote.symbol,
            price=price,
            trend=trend,
            levels=levels,
            predictions=predictions,
            rsi=rsi,
            macd=macd,
            adx=adx,
            atr=atr,
            signals=indicator_signals(trend, rsi, macd, adx),
            insights=insights
        )
