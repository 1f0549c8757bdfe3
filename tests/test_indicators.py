import numpy as np
import pytest

from stock_analyzer.indicators.technical import (
    ADX_FALLBACK, build_chart_overlay, calculate_adx, calculate_adx_series,
    calculate_atr, calculate_atr_series, calculate_bollinger_bands,
    calculate_indicator_set, calculate_indicators_vectorized, calculate_macd,
    calculate_macd_series, calculate_rsi, current_rsi,
)
from stock_analyzer.indicators.registry import IndicatorRegistry
from stock_analyzer.models.analysis_config import IndicatorConfig
from stock_analyzer.models.market_data import MarketData
from conftest import make_bars

ZIGZAG = [100 + (3 if i % 2 else -2) + i * 0.3 for i in range(80)]

def _hlc(bars):
    return ([b.high for b in bars], [b.low for b in bars], [b.close for b in bars])

class TestRSI:
    def test_constant_closes_report_100(self):
        rsi = calculate_rsi([10.0] * 40, 14)
        assert rsi[-1] == 100.0
        assert current_rsi([10.0] * 40) == 100.0

    def test_warmup(self):
        rsi = calculate_rsi(ZIGZAG, 14)
        assert len(rsi) == len(ZIGZAG)
        assert np.isnan(rsi[:14]).all()
        assert not np.isnan(rsi[14:]).any()

    def test_bounded(self):
        rng = np.random.default_rng(7)
        closes = 100 + np.cumsum(rng.normal(0, 2, 300))
        rsi = calculate_rsi(closes, 14)
        valid = rsi[~np.isnan(rsi)]
        assert ((valid >= 0) & (valid <= 100)).all()

    def test_only_losses_is_zero(self):
        assert current_rsi([50.0 - i for i in range(30)]) == pytest.approx(0.0)

    def test_seed_value(self):
        # 14 changes: seven +2, seven -1 -> avg gain 1.0, avg loss 0.5
        closes = [100.0]
        for i in range(14):
            closes.append(closes[-1] + (2.0 if i % 2 == 0 else -1.0))
        assert calculate_rsi(closes, 14)[14] == pytest.approx(100 - 100 / 3)

    def test_insufficient_data(self):
        assert current_rsi([1.0, 2.0, 3.0], 14) is None

class TestMACD:
    def test_series_alignment(self):
        series = calculate_macd_series(ZIGZAG)
        assert np.isnan(series.macd[:25]).all()
        assert not np.isnan(series.macd[25:]).any()
        # signal EMA(9) seeded over the first nine MACD values
        assert np.isnan(series.signal[:33]).all()
        assert series.signal[33] == pytest.approx(series.macd[25:34].mean())

    def test_histogram_is_difference(self):
        series = calculate_macd_series(ZIGZAG)
        assert series.histogram[-1] == pytest.approx(series.macd[-1] - series.signal[-1])

    def test_latest_reading(self):
        result = calculate_macd([100.0 + i for i in range(60)])
        assert result.macd > 0
        assert result.histogram is not None

    def test_insufficient_data(self):
        result = calculate_macd([100.0 + i for i in range(20)])
        assert result.macd is None
        assert result.signal is None
        assert result.histogram is None

class TestADX:
    def test_flat_range_defaults_to_25(self, flat_bars):
        adx = calculate_adx_series(*_hlc(flat_bars), 14)
        assert adx[-1] == ADX_FALLBACK
        assert calculate_adx(*_hlc(flat_bars)) == 25.0

    def test_balanced_movement_defaults_to_25(self):
        # alternating up and down bars: +DM and -DM sums cancel, DX == 0
        bars = [
            MarketData(timestamp=b.timestamp, symbol='TEST', open=b.close,
                       high=102.0 if i % 2 else 101.0, low=100.0 if i % 2 else 99.0,
                       close=b.close)
            for i, b in enumerate(make_bars([101.0 if i % 2 else 100.0 for i in range(40)]))
        ]
        assert calculate_adx(*_hlc(bars)) == ADX_FALLBACK

    def test_range_without_directional_movement_defaults_to_25(self):
        # fixed high/low with moving closes: TR > 0 but both DM sums are 0
        highs = [101.0] * 30
        lows = [99.0] * 30
        closes = [100.0 + (0.5 if i % 2 else -0.5) for i in range(30)]
        adx = calculate_adx_series(highs, lows, closes, 14)
        assert (adx[14:] == ADX_FALLBACK).all()

    def test_warmup(self, rising_bars):
        adx = calculate_adx_series(*_hlc(rising_bars), 14)
        assert np.isnan(adx[:14]).all()
        assert not np.isnan(adx[14:]).any()

    def test_one_sided_movement(self, rising_bars):
        assert calculate_adx(*_hlc(rising_bars)) == pytest.approx(100.0)

    def test_insufficient_data(self):
        bars = make_bars([10.0, 11.0, 12.0])
        assert np.isnan(calculate_adx(*_hlc(bars)))

class TestATR:
    def test_constant_range(self, rising_bars):
        # each bar: high-low = 1, gap to previous close = 1.5
        assert calculate_atr(*_hlc(rising_bars)) == pytest.approx(1.5)

    def test_warmup(self, rising_bars):
        atr = calculate_atr_series(*_hlc(rising_bars), 14)
        assert np.isnan(atr[:14]).all()
        assert atr[14] == pytest.approx(1.5)

    def test_insufficient_data(self):
        bars = make_bars([10.0] * 5)
        assert np.isnan(calculate_atr(*_hlc(bars)))

class TestBollinger:
    def test_bands_around_sma(self):
        bands = calculate_bollinger_bands(ZIGZAG, 20, 2.0)
        for band in bands:
            assert len(band) == len(ZIGZAG)
            assert np.isnan(band[:19]).all()
            assert not np.isnan(band[19:]).any()
        window = np.array(ZIGZAG[-20:])
        assert bands.middle[-1] == pytest.approx(window.mean())
        assert bands.upper[-1] == pytest.approx(window.mean() + 2 * window.std())
        assert bands.lower[-1] == pytest.approx(window.mean() - 2 * window.std())

    def test_constant_series_collapses(self):
        bands = calculate_bollinger_bands([5.0] * 25, 20)
        assert bands.upper[-1] == bands.middle[-1] == bands.lower[-1] == 5.0

def test_hlc_indicators_registered():
    names = IndicatorRegistry.list_indicators()
    for name in ('rsi', 'adx', 'atr'):
        assert name in names

def test_vectorized_names_resolve_periods(rising_bars):
    values = calculate_indicators_vectorized(rising_bars, ['sma_20', 'ema_9', 'atr_14', 'rsi'])
    assert set(values) == {'sma_20', 'ema_9', 'atr_14', 'rsi'}
    assert np.isnan(values['sma_20'][:19]).all()
    assert values['atr_14'][-1] == pytest.approx(1.5)
    assert values['rsi'][-1] == 100.0

def test_indicator_set_aligned(rising_bars):
    indicators = calculate_indicator_set(rising_bars)
    assert len(indicators) == 60
    assert len(indicators.ema50) == 60
    assert indicators.ema50[48] is None
    assert indicators.ema50[49] is not None
    assert all(v is None for v in indicators.sma200)
    assert indicators.latest('rsi') == 100.0

class TestChartOverlay:
    def test_rows_match_bars(self, rising_bars):
        overlay = build_chart_overlay(rising_bars)
        assert len(overlay) == 60
        first = overlay[0]
        assert first.time == '2024-01-02'
        assert first.close == 100.0
        assert first.sma20 is None
        assert first.bb_upper is None

    def test_values_rounded(self):
        bars = make_bars([100 + i / 3 for i in range(30)])
        point = build_chart_overlay(bars)[-1]
        assert point.sma20 == round(point.sma20, 2)
        assert point.ema9 == round(point.ema9, 2)
        assert point.bb_lower < point.bb_middle < point.bb_upper

    def test_custom_periods(self, rising_bars):
        config = IndicatorConfig(sma_periods=(5, 10, 30))
        overlay = build_chart_overlay(rising_bars, config)
        assert overlay[3].sma20 is None
        assert overlay[4].sma20 == pytest.approx(102.0)
        assert overlay[29].sma200 is not None
