import pytest
import matplotlib
from datetime import datetime, timedelta

from stock_analyzer.models.market_data import MarketData, Quote

matplotlib.use('Agg')

def make_bar(timestamp, close, spread=0.5, volume=1_000_000, symbol="TEST"):
    return MarketData(
        timestamp=timestamp,
        symbol=symbol,
        open=close,
        high=close + spread,
        low=close - spread,
        close=close,
        volume=volume
    )

def make_bars(closes, spread=0.5, volume=1_000_000, symbol="TEST"):
    """One daily bar per close, high/low an even spread around it"""
    start = datetime(2024, 1, 2)
    return [
        make_bar(start + timedelta(days=i), close, spread, volume, symbol)
        for i, close in enumerate(closes)
    ]

def make_quote(bars, symbol="TEST", **overrides):
    fields = dict(
        symbol=symbol,
        name=f"{symbol} Inc.",
        price=bars[-1].close,
        change=bars[-1].close - bars[-2].close,
        change_percent=(bars[-1].close / bars[-2].close - 1) * 100,
        volume=bars[-1].volume,
        market_cap=50e9
    )
    fields.update(overrides)
    return Quote(**fields)

@pytest.fixture
def rising_bars():
    """60 bars rising one point per bar from 100"""
    return make_bars([100.0 + i for i in range(60)])

@pytest.fixture
def falling_bars():
    return make_bars([200.0 - i for i in range(60)])

@pytest.fixture
def flat_bars():
    return make_bars([10.0] * 40, spread=0.0)

@pytest.fixture
def accelerating_bars():
    """250 bars of quickening gains, enough history for the 200 bar SMA"""
    return make_bars([50.0 + 0.1 * i + 0.001 * i ** 2 for i in range(250)])
