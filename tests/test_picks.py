from stock_analyzer.analysis.picks import (
    ScreenerFilter, build_stock_picks, daily_picks, market_mood, momentum_picks,
    value_picks, watchout_picks,
)
from stock_analyzer.models.analysis import Category, IndicatorSummary, StockAnalysis

def _stock(symbol, ai_score=50, category=Category.NEUTRAL, rsi=50.0, volume_ratio=1.0,
           change_5d=0.0, change_percent=0.0, volume=5e6, market_cap=100e9):
    return StockAnalysis(
        symbol=symbol,
        name=symbol,
        price=100.0,
        change_percent=change_percent,
        market_cap=market_cap,
        volume=volume,
        volume_ratio=volume_ratio,
        indicators=IndicatorSummary(rsi=rsi, price_change_5d=change_5d),
        ai_score=ai_score,
        rating='Hold',
        rating_class='hold',
        category=category,
        reason='',
        horizon='hold',
        horizon_thai='',
        recommendation='',
        risk_level='medium'
    )

def test_daily_picks_sorted_by_score():
    stocks = [
        _stock('A', ai_score=66),
        _stock('B', ai_score=90),
        _stock('C', ai_score=50, category=Category.DAILY),
        _stock('D', ai_score=64),
    ]
    picks = daily_picks(stocks)
    assert [s.symbol for s in picks.picks] == ['B', 'A', 'C']

def test_momentum_picks():
    stocks = [
        _stock('A', volume_ratio=1.4, change_5d=2.5),
        _stock('B', volume_ratio=2.0, category=Category.MOMENTUM),
        _stock('C', volume_ratio=1.4, change_5d=1.0),
    ]
    assert [s.symbol for s in momentum_picks(stocks).picks] == ['B', 'A']

def test_value_picks_lowest_rsi_first():
    stocks = [_stock('A', rsi=38.0), _stock('B', rsi=25.0), _stock('C', rsi=45.0)]
    assert [s.symbol for s in value_picks(stocks).picks] == ['B', 'A']

def test_watchout_picks():
    stocks = [_stock('A', rsi=75.0), _stock('B', ai_score=20, rsi=40.0), _stock('C', rsi=80.0)]
    assert [s.symbol for s in watchout_picks(stocks).picks] == ['C', 'A', 'B']

def test_pick_lists_capped():
    stocks = [_stock(f'S{i}', ai_score=70 + i) for i in range(8)]
    assert len(daily_picks(stocks, limit=5).picks) == 5

class TestMarketMood:
    def test_bullish(self):
        stocks = [_stock('A', 70), _stock('B', 65), _stock('C', 62), _stock('D', 50)]
        mood = market_mood(stocks)
        assert mood.mood == 'bullish'
        assert mood.bullish == 3
        assert mood.bearish == 0
        assert mood.total == 4

    def test_bearish(self):
        mood = market_mood([_stock('A', 30), _stock('B', 35), _stock('C', 50)])
        assert mood.mood == 'bearish'

    def test_neutral(self):
        mood = market_mood([_stock('A', 70), _stock('B', 30)])
        assert mood.mood == 'neutral'
        assert mood.avg_score == 50

    def test_empty(self):
        mood = market_mood([])
        assert mood.mood == 'neutral'
        assert mood.total == 0

def test_build_stock_picks():
    picks = build_stock_picks([_stock('A', 80), _stock('B', 20, rsi=30.0)])
    assert [s.symbol for s in picks.daily_picks.picks] == ['A']
    assert [s.symbol for s in picks.value_picks.picks] == ['B']
    assert [s.symbol for s in picks.watchout.picks] == ['B']

class TestScreenerFilter:
    def test_empty_filter_matches_all(self):
        stocks = [_stock('A'), _stock('B')]
        assert ScreenerFilter().apply(stocks) == stocks

    def test_bounds_inclusive(self):
        stocks = [_stock('A', rsi=30.0), _stock('B', rsi=50.0), _stock('C', rsi=70.0)]
        result = ScreenerFilter(rsi_min=30, rsi_max=50).apply(stocks)
        assert [s.symbol for s in result] == ['A', 'B']

    def test_units(self):
        stocks = [_stock('A', volume=2e6, market_cap=5e9), _stock('B', volume=20e6, market_cap=500e9)]
        assert [s.symbol for s in ScreenerFilter(volume_min=10).apply(stocks)] == ['B']
        assert [s.symbol for s in ScreenerFilter(market_cap_max=10).apply(stocks)] == ['A']

    def test_missing_value_excluded_when_bounded(self):
        stock = _stock('A', rsi=None)
        assert ScreenerFilter(rsi_min=10).matches(stock) is False
        assert ScreenerFilter(ai_score_min=40).matches(stock) is True
