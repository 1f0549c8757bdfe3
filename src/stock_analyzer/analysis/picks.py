from typing import Callable, List, Optional, Sequence
from pydantic import BaseModel, Field

from stock_analyzer.models.analysis import Category, MarketMood, PickList, StockAnalysis, StockPicks

def _rsi(stock: StockAnalysis, default: float) -> float:
    return stock.indicators.rsi if stock.indicators.rsi is not None else default

def _change_5d(stock: StockAnalysis) -> float:
    return stock.indicators.price_change_5d if stock.indicators.price_change_5d is not None else 0.0

def is_daily_pick(stock: StockAnalysis) -> bool:
    return stock.category == Category.DAILY or stock.ai_score >= 65

def is_momentum_pick(stock: StockAnalysis) -> bool:
    return stock.category == Category.MOMENTUM or (
        (stock.volume_ratio or 0) > 1.3 and _change_5d(stock) > 2
    )

def is_value_pick(stock: StockAnalysis) -> bool:
    return stock.category == Category.VALUE or _rsi(stock, 100) < 40

def is_watchout_pick(stock: StockAnalysis) -> bool:
    return stock.category == Category.WATCHOUT or _rsi(stock, 0) > 70 or stock.ai_score < 30

def select_picks(stocks: Sequence[StockAnalysis], include: Callable[[StockAnalysis], bool],
                 sort_key: Callable[[StockAnalysis], float], reverse: bool, limit: int = 5) -> List[StockAnalysis]:
    return sorted((s for s in stocks if include(s)), key=sort_key, reverse=reverse)[:limit]

def daily_picks(stocks: Sequence[StockAnalysis], limit: int = 5) -> PickList:
    return PickList(
        title='AI Daily Picks',
        description='Stocks the AI recommends buying today',
        picks=select_picks(stocks, is_daily_pick, lambda s: s.ai_score, True, limit)
    )

def momentum_picks(stocks: Sequence[StockAnalysis], limit: int = 5) -> PickList:
    return PickList(
        title='Momentum Stocks',
        description='High volume and momentum',
        picks=select_picks(stocks, is_momentum_pick, lambda s: s.volume_ratio or 0, True, limit)
    )

def value_picks(stocks: Sequence[StockAnalysis], limit: int = 5) -> PickList:
    return PickList(
        title='Value Picks',
        description='Oversold stocks worth watching',
        picks=select_picks(stocks, is_value_pick, lambda s: _rsi(s, 100), False, limit)
    )

def watchout_picks(stocks: Sequence[StockAnalysis], limit: int = 5) -> PickList:
    return PickList(
        title='Watch Out',
        description='Stocks showing warning signals',
        picks=select_picks(stocks, is_watchout_pick, lambda s: _rsi(s, 0), True, limit)
    )

def market_mood(stocks: Sequence[StockAnalysis]) -> MarketMood:
    """Aggregate mood of the scanned universe from the spread of AI scores"""
    total = len(stocks)
    avg_score = sum(s.ai_score for s in stocks) / total if total else 0
    bullish = sum(1 for s in stocks if s.ai_score >= 60)
    bearish = sum(1 for s in stocks if s.ai_score < 40)

    mood, message = 'neutral', 'Market is range bound'
    if avg_score >= 60 and bullish > bearish * 2:
        mood, message = 'bullish', 'Market leans bullish'
    elif avg_score < 45 and bearish > bullish * 2:
        mood, message = 'bearish', 'Market leans bearish, be careful'

    return MarketMood(
        mood=mood,
        message=message,
        avg_score=round(avg_score),
        bullish=bullish,
        bearish=bearish,
        total=total
    )

def build_stock_picks(stocks: Sequence[StockAnalysis], limit: int = 5) -> StockPicks:
    return StockPicks(
        daily_picks=daily_picks(stocks, limit),
        momentum=momentum_picks(stocks, limit),
        value_picks=value_picks(stocks, limit),
        watchout=watchout_picks(stocks, limit),
        market_mood=market_mood(stocks)
    )

class ScreenerFilter(BaseModel):
    """Optional inclusive bounds applied to analyzed stocks"""
    change_min: Optional[float] = Field(None, description="Minimum daily change %")
    change_max: Optional[float] = Field(None, description="Maximum daily change %")
    rsi_min: Optional[float] = None
    rsi_max: Optional[float] = None
    volume_min: Optional[float] = Field(None, description="Minimum volume, millions")
    volume_max: Optional[float] = Field(None, description="Maximum volume, millions")
    market_cap_min: Optional[float] = Field(None, description="Minimum market cap, billions")
    market_cap_max: Optional[float] = Field(None, description="Maximum market cap, billions")
    ai_score_min: Optional[float] = None
    ai_score_max: Optional[float] = None

    @staticmethod
    def _within(value: Optional[float], low: Optional[float], high: Optional[float]) -> bool:
        if low is None and high is None:
            return True
        if value is None:
            return False
        if low is not None and value < low:
            return False
        if high is not None and value > high:
            return False
        return True

    def matches(self, stock: StockAnalysis) -> bool:
        volume_m = stock.volume / 1e6 if stock.volume is not None else None
        market_cap_b = stock.market_cap / 1e9 if stock.market_cap is not None else None
        return (
            self._within(stock.change_percent, self.change_min, self.change_max)
            and self._within(stock.indicators.rsi, self.rsi_min, self.rsi_max)
            and self._within(volume_m, self.volume_min, self.volume_max)
            and self._within(market_cap_b, self.market_cap_min, self.market_cap_max)
            and self._within(stock.ai_score, self.ai_score_min, self.ai_score_max)
        )

    def apply(self, stocks: Sequence[StockAnalysis]) -> List[StockAnalysis]:
        return [s for s in stocks if self.matches(s)]
