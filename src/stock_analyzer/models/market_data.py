# src/stock_analyzer/models/market_data.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class MarketData(BaseModel):
    """Single OHLCV bar as delivered by the data provider"""
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    symbol: str
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

class Quote(BaseModel):
    """Live quote snapshot taken alongside the history request"""
    symbol: str
    name: Optional[str] = None
    price: float
    change: Optional[float] = None
    change_percent: Optional[float] = None
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    prev_close: Optional[float] = None
    volume: Optional[float] = None
    fifty_two_week_high: Optional[float] = None
    fifty_two_week_low: Optional[float] = None
    market_cap: Optional[float] = None

class StockSnapshot(BaseModel):
    """Series plus quote for one symbol, the unit of work for an analysis request"""
    quote: Quote
    bars: List[MarketData] = Field(default_factory=list)

    @property
    def symbol(self) -> str:
        return self.quote.symbol
