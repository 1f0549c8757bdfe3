from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

class IndicatorSet(BaseModel):
    """Per-bar indicator arrays, aligned with the input series"""
    timestamps: List[datetime] = Field(default_factory=list)
    ema9: List[Optional[float]] = Field(default_factory=list)
    ema21: List[Optional[float]] = Field(default_factory=list)
    ema50: List[Optional[float]] = Field(default_factory=list)
    sma20: List[Optional[float]] = Field(default_factory=list)
    sma50: List[Optional[float]] = Field(default_factory=list)
    sma200: List[Optional[float]] = Field(default_factory=list)
    rsi: List[Optional[float]] = Field(default_factory=list)
    macd: List[Optional[float]] = Field(default_factory=list)
    macd_signal: List[Optional[float]] = Field(default_factory=list)
    macd_histogram: List[Optional[float]] = Field(default_factory=list)
    adx: List[Optional[float]] = Field(default_factory=list)
    atr: List[Optional[float]] = Field(default_factory=list)
    bb_upper: List[Optional[float]] = Field(default_factory=list)
    bb_middle: List[Optional[float]] = Field(default_factory=list)
    bb_lower: List[Optional[float]] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.timestamps)

    def latest(self, name: str) -> Optional[float]:
        """Value of an indicator at the last bar, None when unavailable"""
        values = getattr(self, name)
        return values[-1] if values else None

class MACDResult(BaseModel):
    """Scalar MACD reading at the latest bar"""
    macd: Optional[float] = None
    signal: Optional[float] = None
    histogram: Optional[float] = None

class OverlayPoint(BaseModel):
    """One chart row: the bar plus the overlay series at that bar"""
    time: str
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    ema9: Optional[float] = None
    ema21: Optional[float] = None
    ema50: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None
