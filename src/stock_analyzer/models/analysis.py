from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from stock_analyzer.models.indicators import MACDResult

class TrendDirection(str, Enum):
    UPTREND = "UPTREND"
    DOWNTREND = "DOWNTREND"
    SIDEWAYS = "SIDEWAYS"

class Category(str, Enum):
    MOMENTUM = "momentum"
    VALUE = "value"
    DAILY = "daily"
    WATCHOUT = "watchout"
    NEUTRAL = "neutral"

class TrendAssessment(BaseModel):
    direction: TrendDirection
    strength: float = Field(..., ge=0, le=100)
    explanation: str = ""
    ema9: Optional[float] = None
    ema21: Optional[float] = None
    ema50: Optional[float] = None
    adx: Optional[float] = None

class LevelSet(BaseModel):
    support: List[float] = Field(default_factory=list, description="Closest first, below price")
    resistance: List[float] = Field(default_factory=list, description="Closest first, above price")
    pivot: float

class Prediction(BaseModel):
    horizon: int = Field(..., description="Horizon in days")
    expected: float
    min: float
    max: float
    confidence: float

class Rating(BaseModel):
    rating: str
    rating_class: str

class IndicatorSummary(BaseModel):
    rsi: Optional[float] = None
    macd_histogram: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    price_change_5d: Optional[float] = None
    price_change_20d: Optional[float] = None
    near_high_52w: Optional[float] = None

class CategoryDetail(BaseModel):
    """Presentation payload attached to a matched category"""
    category: Category
    horizon: str
    horizon_thai: str
    risk_level: str
    reason: str
    recommendation: str
    analysis: List[str] = Field(default_factory=list)

class StockAnalysis(BaseModel):
    """Flat scalar summary for one analyzed symbol"""
    symbol: str
    name: str
    price: float
    change: Optional[float] = None
    change_percent: Optional[float] = None
    market_cap: Optional[float] = None
    volume: Optional[float] = None
    avg_volume: Optional[float] = None
    volume_ratio: Optional[float] = None
    indicators: IndicatorSummary
    ai_score: int = Field(..., ge=0, le=100)
    rating: str
    rating_class: str
    category: Category
    reason: str
    horizon: str
    horizon_thai: str
    recommendation: str
    analysis: List[str] = Field(default_factory=list)
    entry_point: Optional[float] = None
    exit_point: Optional[float] = None
    risk_level: str
    timestamp: datetime = Field(default_factory=datetime.now)

class Insights(BaseModel):
    summary: str
    opportunity: str
    risk: str
    actions: List[str] = Field(default_factory=list)

class ChartAnalysis(BaseModel):
    """Trend, levels, projections and insights for the chart view"""
    symbol: str
    price: float
    trend: Optional[TrendAssessment] = None
    levels: Optional[LevelSet] = None
    predictions: List[Prediction] = Field(default_factory=list)
    rsi: Optional[float] = None
    macd: MACDResult = Field(default_factory=MACDResult)
    adx: Optional[float] = None
    atr: Optional[float] = None
    signals: Dict[str, str] = Field(default_factory=dict)
    insights: Optional[Insights] = None

class MarketMood(BaseModel):
    mood: str
    message: str
    avg_score: int
    bullish: int
    bearish: int
    total: int

class PickList(BaseModel):
    title: str
    description: str
    picks: List[StockAnalysis] = Field(default_factory=list)

class StockPicks(BaseModel):
    daily_picks: PickList
    momentum: PickList
    value_picks: PickList
    watchout: PickList
    market_mood: MarketMood
    updated: datetime = Field(default_factory=datetime.now)
