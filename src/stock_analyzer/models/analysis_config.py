from pydantic import BaseModel, Field, field_validator
from typing import List, Tuple

DEFAULT_UNIVERSE = [
    # Tech Giants
    'NVDA', 'AAPL', 'MSFT', 'GOOGL', 'AMZN', 'META', 'TSLA', 'AMD', 'NFLX', 'AVGO',
    # More Tech
    'CRM', 'ORCL', 'ADBE', 'INTC', 'QCOM', 'MU', 'AMAT', 'LRCX', 'ASML', 'SNPS',
    # Finance & Others
    'JPM', 'V', 'MA', 'BAC', 'GS',
]

class IndicatorConfig(BaseModel):
    ema_short: int = Field(9, description="Fast EMA period")
    ema_medium: int = Field(21, description="Medium EMA period")
    ema_long: int = Field(50, description="Slow EMA period")
    sma_periods: Tuple[int, int, int] = Field((20, 50, 200), description="Overlay SMA periods")
    rsi_period: int = Field(14, description="Wilder RSI period")
    macd_fast: int = Field(12, description="MACD fast EMA")
    macd_slow: int = Field(26, description="MACD slow EMA")
    macd_signal: int = Field(9, description="MACD signal EMA")
    adx_period: int = Field(14, description="ADX trailing window")
    atr_period: int = Field(14, description="ATR trailing window")
    bollinger_period: int = Field(20, description="Bollinger middle band SMA")
    bollinger_std: float = Field(2.0, description="Bollinger band width in std devs")

    @field_validator(
        'ema_short', 'ema_medium', 'ema_long', 'rsi_period', 'macd_fast',
        'macd_slow', 'macd_signal', 'adx_period', 'atr_period', 'bollinger_period'
    )
    @classmethod
    def validate_period(cls, v):
        if v < 1:
            raise ValueError("Indicator periods must be positive")
        return v

class AnalysisConfig(BaseModel):
    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    level_window: int = Field(50, description="Bars scanned for swing points")
    pivot_window: int = Field(20, description="Bars used for pivot high/low")
    swing_lookback: int = Field(5, description="Bars either side of a swing point")
    max_levels: int = Field(3, description="Support/resistance levels returned per side")
    regression_window: int = Field(30, description="Closes used for the projection slope")
    horizons: List[int] = Field(default_factory=lambda: [7, 14, 30], description="Projection horizons in days")
    volume_window: int = Field(20, description="Bars in the average volume")

    @field_validator('level_window', 'pivot_window', 'swing_lookback', 'max_levels',
                     'regression_window', 'volume_window')
    @classmethod
    def validate_window(cls, v):
        if v < 1:
            raise ValueError("Windows must be positive")
        return v

class ScannerConfig(BaseModel):
    symbols: List[str] = Field(default_factory=lambda: list(DEFAULT_UNIVERSE), description="Scanned universe")
    history_days: int = Field(365, description="Calendar days of history per symbol")
    cache_ttl: float = Field(60.0, description="Seconds an analyzed universe stays cached")
    max_workers: int = Field(8, description="Concurrent symbol fetches")
    picks_per_list: int = Field(5, description="Entries per pick list")

    @field_validator('history_days', 'max_workers', 'picks_per_list')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("Scanner limits must be positive")
        return v
