"""Composite AI score, rating buckets and the category rule cascade.

Every threshold cascade is an ordered list evaluated top-down; the first
entry that matches wins. Missing inputs (``None`` or ``NaN``) never match a
threshold and contribute nothing to the score.
"""
import math
from dataclasses import dataclass
from typing import Callable, List, NamedTuple, Optional, Tuple

from stock_analyzer.models.analysis import Category, CategoryDetail, Rating

NEUTRAL_SCORE = 50

def _known(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value)

def _gt(value: Optional[float], threshold: float) -> bool:
    return _known(value) and value > threshold

def _lt(value: Optional[float], threshold: float) -> bool:
    return _known(value) and value < threshold

def _fmt(value: Optional[float], spec: str = '.2f') -> str:
    return format(value, spec) if _known(value) else 'n/a'

# (predicate on RSI, score adjustment)
RSI_ADJUSTMENTS: List[Tuple[Callable[[float], bool], int]] = [
    (lambda rsi: rsi < 30, 20),   # oversold = bullish
    (lambda rsi: rsi < 50, 10),
    (lambda rsi: rsi > 70, -15),  # overbought = bearish
    (lambda rsi: rsi > 60, -5),
]

def rsi_adjustment(rsi: float) -> int:
    for matches, adjustment in RSI_ADJUSTMENTS:
        if matches(rsi):
            return adjustment
    return 0

def calculate_ai_score(
    rsi: Optional[float],
    macd_histogram: Optional[float],
    price_vs_sma50: Optional[float],
    price_vs_sma200: Optional[float],
    volume_trend: Optional[float]
) -> int:
    """Weighted 0-100 score starting from a neutral 50.

    A histogram of exactly zero counts as bearish (-10): the MACD term only
    rewards a strictly positive histogram.
    """
    score = NEUTRAL_SCORE

    if _known(rsi):
        score += rsi_adjustment(rsi)
    if _known(macd_histogram):
        score += 15 if macd_histogram > 0 else -10
    if _known(price_vs_sma50):
        score += 12 if price_vs_sma50 > 0 else -8
    if _known(price_vs_sma200):
        score += 12 if price_vs_sma200 > 0 else -8
    if _known(volume_trend):
        if volume_trend > 1.1:
            score += 6
        elif volume_trend < 0.9:
            score -= 4

    return max(0, min(100, round(score)))

# (minimum score, label, css class), highest first
RATING_BUCKETS: List[Tuple[int, str, str]] = [
    (80, 'Strong Buy', 'strong-buy'),
    (60, 'Buy', 'buy'),
    (40, 'Hold', 'hold'),
    (20, 'Sell', 'sell'),
]

def get_rating(score: int) -> Rating:
    for minimum, label, css_class in RATING_BUCKETS:
        if score >= minimum:
            return Rating(rating=label, rating_class=css_class)
    return Rating(rating='Strong Sell', rating_class='strong-sell')

@dataclass(frozen=True)
class SignalSnapshot:
    """Latest readings a category rule can look at"""
    price: float
    ai_score: int
    rsi: Optional[float] = None
    macd_histogram: Optional[float] = None
    sma50: Optional[float] = None
    sma200: Optional[float] = None
    volume_ratio: Optional[float] = None
    price_change_5d: Optional[float] = None
    near_low_52w: Optional[float] = None

    @property
    def above_sma50(self) -> bool:
        return _known(self.sma50) and self.price > self.sma50

    @property
    def below_sma50(self) -> bool:
        return _known(self.sma50) and self.price < self.sma50

    @property
    def uptrend(self) -> bool:
        return self.above_sma50 and _known(self.sma200) and self.sma50 > self.sma200

    @property
    def downtrend(self) -> bool:
        return self.below_sma50 and _known(self.sma200) and self.sma50 < self.sma200

class CategoryRule(NamedTuple):
    category: Category
    matches: Callable[[SignalSnapshot], bool]

class RuleProfile(NamedTuple):
    """Rule cascade for one call site plus the RSI it treats as overbought"""
    name: str
    rules: List[CategoryRule]
    overbought_rsi: float

def is_momentum(s: SignalSnapshot) -> bool:
    return (_gt(s.volume_ratio, 1.5) and _gt(s.price_change_5d, 3)
            and _gt(s.rsi, 50) and _lt(s.rsi, 75))

def is_oversold_below_sma50(s: SignalSnapshot) -> bool:
    return _lt(s.rsi, 35) and s.below_sma50

def is_value_near_low(s: SignalSnapshot) -> bool:
    return is_oversold_below_sma50(s) and _lt(s.near_low_52w, 20)

def strong_buy(min_score: int) -> Callable[[SignalSnapshot], bool]:
    def matches(s: SignalSnapshot) -> bool:
        return s.ai_score >= min_score and _gt(s.macd_histogram, 0) and s.above_sma50
    return matches

def is_watchout(s: SignalSnapshot) -> bool:
    return _gt(s.rsi, 70) or s.ai_score < 35

def is_screener_watchout(s: SignalSnapshot) -> bool:
    return _gt(s.rsi, 72) or (s.ai_score < 35 and _lt(s.price_change_5d, -3))

# Single-symbol analysis
SINGLE_STOCK_RULES = RuleProfile('single', [
    CategoryRule(Category.MOMENTUM, is_momentum),
    CategoryRule(Category.VALUE, is_oversold_below_sma50),
    CategoryRule(Category.DAILY, strong_buy(65)),
    CategoryRule(Category.WATCHOUT, is_watchout),
], overbought_rsi=70)

# Universe scan feeding the pick lists
SCREENER_RULES = RuleProfile('screener', [
    CategoryRule(Category.MOMENTUM, is_momentum),
    CategoryRule(Category.VALUE, is_value_near_low),
    CategoryRule(Category.DAILY, strong_buy(70)),
    CategoryRule(Category.WATCHOUT, is_screener_watchout),
], overbought_rsi=72)

def classify(snapshot: SignalSnapshot, profile: RuleProfile = SINGLE_STOCK_RULES) -> Category:
    """First matching rule wins; no match is a normal neutral outcome"""
    for rule in profile.rules:
        if rule.matches(snapshot):
            return rule.category
    return Category.NEUTRAL

def calculate_entry_exit(
    price: float,
    sma50: Optional[float],
    high_52w: Optional[float],
    low_52w: Optional[float]
) -> Tuple[Optional[float], Optional[float]]:
    """Entry at SMA50 support and exit near the 52w high above it; below it,
    entry just over the 52w low and exit at SMA50 resistance"""
    if not _known(sma50):
        return None, None
    if price > sma50:
        entry = sma50
        exit_ = high_52w * 0.95 if _known(high_52w) else None
    else:
        entry = low_52w * 1.05 if _known(low_52w) else None
        exit_ = sma50
    return (round(entry, 2) if entry is not None else None,
            round(exit_, 2) if exit_ is not None else None)

def describe_category(
    category: Category,
    s: SignalSnapshot,
    entry_point: Optional[float],
    exit_point: Optional[float],
    profile: RuleProfile = SINGLE_STOCK_RULES
) -> CategoryDetail:
    """Horizon, risk and the analysis bullets shown for a category"""
    if category == Category.MOMENTUM:
        return CategoryDetail(
            category=category,
            horizon='short',
            horizon_thai='ระยะสั้น (1-2 สัปดาห์)',
            risk_level='high',
            reason=f"Momentum stock - volume up {(s.volume_ratio - 1) * 100:.0f}%",
            recommendation='Short-term speculative buy',
            analysis=[
                f"Price up {s.price_change_5d:.1f}% in 5 days",
                f"Volume {s.volume_ratio:.1f}x the usual level",
                f"RSI {s.rsi:.0f} is not overbought yet",
                "High risk, suited to short-term trading only",
                "Set a stop loss between -5% and -8%",
            ]
        )

    if category == Category.VALUE:
        return CategoryDetail(
            category=category,
            horizon='long',
            horizon_thai='ระยะยาว (3-6 เดือน)',
            risk_level='medium',
            reason='Oversold stock worth accumulating',
            recommendation='Accumulate for the long term',
            analysis=[
                f"RSI {s.rsi:.0f} is in the oversold zone (< 35)",
                "Price below SMA50 leaves room to recover",
                f"{_fmt(s.near_low_52w, '.1f')}% above the 52-week low",
                "Suited to gradual dollar-cost averaging",
                "May take 1-3 months to play out",
            ]
        )

    if category == Category.DAILY:
        if _known(exit_point):
            target = f"Target: ${exit_point} ({(exit_point / s.price - 1) * 100:+.1f}%)"
        else:
            target = "Target: n/a"
        return CategoryDetail(
            category=category,
            horizon='medium',
            horizon_thai='ระยะกลาง (1-3 เดือน)',
            risk_level='low',
            reason='Strong buy signal',
            recommendation='Buy and hold medium term' if s.uptrend else 'Buy on a pullback',
            analysis=[
                f"AI Score {s.ai_score}/100 is high",
                "MACD bullish, histogram positive",
                "Price above SMA50, trend pointing up",
                "Clear uptrend (price > SMA50 > SMA200)" if s.uptrend else "Building a new support base",
                target,
            ]
        )

    if category == Category.WATCHOUT:
        if _gt(s.rsi, profile.overbought_rsi):
            return CategoryDetail(
                category=category,
                horizon='avoid',
                horizon_thai='หลีกเลี่ยง',
                risk_level='very-high',
                reason=f"Overbought - RSI {s.rsi:.0f}",
                recommendation='Wait for a pullback before buying',
                analysis=[
                    f"RSI {s.rsi:.0f} is in the overbought zone (> 70)",
                    "A 5-15% correction is possible",
                    "Wait for RSI to drop below 50",
                    f"Better entry: ${_fmt(entry_point)}",
                    "Not a buy at the current price",
                ]
            )
        return CategoryDetail(
            category=category,
            horizon='avoid',
            horizon_thai='หลีกเลี่ยง',
            risk_level='very-high',
            reason='Weak momentum',
            recommendation='Sell or avoid',
            analysis=[
                f"AI Score {s.ai_score} is low",
                f"Price change over 5 days: {_fmt(s.price_change_5d, '.1f')}%",
                "Clear downtrend (price < SMA50 < SMA200)" if s.downtrend else "No clear direction",
                "Avoid until the trend changes",
                "If holding, consider a stop loss",
            ]
        )

    return CategoryDetail(
        category=Category.NEUTRAL,
        horizon='hold',
        horizon_thai='ถือ/รอดู',
        risk_level='medium',
        reason='No clear signal yet',
        recommendation='Wait for a clearer signal',
        analysis=[
            f"AI Score {s.ai_score} is mid-range",
            f"RSI {_fmt(s.rsi, '.0f')} is neutral",
            "Price above SMA50" if s.above_sma50 else "Price below SMA50",
            "Wait for a breakout or breakdown",
            f"Watch ${_fmt(s.sma50)} (SMA50)",
        ]
    )
