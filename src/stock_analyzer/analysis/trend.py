import math
from typing import Callable, List, NamedTuple, Optional

from stock_analyzer.models.analysis import TrendAssessment, TrendDirection

class TrendInputs(NamedTuple):
    ema9: float
    ema21: float
    ema50: float
    adx: float
    price: float

class TrendRule(NamedTuple):
    """A direction rule and the strength formula used when it matches"""
    direction: TrendDirection
    matches: Callable[[TrendInputs], bool]
    strength: Callable[[TrendInputs], float]

def _is_uptrend(t: TrendInputs) -> bool:
    return t.ema9 > t.ema21 > t.ema50 and t.price > t.ema9

def _is_downtrend(t: TrendInputs) -> bool:
    return t.ema9 < t.ema21 < t.ema50 and t.price < t.ema9

def _trending_strength(t: TrendInputs) -> float:
    return min(100.0, t.adx * 2.5)

def _default_strength(t: TrendInputs) -> float:
    return min(100.0, t.adx * 2)

# Evaluated top-down. Strength depends on the branch that matched, so a
# SIDEWAYS result can carry either of two formulas.
TREND_RULES: List[TrendRule] = [
    TrendRule(TrendDirection.UPTREND, _is_uptrend, _trending_strength),
    TrendRule(TrendDirection.DOWNTREND, _is_downtrend, _trending_strength),
    TrendRule(TrendDirection.SIDEWAYS, lambda t: t.adx < 20, lambda t: 100 - t.adx * 2),
    TrendRule(TrendDirection.SIDEWAYS, lambda t: True, _default_strength),
]

def match_trend_rule(inputs: TrendInputs) -> TrendRule:
    for rule in TREND_RULES:
        if rule.matches(inputs):
            return rule
    return TREND_RULES[-1]

def detect_trend(ema9: float, ema21: float, ema50: float, adx: float, price: float) -> TrendAssessment:
    """Classify the latest bar from its EMA triplet, ADX and the live price"""
    inputs = TrendInputs(ema9, ema21, ema50, adx, price)
    rule = match_trend_rule(inputs)
    strength = max(0.0, rule.strength(inputs))

    return TrendAssessment(
        direction=rule.direction,
        strength=strength,
        explanation=explain_trend(rule.direction, strength, inputs),
        ema9=ema9,
        ema21=ema21,
        ema50=ema50,
        adx=adx
    )

def strength_label(strength: float) -> str:
    if strength > 70:
        return "strong"
    if strength > 40:
        return "moderate"
    return "weak"

def explain_trend(direction: TrendDirection, strength: float, t: TrendInputs) -> str:
    """Human-readable reasoning behind a trend classification"""
    label = strength_label(strength)

    if direction == TrendDirection.UPTREND:
        return "\n".join([
            f"The stock is in a {label} uptrend.",
            f"- EMA 9 ({t.ema9:.2f}) is above EMA 21 ({t.ema21:.2f}) and EMA 50 ({t.ema50:.2f})",
            f"- Price (${t.price:.2f}) trades above every moving average",
            f"- ADX at {t.adx:.1f} shows {'a clear' if t.adx > 25 else 'a still tentative'} trend",
            "Suggestion: " + ("strong trend, suited to trend following" if strength > 60
                              else "wait for the trend to confirm"),
        ])
    if direction == TrendDirection.DOWNTREND:
        return "\n".join([
            f"The stock is in a {label} downtrend.",
            f"- EMA 9 ({t.ema9:.2f}) is below EMA 21 ({t.ema21:.2f}) and EMA 50 ({t.ema50:.2f})",
            f"- Price (${t.price:.2f}) trades below every moving average",
            f"- ADX at {t.adx:.1f} shows {'clear' if t.adx > 25 else 'mild'} selling pressure",
            "Warning: " + ("strong downtrend, be careful buying" if strength > 60
                           else "a reversal is possible"),
        ])
    return "\n".join([
        "The stock is moving sideways with no clear trend.",
        "- The EMAs are intertwined, the market has no direction",
        f"- ADX at {t.adx:.1f} confirms the lack of a trend",
        "- Price oscillates between support and resistance",
        "Suggestion: range trading, buy near support and sell near resistance",
    ])

def trend_from_values(ema9: Optional[float], ema21: Optional[float], ema50: Optional[float],
                      adx: Optional[float], price: float) -> Optional[TrendAssessment]:
    """detect_trend guarded for insufficient data: None when any input is missing"""
    if any(v is None or math.isnan(v) for v in (ema9, ema21, ema50, adx)):
        return None
    return detect_trend(ema9, ema21, ema50, adx, price)
