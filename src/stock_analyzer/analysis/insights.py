from typing import Dict, List, Optional

from stock_analyzer.models.analysis import Insights, LevelSet, TrendAssessment, TrendDirection
from stock_analyzer.models.indicators import MACDResult

def _price(level: Optional[float]) -> str:
    return f"${level:.2f}" if level is not None else "-"

def _first(levels: List[float]) -> Optional[float]:
    return levels[0] if levels else None

def indicator_signals(trend: Optional[TrendAssessment], rsi: Optional[float],
                      macd: MACDResult, adx: Optional[float]) -> Dict[str, str]:
    """Bullish/bearish style labels for each indicator panel"""
    signals = {}

    if trend is not None:
        if trend.ema9 > trend.ema21 > trend.ema50:
            signals['ma'] = 'Bullish'
        elif trend.ema9 < trend.ema21 < trend.ema50:
            signals['ma'] = 'Bearish'
        else:
            signals['ma'] = 'Neutral'

    if rsi is not None:
        if rsi > 70:
            signals['rsi'] = 'Overbought'
        elif rsi < 30:
            signals['rsi'] = 'Oversold'
        else:
            signals['rsi'] = 'Neutral'

    if macd.histogram is not None and macd.macd is not None:
        if macd.histogram > 0 and macd.macd > 0:
            signals['macd'] = 'Bullish'
        elif macd.histogram < 0 and macd.macd < 0:
            signals['macd'] = 'Bearish'
        else:
            signals['macd'] = 'Mixed'

    if adx is not None:
        if adx > 40:
            signals['adx'] = 'Very Strong'
        elif adx > 25:
            signals['adx'] = 'Strong'
        else:
            signals['adx'] = 'Weak'

    return signals

def summary_insight(trend: TrendAssessment, rsi: float, symbol: str) -> str:
    if trend.direction == TrendDirection.UPTREND:
        return (
            f"{symbol} is in a {'strong' if trend.strength > 60 else 'developing'} uptrend. "
            f"RSI at {rsi:.1f} {'(overbought, may pause)' if rsi > 70 else '(still has room to run)'}. "
            + ("Wait to buy on a pullback to support." if trend.strength > 60
               else "Watch whether the trend strengthens.")
        )
    if trend.direction == TrendDirection.DOWNTREND:
        return (
            f"{symbol} is in a {'clear ' if trend.strength > 60 else ''}downtrend. "
            f"RSI at {rsi:.1f}{' (oversold, may bounce)' if rsi < 30 else ''}. "
            "Be careful and wait for a reversal signal before buying."
        )
    return (f"{symbol} is moving sideways without a clear trend, "
            "suited to range trading between support and resistance.")

def opportunity_insight(trend: TrendAssessment, rsi: float, levels: LevelSet) -> str:
    support = _first(levels.support)
    resistance = _first(levels.resistance)

    if trend.direction == TrendDirection.UPTREND and rsi < 60:
        if support is not None:
            entry_zone = f"${support:.2f} - ${support * 1.02:.2f}"
        else:
            entry_zone = "the nearest support"
        return f"The uptrend is intact. A good entry zone is {entry_zone}, targeting {_price(resistance)}."
    if trend.direction == TrendDirection.DOWNTREND and rsi < 30:
        return "RSI is oversold, a short-term bounce is possible but wait for confirmation."
    if trend.direction == TrendDirection.SIDEWAYS:
        return f"Range trade: buy near support {_price(support)}, sell near resistance {_price(resistance)}."
    return f"Watch for a breakout above key resistance at {_price(resistance)} for a new buy signal."

def risk_insight(trend: TrendAssessment, rsi: float, macd: MACDResult, levels: LevelSet) -> str:
    risks = []

    if rsi > 70:
        risks.append("RSI is overbought, a correction is possible")
    if rsi < 30 and trend.direction == TrendDirection.DOWNTREND:
        risks.append("Oversold but still in a downtrend, beware of a value trap")
    if macd.histogram is not None and macd.histogram < 0 and trend.direction == TrendDirection.UPTREND:
        risks.append("MACD histogram is negative, momentum may be slowing")
    if not levels.support:
        risks.append("No clear support found, downside risk is high")

    return " | ".join(risks) if risks else "Risk is at a normal level, always use a stop loss"

def action_points(trend: TrendAssessment, rsi: float, levels: LevelSet) -> List[str]:
    actions = []
    support = _first(levels.support)
    resistance = _first(levels.resistance)

    if trend.direction == TrendDirection.UPTREND:
        if resistance is not None:
            actions.append(f"First target at resistance R1: {_price(resistance)}")
        if support is not None:
            actions.append(f"Place a stop loss below support S1: {_price(support)}")
        actions.append("Buy on a pullback to EMA 21 or support")
    elif trend.direction == TrendDirection.DOWNTREND:
        actions.append("Avoid buying until a reversal signal appears")
        if support is not None:
            actions.append(f"Watch key support at {_price(support)}")
        actions.append("Wait for a close above EMA 21 before considering a buy")
    else:
        actions.append("Buy near support, sell near resistance (range trading)")
        actions.append("Wait for a breakout or breakdown to find the next trend")
        actions.append("Use a smaller position size while sideways")

    if rsi > 70:
        actions.append("RSI overbought - avoid opening new positions")
    if rsi < 30:
        actions.append("RSI oversold - watch for a reversal signal")

    return actions

def generate_insights(trend: TrendAssessment, rsi: float, macd: MACDResult,
                      levels: LevelSet, symbol: str) -> Insights:
    return Insights(
        summary=summary_insight(trend, rsi, symbol),
        opportunity=opportunity_insight(trend, rsi, levels),
        risk=risk_insight(trend, rsi, macd, levels),
        actions=action_points(trend, rsi, levels)
    )
