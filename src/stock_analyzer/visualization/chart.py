import pandas as pd
import matplotlib.pyplot as plt
from typing import List, Optional

from stock_analyzer.models.analysis import ChartAnalysis, LevelSet, StockAnalysis
from stock_analyzer.models.indicators import OverlayPoint

class IndicatorChart:
    def __init__(self, overlay: List[OverlayPoint], chart: Optional[ChartAnalysis] = None):
        self.overlay = overlay
        self.chart = chart
        self._prepare_data()

    def _prepare_data(self):
        """Overlay rows to a DataFrame indexed by bar time"""
        self.overlay_df = pd.DataFrame(
            [point.model_dump() for point in self.overlay]
        )
        if not self.overlay_df.empty:
            self.overlay_df['date'] = pd.to_datetime(self.overlay_df['timestamp'], unit='s')
            self.overlay_df = self.overlay_df.set_index('date').astype(
                {column: float for column in self._series_columns()}
            )

    @staticmethod
    def _series_columns() -> List[str]:
        return ['close', 'sma20', 'sma50', 'sma200', 'ema9', 'ema21', 'ema50',
                'bb_upper', 'bb_middle', 'bb_lower']

    def plot_overlay(self, levels: Optional[LevelSet] = None, title: Optional[str] = None):
        """Close with moving averages, Bollinger fill and support/resistance lines"""
        levels = levels or (self.chart.levels if self.chart else None)
        fig, (ax1, ax2) = plt.subplots(
            2, 1, figsize=(15, 10), sharex=True, gridspec_kw={'height_ratios': [3, 1]}
        )
        df = self.overlay_df

        if not df.empty:
            ax1.plot(df.index, df['close'], label='Close', color='black', linewidth=1.2)
            for column, style in [('sma20', ':'), ('sma50', '--'), ('sma200', '--'),
                                  ('ema9', '-'), ('ema21', '-'), ('ema50', '-')]:
                if df[column].notna().any():
                    ax1.plot(df.index, df[column], style, label=column.upper(), linewidth=0.9)

            # Bollinger band
            ax1.fill_between(df.index, df['bb_lower'], df['bb_upper'], color='grey', alpha=0.15,
                             label='Bollinger Bands')

            if df['volume'].notna().any():
                ax2.bar(df.index, df['volume'].fillna(0), color='steelblue', alpha=0.6)

        if levels is not None:
            for i, level in enumerate(levels.resistance):
                ax1.axhline(level, color='red', alpha=0.5, linestyle='--', label='Resistance' if i == 0 else None)
            for i, level in enumerate(levels.support):
                ax1.axhline(level, color='green', alpha=0.5, linestyle='--', label='Support' if i == 0 else None)
            ax1.axhline(levels.pivot, color='orange', alpha=0.5, linestyle=':', label='Pivot')

        ax1.set_title(title or (f'{self.chart.symbol} Price & Indicators' if self.chart else 'Price & Indicators'))
        ax1.set_ylabel('Price ($)')
        ax1.grid(True)
        ax1.legend(loc='upper left')

        ax2.set_title('Volume')
        ax2.grid(True)
        plt.setp(ax2.xaxis.get_majorticklabels(), rotation=45)

        plt.tight_layout()
        return fig

    def print_summary(self, analysis: StockAnalysis):
        """Print the scalar analysis and, when available, the chart view"""
        print_analysis(analysis, self.chart)

def print_analysis(analysis: StockAnalysis, chart: Optional[ChartAnalysis] = None):
    ind = analysis.indicators
    print(f"{analysis.symbol} ({analysis.name}) ${analysis.price:.2f}")
    print(f"AI Score: {analysis.ai_score} - {analysis.rating}")
    print(f"Category: {analysis.category.value} ({analysis.horizon}, risk {analysis.risk_level})")
    print(f"Reason: {analysis.reason}")
    print(f"Recommendation: {analysis.recommendation}")

    print("\nIndicators:")
    print(f"RSI: {ind.rsi if ind.rsi is not None else 'n/a'}")
    print(f"MACD Histogram: {ind.macd_histogram if ind.macd_histogram is not None else 'n/a'}")
    print(f"SMA 50 / 200: {ind.sma50 or 'n/a'} / {ind.sma200 or 'n/a'}")
    print(f"Volume Ratio: {analysis.volume_ratio or 'n/a'}")
    if analysis.entry_point is not None:
        print(f"Entry / Exit: ${analysis.entry_point:.2f} / ${analysis.exit_point:.2f}")

    if chart is None:
        return

    if chart.trend is not None:
        print(f"\nTrend: {chart.trend.direction.value} (strength {chart.trend.strength:.0f})")
    if chart.levels is not None:
        print(f"Resistance: {', '.join(f'{r:.2f}' for r in chart.levels.resistance) or '-'}")
        print(f"Support: {', '.join(f'{s:.2f}' for s in chart.levels.support) or '-'}")
    for prediction in chart.predictions:
        print(f"{prediction.horizon}d: ${prediction.expected:.2f} "
              f"(${prediction.min:.2f} - ${prediction.max:.2f}, {prediction.confidence:.0f}% confidence)")
    if chart.insights is not None:
        print(f"\n{chart.insights.summary}")
        for action in chart.insights.actions:
            print(f"- {action}")
