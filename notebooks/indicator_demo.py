#%% [markdown]
# # Stock Analysis Demo

#
# This file is configured to run in VS Code's Interactive Window.

# ## Load market data
#%%
from stock_analyzer.core.analyzer import StockAnalyzer
from stock_analyzer.data.data_loader import MarketDataLoader
from stock_analyzer.models.analysis_config import AnalysisConfig, IndicatorConfig
from stock_analyzer.visualization.chart import IndicatorChart

snapshot = MarketDataLoader.load_snapshot('NVDA', history_days=365)
print(f"{len(snapshot.bars)} bars, last close {snapshot.bars[-1].close:.2f}")

#%% [markdown]
# ## Configure and run the analysis

#%%
config = AnalysisConfig(
    indicators=IndicatorConfig(
        ema_short=9,
        ema_medium=21,
        ema_long=50,
        rsi_period=14
    ),
    horizons=[7, 14, 30]
)

analyzer = StockAnalyzer(config)
analysis = analyzer.analyze(snapshot.bars, snapshot.quote)
chart_analysis = analyzer.analyze_chart(snapshot.bars, snapshot.quote)

# Visualize results
chart = IndicatorChart(analyzer.overlay(snapshot.bars), chart_analysis)
chart.print_summary(analysis)
chart.plot_overlay()
# %%
