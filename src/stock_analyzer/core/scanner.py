import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional

from stock_analyzer.analysis.picks import ScreenerFilter, build_stock_picks
from stock_analyzer.analysis.scoring import SCREENER_RULES
from stock_analyzer.core.analyzer import StockAnalyzer
from stock_analyzer.core.cache import Cache, InMemoryCache
from stock_analyzer.data.data_loader import MarketDataError, MarketDataLoader
from stock_analyzer.models.analysis import ChartAnalysis, StockAnalysis, StockPicks
from stock_analyzer.models.analysis_config import ScannerConfig
from stock_analyzer.models.indicators import OverlayPoint

ANALYZED_STOCKS_KEY = 'analyzed_stocks'

class MarketScanner:
    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        analyzer: Optional[StockAnalyzer] = None,
        loader=MarketDataLoader,
        cache: Optional[Cache] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the scanner over a universe of symbols.

        :param config: Universe, history length, cache TTL and pool size
        :param analyzer: Pure analysis engine shared by every worker
        :param loader: Data source exposing load_snapshot(symbol, history_days)
        :param cache: Store for the analyzed universe (default: in-memory)
        :param logger: Optional custom logger
        """
        self.config = config or ScannerConfig()
        self.analyzer = analyzer or StockAnalyzer()
        self.loader = loader
        self.cache = cache if cache is not None else InMemoryCache()

        # Logging
        self.logger = logger or logging.getLogger(__name__)

    def analyze_symbol(self, symbol: str) -> StockAnalysis:
        """Fetch and analyze a single symbol with the single-stock rules"""
        snapshot = self.loader.load_snapshot(symbol, history_days=self.config.history_days)
        return self.analyzer.analyze(snapshot.bars, snapshot.quote)

    def chart_analysis(self, symbol: str) -> ChartAnalysis:
        snapshot = self.loader.load_snapshot(symbol, history_days=self.config.history_days)
        return self.analyzer.analyze_chart(snapshot.bars, snapshot.quote)

    def chart_overlay(self, symbol: str) -> List[OverlayPoint]:
        snapshot = self.loader.load_snapshot(symbol, history_days=self.config.history_days)
        return self.analyzer.overlay(snapshot.bars)

    def _screen_symbol(self, symbol: str) -> StockAnalysis:
        snapshot = self.loader.load_snapshot(symbol, history_days=self.config.history_days)
        return self.analyzer.analyze(snapshot.bars, snapshot.quote, profile=SCREENER_RULES)

    def analyze_all(self) -> List[StockAnalysis]:
        """
        Analyze the whole universe concurrently.

        Symbols whose fetch or analysis fails are logged and left out. The
        result keeps the configured symbol order and is cached for
        ``cache_ttl`` seconds.

        :return: One analysis per symbol that succeeded
        """
        cached = self.cache.get(ANALYZED_STOCKS_KEY)
        if cached is not None:
            self.logger.debug("Using cached universe analysis")
            return cached

        self.logger.info(f"Scanning {len(self.config.symbols)} symbols")
        results = {}
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {
                executor.submit(self._screen_symbol, symbol): symbol
                for symbol in self.config.symbols
            }
            for future in as_completed(futures):
                symbol = futures[future]
                try:
                    results[symbol] = future.result()
                except MarketDataError as e:
                    self.logger.warning(f"Skipping {symbol}: {e}")
                except Exception as e:
                    self.logger.error(f"Error analyzing {symbol}: {e}")

        stocks = [results[symbol] for symbol in self.config.symbols if symbol in results]
        self.logger.info(f"Analyzed {len(stocks)}/{len(self.config.symbols)} symbols")
        self.cache.set(ANALYZED_STOCKS_KEY, stocks, self.config.cache_ttl)
        return stocks

    def stock_picks(self) -> StockPicks:
        return build_stock_picks(self.analyze_all(), self.config.picks_per_list)

    def recommendations(self, limit: int = 10) -> List[StockAnalysis]:
        """Highest AI scores first"""
        return sorted(self.analyze_all(), key=lambda s: s.ai_score, reverse=True)[:limit]

    def screen(self, screener: ScreenerFilter) -> List[StockAnalysis]:
        return screener.apply(self.analyze_all())

def main():
    from stock_analyzer.visualization.chart import IndicatorChart

    logging.basicConfig(level=logging.INFO)

    # Scan a small universe
    config = ScannerConfig(symbols=['AAPL', 'MSFT', 'NVDA', 'JPM'], max_workers=4)
    scanner = MarketScanner(config=config)

    picks = scanner.stock_picks()
    print(f"Market mood: {picks.market_mood.mood} ({picks.market_mood.message})")
    for pick_list in (picks.daily_picks, picks.momentum, picks.value_picks, picks.watchout):
        print(f"\n{pick_list.title}: {', '.join(s.symbol for s in pick_list.picks) or '-'}")

    # Detailed view of the top recommendation
    top = scanner.recommendations(limit=1)
    if top:
        symbol = top[0].symbol
        chart = IndicatorChart(scanner.chart_overlay(symbol), scanner.chart_analysis(symbol))
        print()
        chart.print_summary(top[0])
        chart.plot_overlay().savefig(f"{symbol}_chart.png")

if __name__ == "__main__":
    main()
