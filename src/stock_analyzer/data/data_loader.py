import logging
import yfinance as yf
import pandas as pd
from typing import List, Optional
from datetime import datetime, timedelta

from stock_analyzer.models.market_data import MarketData, Quote, StockSnapshot

logger = logging.getLogger(__name__)

class MarketDataError(Exception):
    """The provider returned no usable data for a symbol"""

class MarketDataLoader:
    @classmethod
    def load_historical_data(
        cls,
        symbol: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        interval: str = '1d'
    ) -> List[MarketData]:
        """
        Load historical bars using Yahoo Finance

        :param symbol: Ticker to fetch data for
        :param start_date: Start date for data (default: 1 year ago)
        :param end_date: End date for data (default: today)
        :param interval: Data interval (1d, 1h, etc.)
        :return: Bars ordered by time with no duplicate timestamps
        """
        # Set default dates if not provided
        end_date = end_date or datetime.now()
        start_date = start_date or (end_date - timedelta(days=365))

        logger.info(f"Fetching {interval} history for {symbol} from {start_date:%Y-%m-%d}")
        df = yf.Ticker(symbol).history(
            start=start_date,
            end=end_date,
            interval=interval
        )
        if df is None or df.empty:
            raise MarketDataError(f"No price history returned for {symbol}")

        return cls.frame_to_bars(df, symbol)

    @staticmethod
    def frame_to_bars(df: pd.DataFrame, symbol: str) -> List[MarketData]:
        """Convert a provider OHLCV frame to bars, dropping incomplete rows"""
        df = df.dropna(subset=['Open', 'High', 'Low', 'Close'])
        df = df[~df.index.duplicated(keep='last')].sort_index()

        market_data = []
        for idx, row in df.iterrows():
            volume = row.get('Volume')
            market_data.append(MarketData(
                timestamp=pd.Timestamp(idx).to_pydatetime(),
                symbol=symbol,
                open=row['Open'],
                high=row['High'],
                low=row['Low'],
                close=row['Close'],
                volume=None if pd.isna(volume) else float(volume)
            ))

        return market_data

    @staticmethod
    def _fast_info_value(info, name: str) -> Optional[float]:
        try:
            value = getattr(info, name)
        except (KeyError, AttributeError, TypeError):
            return None
        if value is None or pd.isna(value):
            return None
        return float(value)

    @classmethod
    def load_quote(cls, symbol: str) -> Quote:
        """Live quote snapshot from the provider's fast info"""
        info = yf.Ticker(symbol).fast_info

        price = cls._fast_info_value(info, 'last_price')
        if price is None:
            raise MarketDataError(f"No quote returned for {symbol}")

        prev_close = cls._fast_info_value(info, 'previous_close')
        change = price - prev_close if prev_close else None

        return Quote(
            symbol=symbol,
            name=symbol,
            price=price,
            change=change,
            change_percent=change / prev_close * 100 if change is not None else None,
            open=cls._fast_info_value(info, 'open'),
            high=cls._fast_info_value(info, 'day_high'),
            low=cls._fast_info_value(info, 'day_low'),
            prev_close=prev_close,
            volume=cls._fast_info_value(info, 'last_volume'),
            fifty_two_week_high=cls._fast_info_value(info, 'year_high'),
            fifty_two_week_low=cls._fast_info_value(info, 'year_low'),
            market_cap=cls._fast_info_value(info, 'market_cap')
        )

    @classmethod
    def load_snapshot(cls, symbol: str, history_days: int = 365, interval: str = '1d') -> StockSnapshot:
        """Quote plus trailing history for one analysis request"""
        end_date = datetime.now()
        bars = cls.load_historical_data(
            symbol,
            start_date=end_date - timedelta(days=history_days),
            end_date=end_date,
            interval=interval
        )
        return StockSnapshot(quote=cls.load_quote(symbol), bars=bars)
