from typing import Callable, Dict, List, Optional
import numpy as np

class IndicatorRegistry:
    """Registry of named indicator functions"""
    _indicators: Dict[str, Callable[..., np.ndarray]] = {}

    @classmethod
    def register(cls, name: Optional[str] = None):
        """Decorator to register an indicator calculation function"""
        def decorator(func: Callable):
            # Use function name if no name provided
            cls._indicators[name or func.__name__] = func
            return func
        return decorator

    @classmethod
    def get_indicator(cls, name: str) -> Optional[Callable]:
        """Get indicator calculation function by name"""
        return cls._indicators.get(name)

    @classmethod
    def compute(cls, name: str, *args, **kwargs):
        """Run a registered indicator, raising KeyError for unknown names"""
        func = cls.get_indicator(name)
        if func is None:
            raise KeyError(f"Unknown indicator: {name}")
        return func(*args, **kwargs)

    @classmethod
    def list_indicators(cls) -> List[str]:
        """List all registered indicators"""
        return sorted(cls._indicators.keys())
