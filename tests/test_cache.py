import threading

import pytest

from stock_analyzer.core.cache import InMemoryCache

class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def cache(clock):
    return InMemoryCache(clock=clock)

def test_get_missing(cache):
    assert cache.get('quote:AAPL') is None

def test_set_and_get(cache):
    cache.set('quote:AAPL', {'price': 190.0}, ttl=60)
    assert cache.get('quote:AAPL') == {'price': 190.0}
    assert len(cache) == 1

def test_expiry(cache, clock):
    cache.set('quote:AAPL', 1, ttl=60)
    clock.now = 159.0
    assert cache.get('quote:AAPL') == 1
    clock.now = 160.0
    assert cache.get('quote:AAPL') is None
    assert len(cache) == 0

def test_overwrite_resets_ttl(cache, clock):
    cache.set('k', 'old', ttl=10)
    clock.now += 8
    cache.set('k', 'new', ttl=10)
    clock.now += 8
    assert cache.get('k') == 'new'

def test_clear(cache):
    cache.set('a', 1, ttl=10)
    cache.set('b', 2, ttl=10)
    cache.clear()
    assert cache.get('a') is None
    assert len(cache) == 0

def test_len_waits_for_writers(cache):
    cache.set('a', 1, ttl=10)
    sizes = []
    reader = threading.Thread(target=lambda: sizes.append(len(cache)))
    with cache._lock:
        reader.start()
        reader.join(timeout=0.05)
        assert reader.is_alive()
        cache._entries['b'] = (110.0, 2)
    reader.join()
    assert sizes == [2]
