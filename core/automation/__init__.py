"""
Automation module for the long-running signal loop.

Periodically fetches candles and logs trend/RSI decisions.
"""
from .scheduler import SignalScheduler

__all__ = ["SignalScheduler"]
