"""
Core backtest engine modules.

Provides unified interfaces for:
- Candle data (Yahoo Finance download, keyed CSV cache, in-memory replay)
- Indicator calculations (RSI, EMA, ADX)
- Position lifecycle simulation and performance analysis
- Parameter grid optimization and robustness validation
- Trading pair screening and the live trend/RSI signal loop
"""
