"""
Analysis Engine Module

Calculates performance metrics from fund NAV series:
- Cumulative and annualized return
- Volatility and Sharpe ratio (weekly resampled)
- Maximum drawdown and recovery time
- Trailing one-year window
- Cross-product correlation and benchmark comparisons
"""

__version__ = "0.1.0"
