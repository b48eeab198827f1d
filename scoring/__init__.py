"""
Product Scoring Module

Rates a product against category-specific tiered standards:
- Equity (optionally index-enhanced)
- Fixed income
- Alternative strategies (optionally market-neutral / arbitrage)
"""

__version__ = "0.1.0"
