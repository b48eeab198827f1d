"""
Data Ingestion Module

Turns spreadsheet exports into validated NAV series:
- CSV / Excel reading (first two columns: date, net value)
- Date and number normalization
- Series contract validation
"""

__version__ = "0.1.0"
