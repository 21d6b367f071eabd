"""
XEN TradeHub affiliate ledger.

Affiliate registration, referral tracking, tiered commissions, monthly
challenge rewards and payouts on top of an async SQLAlchemy session.
"""

__version__ = "1.0.0"
