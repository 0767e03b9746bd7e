"""Investment club ledger: replay, unitized membership equity, NAV analytics."""

__version__ = "0.1.0"
