"""Cash-flow dashboard: payables/receivables ledger service."""
__version__ = "1.0.0"
