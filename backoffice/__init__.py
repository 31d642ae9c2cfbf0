"""Marketplace back-office: order lifecycle, stock and rewards reconciliation."""

__version__ = "1.0.0"
