"""Multi-tenant voucher backend for travel agencies."""

__version__ = "0.1.0"
