"""Multi-tenant walk-in queue and appointment engine for small service shops."""

__version__ = "0.1.0"
