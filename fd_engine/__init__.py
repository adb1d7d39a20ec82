"""fd-engine: Fixed Deposit account lifecycle and financial calculation engine."""

__version__ = "0.1.0"
