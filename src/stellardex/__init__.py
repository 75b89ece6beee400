"""Non-custodial Stellar DEX backend and client workflow."""

__version__ = "0.1.0"
