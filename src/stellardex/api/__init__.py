"""HTTP application for the Stellar DEX backend."""
