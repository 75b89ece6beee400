"""Application configuration using pydantic-settings.

Targets the Stellar test network by default; every Horizon, fee and
price-bound default can be overridden from the environment or a .env file.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from stellar_sdk.liquidity_pool_asset import LIQUIDITY_POOL_FEE_V18

NETWORK_PASSPHRASES = {
    "TESTNET": "Test SDF Network ; September 2015",
    "PUBLIC": "Public Global Stellar Network ; September 2015",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=5000, description="API server port")
    cors_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    # ======================
    # Stellar network
    # ======================
    horizon_url: str = Field(
        default="https://horizon-testnet.stellar.org", description="Horizon server URL"
    )
    network: str = Field(default="TESTNET", description="Network name: TESTNET or PUBLIC")
    network_passphrase_override: Optional[str] = Field(
        default=None,
        alias="network_passphrase",
        description="Explicit network passphrase (derived from network when unset)",
    )
    friendbot_url: str = Field(
        default="https://friendbot.stellar.org", description="Testnet faucet URL"
    )
    http_timeout: float = Field(default=30.0, description="Horizon HTTP timeout in seconds")

    # ======================
    # Transaction building
    # ======================
    base_fee: int = Field(default=100, description="Fee per operation in stroops")
    tx_timeout: int = Field(default=180, description="Transaction validity window in seconds")
    pool_fee_bp: int = Field(
        default=LIQUIDITY_POOL_FEE_V18, description="Constant-product pool fee in basis points"
    )
    default_slippage: Decimal = Field(
        default=Decimal("1"), description="Default swap slippage tolerance in percent"
    )
    deposit_min_price: str = Field(
        default="0.0000001", description="Default minimum A/B price for pool deposits"
    )
    deposit_max_price: str = Field(
        default="100000000", description="Default maximum A/B price for pool deposits"
    )

    # ======================
    # Queries
    # ======================
    pools_page_limit: int = Field(default=20, description="Pools returned per listing")
    assets_page_limit: int = Field(default=20, description="Assets returned per search")
    transactions_default_limit: int = Field(default=30, description="Default history page size")
    transactions_max_limit: int = Field(default=100, description="Maximum history page size")

    # ======================
    # Client
    # ======================
    api_base_url: str = Field(
        default="http://localhost:5000/api/stellar", description="Backend URL used by the client"
    )
    quote_debounce_ms: int = Field(default=500, description="Quote refresh debounce delay")

    @field_validator("pool_fee_bp")
    @classmethod
    def validate_pool_fee(cls, v: int) -> int:
        """The network only supports one constant-product fee."""
        if v != LIQUIDITY_POOL_FEE_V18:
            raise ValueError(f"pool_fee_bp must be {LIQUIDITY_POOL_FEE_V18}, the only fee the network supports")
        return v

    @property
    def network_passphrase(self) -> str:
        """Passphrase that signatures and envelopes are bound to."""
        if self.network_passphrase_override:
            return self.network_passphrase_override
        return NETWORK_PASSPHRASES.get(self.network.upper(), NETWORK_PASSPHRASES["TESTNET"])

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_testnet(self) -> bool:
        return self.network.upper() == "TESTNET"

    @property
    def allowed_origins(self) -> list[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def get_safe_dict(self) -> dict:
        """Return settings dict suitable for the detailed health endpoint."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "api_port": self.api_port,
            "network": {
                "name": self.network.upper(),
                "passphrase": self.network_passphrase,
                "horizon": self.horizon_url,
                "friendbot": self.friendbot_url if self.is_testnet else "(disabled)",
            },
            "transactions": {
                "base_fee": self.base_fee,
                "timeout": self.tx_timeout,
                "pool_fee_bp": self.pool_fee_bp,
                "default_slippage": str(self.default_slippage),
                "deposit_price_bounds": [self.deposit_min_price, self.deposit_max_price],
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
