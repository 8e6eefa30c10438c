"""
Application configuration from environment variables.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, PositiveInt, NonNegativeFloat, PositiveFloat
from typing import List


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

    # Application
    app_name: str = "FinTrack Investments"
    environment: str = "production"
    log_level: str = "INFO"
    allowed_origins: List[str] = ["http://localhost:3000", "http://localhost"]

    # Brokerage fee schedule (Taiwan stock exchange defaults)
    fee_discount_rate: NonNegativeFloat = Field(
        0.28,
        description="Multiplier applied to the nominal commission rate (0.28 = 2.8-fold discount)"
    )
    commission_rate: NonNegativeFloat = Field(
        0.001425,
        description="Nominal brokerage commission rate"
    )
    minimum_fee: NonNegativeFloat = Field(
        20,
        description="Minimum commission charged per order, in whole currency units"
    )
    etf_tax_rate: NonNegativeFloat = Field(
        0.001,
        description="Transaction tax rate for ETFs"
    )
    equity_tax_rate: NonNegativeFloat = Field(
        0.003,
        description="Transaction tax rate for ordinary equities"
    )
    etf_symbol_prefixes: List[str] = Field(
        ["00"],
        description="Symbol prefixes treated as ETFs when a position has no explicit flag"
    )

    # Dividends
    dividend_match_mode: str = Field(
        "substring",
        pattern="^(substring|strict)$",
        description="How dividend ledger entries are attributed to a symbol"
    )
    max_dividend_yield: PositiveFloat = Field(
        0.20,
        description="Dividend yields above this ratio are rejected as enrichment errors"
    )

    # Portfolio views
    stale_after_days: PositiveInt = Field(
        14,
        description="Days after which a position's price is considered stale"
    )
    snapshot_retention_days: PositiveInt = Field(
        365,
        description="Number of daily stock snapshots kept in history"
    )

    # CSV import
    default_csv_format: str = Field(
        "tw_broker",
        description="Column keyword table used when a request does not name one"
    )
    csv_encodings: List[str] = Field(
        ["utf-8-sig", "big5", "cp950"],
        description="Encodings tried, in order, when decoding uploaded CSV bytes"
    )


# Global settings instance
settings = Settings()
