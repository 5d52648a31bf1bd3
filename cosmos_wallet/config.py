"""Configuration architecture using pydantic-settings for typed environment loading."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class KeyConfig(BaseSettings):
    """Key derivation configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COSMOS_KEY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    address_prefix: str = "cosmos"
    # coin type 118, account 0, change 0, index 0
    hd_path: str = "m/44'/118'/0'/0/0"
    mnemonic_words: int = 24

    @field_validator("mnemonic_words")
    @classmethod
    def _check_word_count(cls, value: int) -> int:
        if value not in (12, 15, 18, 21, 24):
            raise ValueError("mnemonic_words must be one of 12, 15, 18, 21, 24")
        return value


class ChainConfig(BaseSettings):
    """Target chain configuration."""

    model_config = SettingsConfigDict(
        env_prefix="COSMOS_CHAIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    chain_id: str = "cosmoshub-4"
    denom: str = "uatom"
    min_gas_price: float = Field(default=0.025, ge=0)


class FeeConfig(BaseSettings):
    """Fixed fee and per-operation gas limits."""

    model_config = SettingsConfigDict(
        env_prefix="COSMOS_FEE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    amount: int = Field(default=5000, ge=0)
    denom: str = "uatom"

    send_gas: int = Field(default=200000, gt=0)
    vote_gas: int = Field(default=200000, gt=0)
    staking_gas: int = Field(default=250000, gt=0)
    rewards_gas: int = Field(default=250000, gt=0)
    proposal_gas: int = Field(default=250000, gt=0)


class Settings:
    """Root settings aggregating all configuration sections."""

    def __init__(
        self,
        key: KeyConfig | None = None,
        chain: ChainConfig | None = None,
        fee: FeeConfig | None = None,
    ) -> None:
        self.key = key or KeyConfig()
        self.chain = chain or ChainConfig()
        self.fee = fee or FeeConfig()


# Global settings instance - lazily loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
