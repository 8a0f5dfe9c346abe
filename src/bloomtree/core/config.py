"""
Bloom Tree - Configuration
"""

from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BLOOMTREE_",
        case_sensitive=True,
    )

    # Application
    VERSION: str = "1.0.0"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Tree geometry
    CHUNK_BITS: int = Field(default=512, gt=0)
    WORD_BITS: int = Field(default=64, gt=0)

    # Metrics
    METRICS_ENABLED: bool = True

    @field_validator("CHUNK_BITS")
    @classmethod
    def chunk_bits_power_of_two(cls, value: int) -> int:
        if value & (value - 1):
            raise ValueError(f"CHUNK_BITS must be a power of two, got {value}")
        return value

    @field_validator("WORD_BITS")
    @classmethod
    def word_bits_whole_bytes(cls, value: int) -> int:
        if value % 8:
            raise ValueError(f"WORD_BITS must be a multiple of 8, got {value}")
        return value

    @model_validator(mode="after")
    def chunk_holds_whole_words(self) -> "Settings":
        if self.CHUNK_BITS % self.WORD_BITS:
            raise ValueError(
                f"CHUNK_BITS ({self.CHUNK_BITS}) must be a whole number of "
                f"words ({self.WORD_BITS} bits)"
            )
        return self

    @property
    def WORDS_PER_CHUNK(self) -> int:
        return self.CHUNK_BITS // self.WORD_BITS


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
