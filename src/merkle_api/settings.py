from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, populate_by_name=True, extra="ignore"
    )

    # Any fixed-length hashlib algorithm name (sha256, sha512, blake2b, ...)
    hash_algorithm: str = Field(default="sha256", alias="MERKLE_HASH_ALGORITHM")

    signing_key_path: str = Field(
        default="./keys/ed25519_private.key", alias="MERKLE_SIGNING_KEY_PATH"
    )
    signing_pubkey_path: str = Field(
        default="./keys/ed25519_public.key", alias="MERKLE_SIGNING_PUBKEY_PATH"
    )

    # Upper bound on blocks accepted by a single service request
    max_blocks: int = Field(default=100000, alias="MERKLE_MAX_BLOCKS")

    # Global request size limit enforced by middleware (bytes)
    max_request_bytes: int = Field(default=1048576, alias="MERKLE_MAX_REQUEST_BYTES")

    log_level: str = Field(default="INFO", alias="MERKLE_LOG_LEVEL")


settings = Settings()  # load at import
