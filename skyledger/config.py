from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from skyledger.models.failure import ConfigurationError
from skyledger.models.inventory import MergePolicy
from skyledger.services.retry import RetryPolicy


class StoreSettings(BaseSettings):
    """Document store settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", validate_assignment=True)

    debug: bool = False

    database_url: str

    # Logical collection holding the snapshot and ledger documents
    document_collection: str = "skyblock_tracker"


class Settings(StoreSettings):
    """Tracker run settings loaded from environment."""

    player_name: str
    bot_token: str
    chat_id: str

    profile_api_url: str = "https://sky.shiiyu.moe/api/v2/profile"
    telegram_api_url: str = "https://api.telegram.org"
    telegram_parse_mode: str | None = None

    http_timeout: float = Field(30.0, gt=0)

    retry_attempts: int = Field(3, ge=1)
    retry_initial_delay: float = Field(1.0, ge=0)
    retry_backoff_factor: float = Field(2.0, ge=1)

    # Inventory, ender chest and storage may share a display name.
    # "overwrite" keeps the later container's count, "sum" adds them.
    merge_policy: MergePolicy = MergePolicy.OVERWRITE

    # "changes" notifies only when some quantity moved,
    # "dirty" notifies whenever the ledger was touched.
    notify_on: Literal["changes", "dirty"] = "changes"

    max_message_length: int = Field(4000, gt=0)

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            attempts=self.retry_attempts,
            initial_delay=self.retry_initial_delay,
            backoff_factor=self.retry_backoff_factor,
        )


def _configuration_error(exc: ValidationError) -> ConfigurationError:
    fields = sorted({str(err["loc"][0]).upper() for err in exc.errors() if err["loc"]})
    return ConfigurationError(
        "Missing or invalid configuration: " + ", ".join(fields),
        detail=str(exc),
    )


def load_settings() -> Settings:
    """
    Load tracker settings.

    Raises:
        ConfigurationError: If a required value is missing or invalid
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise _configuration_error(e) from e


def load_store_settings() -> StoreSettings:
    """
    Load document store settings only.

    Raises:
        ConfigurationError: If the database URL is missing or invalid
    """
    try:
        return StoreSettings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise _configuration_error(e) from e
