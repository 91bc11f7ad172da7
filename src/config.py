"""Configuration settings for CronKeeper."""

import copy
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

StorageType = Literal["memory", "redis", "database"]


class TimezoneOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = "UTC"
    # "validate" would shadow BaseModel.validate
    validate_timezone: bool = Field(True, alias="validate")
    strict: bool = False


class StorageOptions(BaseModel):
    type: StorageType = "memory"
    prefix: str = "cron:"

    # Redis
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None
    redis_db: Optional[int] = None

    # Relational database (SQLAlchemy URL)
    database_url: str = "sqlite:///data/cronkeeper.db"
    database_echo: bool = False


class ModuleOptions(BaseModel):
    server_tasks: bool = True
    tasks_dir: Optional[str] = None
    storage: StorageOptions = Field(default_factory=StorageOptions)
    timezone: TimezoneOptions = Field(default_factory=TimezoneOptions)


DEFAULT_MODULE_OPTIONS = ModuleOptions()


def _deep_merge(overrides: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(value, merged[key])
        else:
            merged[key] = value
    return merged


def _as_dict(options: Union[ModuleOptions, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(options, ModuleOptions):
        return options.model_dump(by_alias=True, exclude_unset=True)
    return dict(options)


class ModuleConfiguration:
    """Holds the effective module options.

    Create one per application, pass it to the components that need it and
    call ``reset()`` on teardown.
    """

    def __init__(self, options: Optional[Union[ModuleOptions, Dict[str, Any]]] = None):
        self._options = DEFAULT_MODULE_OPTIONS.model_copy(deep=True)
        if options is not None:
            self.set_options(options)

    def set_options(self, options: Union[ModuleOptions, Dict[str, Any]]) -> ModuleOptions:
        """Replace the options, filling gaps from the defaults."""
        defaults = DEFAULT_MODULE_OPTIONS.model_dump(by_alias=True)
        self._options = ModuleOptions.model_validate(_deep_merge(_as_dict(options), defaults))
        return self._options

    def update_options(self, options: Union[ModuleOptions, Dict[str, Any]]) -> ModuleOptions:
        """Merge a partial update onto the current options."""
        current = self._options.model_dump(by_alias=True)
        self._options = ModuleOptions.model_validate(_deep_merge(_as_dict(options), current))
        return self._options

    def get_options(self) -> ModuleOptions:
        return self._options

    def reset(self) -> None:
        self._options = DEFAULT_MODULE_OPTIONS.model_copy(deep=True)

    def validate_options(self, options: Union[ModuleOptions, Dict[str, Any]]) -> bool:
        """Check that ``options`` is compatible with the current configuration.

        A strict configuration must not switch to a different timezone.
        """
        if isinstance(options, dict):
            options = ModuleOptions.model_validate(_deep_merge(options, {}))
        if not options.timezone.type:
            return False
        if options.timezone.strict and options.timezone.type != self._options.timezone.type:
            return False
        return True


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CRONKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    storage_type: StorageType = "memory"
    storage_prefix: str = "cron:"
    redis_url: str = "redis://localhost:6379/0"
    redis_password: Optional[str] = None
    redis_db: Optional[int] = None
    database_url: str = "sqlite:///data/cronkeeper.db"
    database_echo: bool = False

    # Timezone
    timezone: str = "UTC"
    timezone_validate: bool = True
    timezone_strict: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    def to_module_options(self) -> ModuleOptions:
        return ModuleOptions(
            storage=StorageOptions(
                type=self.storage_type,
                prefix=self.storage_prefix,
                redis_url=self.redis_url,
                redis_password=self.redis_password,
                redis_db=self.redis_db,
                database_url=self.database_url,
                database_echo=self.database_echo,
            ),
            timezone=TimezoneOptions(
                type=self.timezone,
                validate_timezone=self.timezone_validate,
                strict=self.timezone_strict,
            ),
        )


settings = Settings()
