# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ("CondwareSettings", "settings")


class CondwareSettings(BaseSettings, frozen=True):
    """Package settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="CONDWARE_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    SCOPE_TOKEN_PREFIX: str = Field(
        default="condware_",
        description="Prefix of generated scope tokens",
    )
    SCOPE_STATE_FIELD: str = Field(
        default="__condware_scopes__",
        min_length=1,
        description="Reserved key/attribute holding scope state on a carrier",
    )
    WARN_ON_REPEATED_CALLBACK: bool = Field(
        default=True,
        description="Log a warning when a completion callback fires twice",
    )

    # Class variable to store the singleton instance
    _instance: ClassVar[Any] = None


settings = CondwareSettings()
CondwareSettings._instance = settings
