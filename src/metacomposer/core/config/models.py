"""
Configuration data models for meta-composer.

These models define the structure of .meta-composer.json and
~/.config/meta-composer/config.json, with validation via Pydantic.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class HttpConfig(BaseModel):
    """Settings for documents fetched over HTTP."""

    timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Seconds to wait for a remote document",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Follow HTTP redirects when fetching documents",
    )


class NvimConfig(BaseModel):
    """
    Settings for talking to a running Neovim.

    The socket may be a Unix socket path or a host:port TCP address.
    """

    socket: Optional[str] = Field(
        default=None,
        description="RPC address of the Neovim instance to query",
    )
    timeout: float = Field(
        default=5.0,
        gt=0.0,
        description="Seconds to wait for each RPC response",
    )


class MetaComposerConfig(BaseModel):
    """Top-level meta-composer configuration."""

    model_config = ConfigDict(extra="ignore")

    http: HttpConfig = Field(default_factory=HttpConfig)
    nvim: NvimConfig = Field(default_factory=NvimConfig)
