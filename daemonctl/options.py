"""
Runtime options payload handed to the daemon's runtime configuration.

Pure data: a type identifier for the config content, a config file path and
an inline blob. The blob is only meaningful when no path is set.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RuntimeOptions(BaseModel):
    """Options passed through to a runtime."""

    type_url: str = Field(default="", description="Type of the config content")
    config_path: str = Field(
        default="", description="Filesystem location of the runtime config file"
    )
    config_body: bytes = Field(
        default=b"",
        description="Inline config blob, used when config_path is empty",
    )

    model_config = ConfigDict(frozen=True)

    def read(self) -> bytes:
        """
        Return the effective config content.

        Reads ``config_path`` when set, otherwise returns ``config_body``.

        Raises:
            OSError: If the config file cannot be read
        """
        if self.config_path:
            return Path(self.config_path).read_bytes()
        return self.config_body
