"""Run configuration and settings.

Optional defaults for a hardening run are read from
~/.config/wpharden/config.toml. Command-line flags always win over
values from this file; a missing file simply yields the defaults.

Example config.toml::

    user = "deploy"
    group = "apache"
    detect_web_server = true
    web_server_commands = ["httpd", "apache2ctl"]
    htaccess_append_once = true
"""

import logging
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from wpharden.core.paths import get_config_path

logger = logging.getLogger(__name__)


class HardenConfig(BaseModel):
    """Configuration for a hardening run.

    Attributes:
        user: Default owning user name (overridden by --user).
        group: Default owning group name (overridden by --group).
        detect_web_server: Query the web server for its run-as user/group.
        web_server_commands: Web server control binaries tried for detection.
        htaccess_append_once: Skip the .htaccess restriction block if it is
            already present instead of appending it again.
    """

    model_config = ConfigDict(extra="forbid")

    user: Annotated[str | None, Field(description="Default owning user")] = None
    group: Annotated[str | None, Field(description="Default owning group")] = None
    detect_web_server: Annotated[
        bool,
        Field(description="Detect run-as user/group from the web server"),
    ] = True
    web_server_commands: Annotated[
        list[str],
        Field(
            default_factory=lambda: ["httpd", "apache2ctl"],
            description="Binaries tried for run-as detection, in order",
        ),
    ]
    htaccess_append_once: Annotated[
        bool,
        Field(description="Do not append the restriction block twice"),
    ] = True


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> HardenConfig:
    """Load run configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated HardenConfig object (defaults if the file does not exist).

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return HardenConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    try:
        return HardenConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content in {config_path}: {e}") from e
