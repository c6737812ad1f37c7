"""Default owner/group providers.

The validator never inspects running services itself. Instead, callers
pass a DefaultsProvider that supplies fallback user and group names when
they are not given explicitly:

- ConfiguredDefaults: values from config.toml.
- WebServerDefaults: run-as user/group reported by Apache
  (``httpd -t -D DUMP_RUN_CFG``).
- ChainedDefaults: first provider with a value wins, per field.
"""

import logging
import re
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from wpharden.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

_RUN_CFG_PATTERN = re.compile(r'^(User|Group):\s*name="([^"]*)"', re.MULTILINE)


@dataclass(frozen=True, slots=True)
class PrincipalDefaults:
    """Fallback user and group names.

    Attributes:
        user: Default user name, or None if unknown.
        group: Default group name, or None if unknown.
    """

    user: str | None = None
    group: str | None = None


class DefaultsProvider(Protocol):
    """Supplies fallback principal names."""

    def detect(self) -> PrincipalDefaults: ...


class ConfiguredDefaults:
    """Defaults taken verbatim from configuration."""

    def __init__(self, user: str | None = None, group: str | None = None) -> None:
        self._defaults = PrincipalDefaults(user=user or None, group=group or None)

    def detect(self) -> PrincipalDefaults:
        return self._defaults


class WebServerDefaults:
    """Run-as user and group of the local Apache HTTP Server.

    Tries each control binary in order and parses the ``User:`` and
    ``Group:`` lines of its DUMP_RUN_CFG output. The result is cached.

    Args:
        commands: Candidate binaries (e.g. "httpd", "apache2ctl").
        timeout: Seconds to wait for each command.
    """

    def __init__(
        self,
        commands: Sequence[str] = ("httpd", "apache2ctl"),
        timeout: float = 10.0,
    ) -> None:
        self._commands = tuple(commands)
        self._timeout = timeout
        self._cached: PrincipalDefaults | None = None

    def detect(self) -> PrincipalDefaults:
        if self._cached is None:
            self._cached = self._query()
        return self._cached

    def _query(self) -> PrincipalDefaults:
        for command in self._commands:
            if not command_exists(command):
                continue
            try:
                result = run_command([command, "-t", "-D", "DUMP_RUN_CFG"], timeout=self._timeout)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.debug("Web server query with %s failed: %s", command, e)
                continue

            # httpd prints the run configuration on stdout or stderr
            # depending on version and distribution patches
            defaults = parse_run_config(result.output)
            if defaults.user or defaults.group:
                logger.debug("Detected web server principal via %s: %s", command, defaults)
                return defaults

        return PrincipalDefaults()


class ChainedDefaults:
    """Combine providers; for each field the first non-empty value wins."""

    def __init__(self, *providers: DefaultsProvider) -> None:
        self._providers = providers

    def detect(self) -> PrincipalDefaults:
        user: str | None = None
        group: str | None = None
        for provider in self._providers:
            if user and group:
                break
            found = provider.detect()
            user = user or found.user
            group = group or found.group
        return PrincipalDefaults(user=user, group=group)


def parse_run_config(output: str) -> PrincipalDefaults:
    """Extract User and Group names from DUMP_RUN_CFG output.

    Example input lines::

        User: name="apache" id=48
        Group: name="apache" id=48

    Args:
        output: Raw command output.

    Returns:
        PrincipalDefaults with whatever could be parsed.
    """
    found: dict[str, str] = {}
    for key, value in _RUN_CFG_PATTERN.findall(output):
        found.setdefault(key, value)
    return PrincipalDefaults(user=found.get("User") or None, group=found.get("Group") or None)
