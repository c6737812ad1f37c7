"""wpharden - filesystem permission hardening for WordPress installations."""

__version__ = "1.5.1"
