"""Bundled data files for wpharden."""
