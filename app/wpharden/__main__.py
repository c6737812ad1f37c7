"""Entry point: python -m wpharden [--path=DIR] [--user=USER] [--group=GROUP]"""

from wpharden.cli.main import run

run()
