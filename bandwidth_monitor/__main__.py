"""Allow ``python -m bandwidth_monitor``."""

from .cli import main

main()
