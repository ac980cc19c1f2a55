"""Allow ``python -m shelltree``."""

from .cli import console_main

console_main()
