"""Allow ``python -m recordfs``."""

from recordfs.cli import app

app()
