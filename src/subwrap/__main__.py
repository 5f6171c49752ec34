"""Allow ``python -m subwrap``."""

from .cli import cli

if __name__ == "__main__":
    cli()
