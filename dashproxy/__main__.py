"""Entry point for `python -m dashproxy`."""

from dashproxy.cli.commands import app

if __name__ == "__main__":
    app()
