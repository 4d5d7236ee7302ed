"""racbot CLI entrypoint."""

from racbot.cli import app

if __name__ == "__main__":
    app()
