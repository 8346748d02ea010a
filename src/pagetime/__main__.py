"""Main entry point for the pagetime package."""

from pagetime.cli import app


def main():
    """Run the pagetime command-line interface."""
    app()


if __name__ == "__main__":
    main()
