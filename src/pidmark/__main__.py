"""CLI entry point for pidmark."""

from __future__ import annotations

from pidmark.cli import cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
