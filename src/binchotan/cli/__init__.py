"""binchotan-filters CLI layer."""

__all__ = ["cli"]


def cli() -> None:
    """Lazy import and run the CLI."""
    from binchotan.cli.main import main

    main()
