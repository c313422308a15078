"""CLI entry point."""

from provisioner.cli.main import main


if __name__ == "__main__":
    main()
