"""Main entry point for provisioner commands."""

from provisioner.cli.main import main


if __name__ == "__main__":
    main()
