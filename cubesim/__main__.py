"""Command-line interface."""
from cubesim.cli import main


if __name__ == "__main__":
    main()
