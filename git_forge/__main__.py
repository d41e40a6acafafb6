"""Module entrypoint for ``python -m git_forge``."""

from .cli import main


if __name__ == "__main__":
    main()
