"""``python -m vaultsearch``: same as the ``vaultsearch`` console script."""

from .cli import main

if __name__ == "__main__":
    main()
