"""vaultsearch: ripgrep search and terminal browsing for Markdown vaults.

``main`` runs the command-line interface. The import of ``vaultsearch.cli``
is deferred so that importing the search or vault modules alone does not
pull in rich or the terminal code.
"""

from __future__ import annotations


def main(argv=None):
    """Run the vaultsearch CLI with ``argv`` (defaults to ``sys.argv[1:]``)."""
    from .cli import main as cli_main

    return cli_main(argv)


__all__ = ["main"]
