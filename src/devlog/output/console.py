"""Diagnostic logging on stderr.

stdout carries protocol traffic when serving, so everything here goes to
stderr through a rich handler.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a stderr handler to the ``devlog`` logger (once)."""
    logger = logging.getLogger("devlog")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
