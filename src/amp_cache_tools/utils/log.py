import logging

from rich.logging import RichHandler

from amp_cache_tools.models.settings import env


def setup_logging(verbose: bool | None = None) -> None:
    """Route package logs through rich, once per process."""
    logger = logging.getLogger("amp_cache_tools")
    if logger.handlers:
        return

    if verbose is None:
        verbose = env.verbose

    handler = RichHandler(show_path=verbose, rich_tracebacks=True, log_time_format="[%X]")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
