import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

logger = logging.getLogger(__name__)


def resolve_level(level_name: str) -> int:
    """Map a level name such as ``info`` or ``DEBUG`` to its logging constant."""
    level = logging.getLevelName(level_name.strip().upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {level_name!r}")
    return level


def configure_logging(level_name: str) -> int:
    """
    Configure the root logger once for the whole process.

    An unknown level name is reported and the level falls back to INFO.

    Returns:
        The effective logging level
    """
    try:
        level = resolve_level(level_name)
        error = None
    except ValueError as exc:
        level = logging.INFO
        error = exc

    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # uvicorn's loggers propagate to the root handler configured above
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    if error is not None:
        logger.error("Error parsing log level: %s", error)
    return level
