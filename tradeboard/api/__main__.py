import logging
import sys

import uvicorn
from dotenv import load_dotenv
from loguru import logger

from tradeboard.api.settings import ApiSettings, ConfigError


class _LoguruHandler(logging.Handler):
    """Forward stdlib log records (app modules, uvicorn) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _configure_logging(level: str) -> None:
    # Log to stdout so container logs show requests and upstream errors.
    logger.remove()
    logger.add(sys.stdout, level=level)
    logging.basicConfig(handlers=[_LoguruHandler()], level=level, force=True)


def main() -> None:
    load_dotenv()
    try:
        settings = ApiSettings.from_env()
    except ConfigError as exc:
        logger.error("Invalid configuration: {}", exc)
        raise SystemExit(1)
    _configure_logging(settings.log_level)
    logger.info("Server running on port {}", settings.port)
    uvicorn.run(
        "tradeboard.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
