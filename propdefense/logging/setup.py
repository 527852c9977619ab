import sys
import logging
from typing import Any

from loguru import logger

from propdefense.config.settings import settings

SENSITIVE_KEYS = ["key", "token", "password", "secret", "cookie"]


def _mask(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "********"


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive data in log records."""

    def mask_extra(extra: dict[str, Any]) -> dict[str, Any]:
        masked = {}
        for extra_key, value in extra.items():
            if isinstance(value, str) and any(
                sk in extra_key.lower() for sk in SENSITIVE_KEYS
            ):
                masked[extra_key] = _mask(value)
            elif isinstance(value, dict):
                masked[extra_key] = mask_extra(value)
            else:
                masked[extra_key] = value
        return masked

    if "extra" in record and isinstance(record["extra"], dict):
        record["extra"].update(mask_extra(record["extra"]))

    # Configured secrets never reach a sink verbatim
    if settings.prizepicks_cookie and settings.prizepicks_cookie in record["message"]:
        record["message"] = record["message"].replace(
            settings.prizepicks_cookie, "********"
        )

    return True  # Keep the record after filtering/masking


class InterceptHandler(logging.Handler):
    """Routes stdlib logging (playwright, httpx) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging() -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=False,
        filter=sensitive_data_filter,
    )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.info("Standard logging intercepted.")
