import logging
import sys

from app.core.config import settings


def configure_logging() -> None:
    # Drop handlers left over from reloads so lines are not duplicated
    root = logging.getLogger()
    if root.handlers:
        root.handlers.clear()

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    root.setLevel(settings.LOG_LEVEL.upper())
    root.addHandler(console_handler)
