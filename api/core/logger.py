import logging

from api.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging() -> None:
    """Configure the root logger once; safe to call again on reload."""
    settings = get_settings()
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    if not any(getattr(h, "_coursedesk", False) for h in root_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._coursedesk = True
        root_logger.addHandler(handler)

    # Quiet the chatty client libraries
    for logger_name in ("botocore", "boto3", "urllib3", "httpx"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
