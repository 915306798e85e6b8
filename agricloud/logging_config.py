# agricloud/logging_config.py
import logging

# third-party loggers that flood INFO with connection chatter
NOISY_LOGGERS = ("urllib3", "requests", "httpx", "httpcore")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("agricloud").setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
