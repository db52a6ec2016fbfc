"""
Settings for the vbcompetitions command line and file helpers.

Values are read from the environment once, at import time.
"""
import os

# Directory holding competition JSON documents
DATA_DIR = os.environ.get("VBC_DATA_DIR", os.path.join(os.getcwd(), "data"))

LOG_LEVEL = os.environ.get("VBC_LOG_LEVEL", "WARNING").upper()

# Indent used when saving competition documents
JSON_INDENT = int(os.environ.get("VBC_JSON_INDENT", "4"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "vbcompetitions": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
