from typing import Any, Dict

from flask import Flask
from werkzeug.datastructures import ImmutableDict


class DefaultConfig:
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Logging: level of the application logger, and an optional logging
    # config file (.ini or .yml), relative to the instance folder.
    LOG_LEVEL = None
    LOGGING_CONFIG_FILE = None

    # Separator used when setting tags from a single string.
    TAGGING_DELIMITER = ","


default_config: Dict[str, Any] = dict(Flask.default_config)
default_config.update(
    (key, value) for key, value in vars(DefaultConfig).items() if key.isupper()
)
default_config = ImmutableDict(default_config)
