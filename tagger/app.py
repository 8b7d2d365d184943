"""Base Flask application class, used by tests or to be extended in real
applications."""
import logging
import logging.config
from pathlib import Path
from typing import Any, Dict, Optional

import sqlalchemy as sa
import sqlalchemy.orm
import yaml
from flask import Flask

from tagger.config import default_config
from tagger.core import extensions, signals
from tagger.services import Service, tagging_service

logger = logging.getLogger(__name__)
db = extensions.db
__all__ = ["create_app", "Application", "ServiceManager"]

DEFAULT_LOGGING_CONFIG = Path(__file__).parent / "core" / "default_logging.yml"


class ServiceManager:
    """Mixin that provides lifecycle (register/start/stop) support for
    services."""

    services: Dict[str, Service]

    def __init__(self) -> None:
        self.services = {}

    def start_services(self):
        for svc in self.services.values():
            svc.start()

    def stop_services(self):
        for svc in self.services.values():
            svc.stop()


class Application(ServiceManager, Flask):
    """Base application class.

    Extend it in your own app.
    """

    default_config = default_config

    def __init__(self, name: Optional[Any] = None, *args: Any, **kwargs: Any) -> None:
        name = name or __name__

        Flask.__init__(self, name, *args, **kwargs)
        ServiceManager.__init__(self)

    def setup(self, config: Optional[type]) -> None:
        self.configure(config)

        # At this point we have loaded all external config files:
        # SQLALCHEMY_DATABASE_URI and LOGGING_CONFIG_FILE are definitively fixed.
        self.setup_logging()

        extensions.db.init_app(self)

        with self.app_context():
            for engine in extensions.db.engines.values():
                extensions.setup_sqlite(engine)
            self.init_extensions()

        # At this point all models should have been imported: time to configure
        # mappers. Taggable classes that haven't been registered fail here
        # rather than on their first query.
        sa.orm.configure_mappers()

        signals.components_registered.send(self)

        if not self.testing:
            with self.app_context():
                self.start_services()

    def configure(self, config: Optional[type]) -> None:
        if config:
            self.config.from_object(config)

        if not self.config.get("TAGGING_DELIMITER"):
            raise ValueError("TAGGING_DELIMITER must be a non-empty string")

    def setup_logging(self) -> None:
        # Force flask to create application logger before logging
        # configuration; else, flask will overwrite our settings
        self.logger  # noqa

        logging_file = self.config.get("LOGGING_CONFIG_FILE")
        if logging_file:
            logging_file = (Path(self.instance_path) / logging_file).resolve()
        else:
            logging_file = DEFAULT_LOGGING_CONFIG

        if logging_file.suffix == ".ini":
            # old standard 'ini' file config
            logging.config.fileConfig(str(logging_file), disable_existing_loggers=False)
        elif logging_file.suffix in (".yml", ".yaml"):
            with logging_file.open() as fd:
                logging_cfg = yaml.safe_load(fd)
            logging_cfg.setdefault("version", 1)
            logging_cfg.setdefault("disable_existing_loggers", False)
            logging.config.dictConfig(logging_cfg)
        else:
            raise ValueError(f"Unsupported logging config file: {logging_file}")

        log_level = self.config.get("LOG_LEVEL")
        if log_level:
            self.logger.setLevel(log_level)
            logging.getLogger("tagger").setLevel(log_level)

    def init_extensions(self) -> None:
        """Initialize flask extensions, helpers and services."""
        tagging_service.init_app(self)


def create_app(
    config: Optional[type] = None, app_class: type = Application, **kw: Any
) -> Application:
    app = app_class(**kw)
    app.setup(config=config)
    return app
