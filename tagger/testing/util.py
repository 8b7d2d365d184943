from typing import List

from flask_sqlalchemy import SQLAlchemy

from tagger.app import Application
from tagger.services import get_service

__all__ = ("stop_all_services", "ensure_services_started", "cleanup_db")


def cleanup_db(db: SQLAlchemy) -> None:
    """Drop all the tables.

    The session is closed first: with an in-memory SQLite database it holds
    the only connection, and DDL must not run inside its transaction.
    """
    db.session.remove()
    db.drop_all()


def ensure_services_started(services: List[str]) -> None:
    for service_name in services:
        service = get_service(service_name)
        if not service.running:
            service.start()


def stop_all_services(app: Application) -> None:
    for service in app.services.values():
        if service.running:
            service.stop()
