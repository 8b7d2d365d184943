"""Modules that provide services. They are implemented as Flask extensions
(see: http://flask.pocoo.org/docs/extensiondev/ )"""
from typing import Optional

from flask import current_app

from .base import Service, ServiceNotRegistered, ServiceState
from .tagging import tagging_service

__all__ = [
    "Service",
    "ServiceState",
    "ServiceNotRegistered",
    "get_service",
    "tagging_service",
]


def get_service(service: str) -> Optional[Service]:
    return current_app.services.get(service)
