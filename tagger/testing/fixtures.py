"""Configuration and injectable fixtures for Pytest.

Can be reused (and overriden) by adding::

   pytest_plugins = ['tagger.testing.fixtures']

to your `conftest.py`.
"""
import os
from typing import Any, Iterator

from flask import Flask
from flask.ctx import AppContext
from flask_sqlalchemy import SQLAlchemy
from pytest import fixture
from sqlalchemy.orm import Session

from tagger.app import create_app
from tagger.testing.util import cleanup_db, ensure_services_started, \
    stop_all_services


class TestConfig:
    """Base class config settings for test cases.

    The environment variable :envvar:`SQLALCHEMY_DATABASE_URI` can be
    set to easily test against different databases.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.environ.get("SQLALCHEMY_DATABASE_URI", "sqlite://")
    SQLALCHEMY_ECHO = False


@fixture
def config() -> type:
    return TestConfig


@fixture
def app(config: Any) -> Flask:
    # We currently return a fresh app for each test.
    return create_app(config=config)


@fixture
def app_context(app: Flask) -> Iterator[AppContext]:
    with app.app_context() as ctx:
        yield ctx


@fixture
def db(app_context: AppContext) -> Iterator[SQLAlchemy]:
    """Return a fresh db for each test."""
    from tagger.core.extensions import db

    stop_all_services(app_context.app)
    ensure_services_started(["tagging"])

    cleanup_db(db)
    db.create_all()
    yield db

    cleanup_db(db)
    stop_all_services(app_context.app)


@fixture
def session(db: SQLAlchemy) -> Session:
    return db.session


@fixture
def tagging(db: SQLAlchemy):
    from tagger.services import get_service

    return get_service("tagging")
