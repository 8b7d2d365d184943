"""Base model class."""
from flask_sqlalchemy.query import Query
from sqlalchemy.schema import Column
from sqlalchemy.types import Integer

from tagger.core.extensions import db


#: Base Model class.
class Model(db.Model):
    __abstract__ = True
    query: Query


class IdMixin:
    id = Column(Integer, primary_key=True)
