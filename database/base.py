"""Base class for SQLAlchemy models"""
import uuid

from sqlalchemy import String, TypeDecorator
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_uuid() -> str:
    """Random UUID4 string; used for every primary key"""
    return str(uuid.uuid4())


class DatabaseAgnosticEnum(TypeDecorator):
    """
    Database-agnostic Enum type.
    Stores the enum value as a plain string so tables can be created with
    ``create_all`` on any dialect without a separate enum type.
    """

    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        self.enum_class = enum_class
        kwargs.setdefault("length", max(len(item.value) for item in enum_class))
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if isinstance(value, self.enum_class):
            return value.value
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        return self.enum_class(value)
