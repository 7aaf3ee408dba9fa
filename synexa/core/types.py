"""Column types shared by the school models"""
import uuid

from sqlalchemy import String, TypeDecorator


def generate_uuid() -> str:
    """Primary key default for every table"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """
    UUID stored as a 36 character string on both SQLite and PostgreSQL.

    Accepts ``uuid.UUID`` or ``str`` on bind and always returns ``str``,
    so ids compare equal to the values carried in JWT claims and URLs.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)
