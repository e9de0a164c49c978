# app/db/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models in the SiteLog service.

    Model modules are registered on `Base.metadata` by `app.db.session`,
    which imports every one of them.
    """
    pass
