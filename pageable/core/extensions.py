"""Global Flask extension instances and host wiring."""

from __future__ import annotations

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from pageable.core import errors, logger
from pageable.core.config import BaseConfig

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)

_DEFAULT_KEYS = ("LOG_LEVEL", "PAGEABLE_ERROR_STATUS", "PAGEABLE_REQUEST_ID_HEADER")


def init_app(app: Flask, *, configure_root_logger: bool = True) -> None:
    """Wire the pagination stack into ``app``.

    Parameters
    ----------
    app: flask.Flask
        Host application. Missing ``PAGEABLE_*``/``LOG_LEVEL`` keys are
        filled from :class:`BaseConfig`; existing keys are left untouched.
    configure_root_logger: bool, optional
        When ``True`` (default) the root logger gets the JSON handler at
        ``LOG_LEVEL``.
    """
    for key in _DEFAULT_KEYS:
        app.config.setdefault(key, getattr(BaseConfig, key))

    if "sqlalchemy" not in app.extensions:
        db.init_app(app)

    if configure_root_logger:
        logger.configure_logging(app.config["LOG_LEVEL"])
    logger.init_app(app)
    errors.init_app(app)


__all__ = ["db", "init_app", "metadata"]
