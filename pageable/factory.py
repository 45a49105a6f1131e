"""Application factory wiring the pagination stack into Flask."""

from __future__ import annotations

from flask import Flask

from pageable.core.config import BaseConfig, get_config


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    import_name: str = __name__,
) -> Flask:
    """Build a Flask application with database, logging and error handlers."""

    app = Flask(import_name)
    app.config.from_object(get_config() if config is None else config)

    from pageable.core import extensions

    extensions.init_app(app)

    return app
