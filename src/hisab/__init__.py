"""Hisab application factory."""

from __future__ import annotations

import os
from importlib import import_module
from typing import Iterable

from flask import Flask

from .config import BaseConfig, DevConfig, TestingConfig

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestingConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    yield "hisab.blueprints.api"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance.

    The default owner is created and provisioned before the first request.
    """

    app = Flask(__name__, instance_relative_config=True)
    config_obj = _resolve_config(config_name or os.getenv("HISAB_ENV"))()
    app.config.from_object(config_obj)
    app.config["HISAB_CONFIG"] = config_obj

    # Import lazily so importing the package does not configure logging or touch the database.
    from . import cli
    from .extensions import EXTENSION_KEY, get_session_factory, init_db
    from .logging_config import setup_logging
    from .services.owners import ensure_owner

    setup_logging(config_obj)
    init_db(app)

    owner = ensure_owner(get_session_factory(app), config_obj.DEFAULT_OWNER)
    state = app.extensions[EXTENSION_KEY]
    state["default_owner_id"] = owner.id
    state["provisioned_owners"] = {owner.id}

    _register_blueprints(app, config_obj)
    cli.init_app(app)
    return app


def _register_blueprints(app: Flask, config: BaseConfig) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        app.register_blueprint(getattr(module, "bp"), url_prefix=config.API_PREFIX)


__all__ = ["BaseConfig", "DevConfig", "TestingConfig", "create_app"]
