"""Application factory for the devit API."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from devit.core.config import BaseConfig, get_config


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build a configured devit application.

    Logging is configured before anything else so start-up failures are
    logged as JSON; extensions come before the API because the handlers
    resolve the token codec from ``app.extensions``.

    :param config: Config class, object or import path; :func:`get_config` when omitted.
    :param instance_relative_config: Also read ``instance/<instance_config_filename>``.
    :param instance_config_filename: Optional per-deployment override file.
    :returns: The application.
    :raises RuntimeError: If the token signing secret is the placeholder in production.
    """
    from devit import cli
    from devit.api import init_app as init_api
    from devit.core import cors, errors, extensions, logger

    app = Flask(__name__, instance_relative_config=instance_relative_config)
    app.config.from_object(config if config is not None else get_config())
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    logger.configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    if app.config.get("USE_PROXYFIX", True):
        # One reverse proxy hop (gunicorn behind nginx or a load balancer)
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    extensions.init_app(app)
    logger.init_app(app)
    cors.init_app(app)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)

    return app
