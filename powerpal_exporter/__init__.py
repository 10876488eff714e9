"""Prometheus exporter for the Powerpal energy monitor API."""

__version__ = "0.1.0"

from powerpal_exporter.app import App  # noqa: E402
from powerpal_exporter.config import Settings  # noqa: E402


def create_app(settings: "Settings | None" = None, skip_background_services: bool = False) -> App:
    """Create and configure the Flask application.

    Args:
        settings: Optional settings instance (loaded from the environment if not provided)
        skip_background_services: Skip starting the poll thread (for tests)

    Returns:
        Configured Flask application instance
    """
    app = App(__name__)

    if settings is None:
        settings = Settings.load()

    settings.validate_config()

    from powerpal_exporter.services.container import ServiceContainer

    container = ServiceContainer()
    container.config.override(settings)

    container.wire(packages=["powerpal_exporter.api"])

    app.container = container

    from powerpal_exporter.api.metrics import metrics_bp
    from powerpal_exporter.api.powerpal import powerpal_bp

    app.register_blueprint(metrics_bp)
    app.register_blueprint(powerpal_bp)

    if not skip_background_services:
        from powerpal_exporter.services.container import start_background_services

        start_background_services(container)

    return app
