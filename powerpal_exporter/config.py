"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values

Command line flags are passed to Environment as init arguments, which take
precedence over environment variables and the .env file.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from powerpal_exporter.exceptions import ConfigurationError

DEFAULT_POWERPAL_HOST = "readings.powerpal.net"
DEFAULT_LISTEN_ADDRESS = ":9915"
LOG_LEVELS = ("debug", "info", "warn", "error")


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Powerpal API ───────────────────────────────────────────────────

    POWERPAL_TOKEN: str = Field(default="")
    POWERPAL_DEVICE: str = Field(default="")
    POWERPAL_HOST: str = Field(default=DEFAULT_POWERPAL_HOST)
    POWERPAL_REFRESH: int = Field(default=30)

    # ── Web server ─────────────────────────────────────────────────────

    POWERPAL_LISTEN_ADDRESS: str = Field(default=DEFAULT_LISTEN_ADDRESS)
    POWERPAL_ACCESS_LOG: bool = Field(default=False)
    WAITRESS_THREADS: int = Field(default=4)
    GRACEFUL_SHUTDOWN_TIMEOUT: int = Field(default=10)

    # ── Logging ────────────────────────────────────────────────────────

    LOG_LEVEL: str = Field(default="info")


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    token: str = ""
    device: str = ""
    powerpal_host: str = DEFAULT_POWERPAL_HOST
    refresh_seconds: int = 30

    listen_address: str = DEFAULT_LISTEN_ADDRESS
    access_log: bool = False
    waitress_threads: int = 4
    graceful_shutdown_timeout: int = 10

    log_level: str = "info"

    @property
    def device_url(self) -> str:
        return f"https://{self.powerpal_host}/api/v1/device/{self.device}"

    @property
    def listen_host(self) -> str:
        return parse_listen_address(self.listen_address)[0]

    @property
    def listen_port(self) -> int:
        return parse_listen_address(self.listen_address)[1]

    def validate_config(self) -> None:
        """Check the settings the exporter cannot start without.

        Raises:
            ConfigurationError: Listing every problem found.
        """
        errors: list[str] = []

        if not self.token:
            errors.append("Powerpal token must be supplied (--token or POWERPAL_TOKEN)")
        if not self.device:
            errors.append(
                "Powerpal device identifier must be supplied (--device or POWERPAL_DEVICE)"
            )
        if self.refresh_seconds <= 0:
            errors.append("Refresh interval must be a positive number of seconds")
        if self.log_level not in LOG_LEVELS:
            errors.append(f"Log level must be one of: {', '.join(LOG_LEVELS)}")

        try:
            parse_listen_address(self.listen_address)
        except ConfigurationError as e:
            errors.append(str(e))

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        return cls(
            token=env.POWERPAL_TOKEN,
            device=env.POWERPAL_DEVICE,
            powerpal_host=env.POWERPAL_HOST,
            refresh_seconds=env.POWERPAL_REFRESH,
            listen_address=env.POWERPAL_LISTEN_ADDRESS,
            access_log=env.POWERPAL_ACCESS_LOG,
            waitress_threads=env.WAITRESS_THREADS,
            graceful_shutdown_timeout=env.GRACEFUL_SHUTDOWN_TIMEOUT,
            log_level=env.LOG_LEVEL.lower(),
        )


def parse_listen_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address.

    An empty host (``":9915"``) binds all interfaces. IPv6 hosts use the
    bracketed form ``[::1]:9915``.
    """
    host, sep, port_text = address.rpartition(":")
    if not sep or not port_text.isdigit():
        raise ConfigurationError(f"Invalid listen address {address!r}, expected host:port")

    port = int(port_text)
    if not 0 < port < 65536:
        raise ConfigurationError(f"Invalid listen port {port} in {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    return host or "0.0.0.0", port
