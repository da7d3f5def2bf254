import os

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from migrate_nosql.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Configuration class for environment variables and migration settings.
    """

    # Service settings
    service_name: str = os.getenv("SERVICE_NAME", "migrate_nosql")
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = os.getenv("DEBUG", "True").lower() == "true"

    # Logging settings
    log_level: str = os.getenv("LOG_LEVEL", "DEBUG")
    syslog_host: str = os.getenv("SYSLOG_HOST", "172.17.0.1")
    syslog_port: int = int(os.getenv("SYSLOG_PORT", "5141"))
    json_logs: bool = os.getenv("JSON_LOGS", "False").lower() == "true"
    enable_logstash: bool = os.getenv("ENABLE_LOGSTASH", "False").lower() == "true"

    # MongoDB settings
    mongodb: str = os.getenv("MONGODB", "mongodb://localhost:27017")
    mongodb_database: str = os.getenv("MONGODB_DATABASE", "documents")
    mongodb_collection: str = os.getenv("MONGODB_COLLECTION", "documents")

    # MongoDB connection settings
    mongo_max_pool_size: int = int(os.getenv("MONGO_MAX_POOL_SIZE", "100"))
    mongo_connect_timeout_ms: int = int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "5000"))
    mongo_server_selection_timeout_ms: int = int(
        os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")
    )
    mongo_socket_timeout_ms: int = int(os.getenv("MONGO_SOCKET_TIMEOUT_MS", "30000"))

    # Migration settings
    type_field: str = os.getenv("TYPE_FIELD", "type")
    version_field: str = os.getenv("VERSION_FIELD", "version")
    key_separator: str = os.getenv("KEY_SEPARATOR", "::")
    migrations_path: str = os.getenv("MIGRATIONS_PATH", "migrations")
    parallel_limit: int = int(os.getenv("PARALLEL_LIMIT", "8"))

    @property
    def versions(self) -> dict[str, int] | None:
        """
        Returns the static version table, or None when versions live in the store.
        Format: VERSIONS=article:1,comment:3

        Raises:
            ConfigurationError: If an entry is not a ``type:number`` pair.
        """
        versions_str = os.getenv("VERSIONS", "")
        if not versions_str:
            return None
        versions = {}
        for item in versions_str.split(","):
            if not item.strip():
                continue
            doc_type, _, version = item.partition(":")
            try:
                if not doc_type.strip():
                    raise ValueError("missing type")
                versions[doc_type.strip()] = int(version.strip())
            except ValueError as e:
                raise ConfigurationError(f"Invalid VERSIONS entry {item.strip()!r}: {e}") from e
        return versions

    @property
    def migrate_config(self) -> "MigrateConfig":
        """
        Returns the migration options as a validated MigrateConfig.

        Raises:
            ConfigurationError: If the migration options are invalid.
        """
        from migrate_nosql.migrations.models import MigrateConfig

        try:
            return MigrateConfig(
                type_field=self.type_field,
                version_field=self.version_field,
                key_separator=self.key_separator,
                migrations_path=self.migrations_path,
                parallel_limit=self.parallel_limit,
                versions=self.versions,
            )
        except ValidationError as e:
            raise ConfigurationError(f"Invalid migration settings: {e}") from e

    # Environment-specific logging configuration
    @property
    def logging_config(self) -> dict:
        """
        Returns logging configuration based on environment.
        """
        base_config = {
            "app_name": self.service_name,
            "log_level": self.log_level,
            "syslog_host": self.syslog_host if self.enable_logstash else None,
            "syslog_port": self.syslog_port if self.enable_logstash else None,
            "json_logs": self.json_logs,
            "enable_logstash": self.enable_logstash,
        }

        if self.environment == "development":
            base_config.update({"json_logs": False, "log_level": "DEBUG" if self.debug else "INFO"})

        return base_config

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
