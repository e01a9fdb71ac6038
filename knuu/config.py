from pydantic_settings import BaseSettings
from functools import lru_cache
import logging


class Settings(BaseSettings):
    # Namespace all test instances are deployed into
    knuu_namespace: str = "test"

    # Ephemeral registry used when an instance has no image set.
    # Images pushed there expire after image_ttl (ttl.sh tag semantics).
    image_registry: str = "ttl.sh"
    image_ttl: str = "1h"

    # Value of the k8s.kubernetes.io/managed-by label
    managed_by: str = "knuu"

    # PVC settings. Empty storage class means the cluster default.
    storage_class: str = ""
    pvc_access_mode: str = "ReadWriteOnce"

    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields from .env file
        case_sensitive = False  # Allow lowercase env vars to match uppercase field names


@lru_cache()
def get_settings():
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
