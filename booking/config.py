"""
Application settings (pydantic-settings) and secret lookup.

Every setting can be given as an environment variable with the `BOOKING_`
prefix (`BOOKING_GCP_PROJECT`, `BOOKING_FIREBASE_API_KEY`, ...) or in a
`.env` file in the working directory.
"""
import logging
import os

import google.auth
from google.cloud import secretmanager
from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BOOKING_", env_file=".env", extra="ignore")

    gcp_project: str | None = None  # None -> inferred from ADC
    firestore_database: str = "(default)"

    # Firebase Web API key; read from Secret Manager when not set here
    firebase_api_key: SecretStr | None = None
    firebase_api_key_secret: str = "firebase-api-key"
    identity_url: str = "https://identitytoolkit.googleapis.com/v1/"
    auth_timeout: float = 30.0

    bookings_collection: str = "bookings"
    activities_collection: str = "activities"
    availability_collection: str = "availability"
    admins_collection: str = "admins"

    first_slot_hour: int = 9
    last_slot_hour: int = 18
    slot_capacity: int = 100

    log_level: str = "INFO"

    @model_validator(mode="after")
    def check_slot_template(self) -> "Settings":
        if not 0 <= self.first_slot_hour <= self.last_slot_hour <= 23:
            raise ValueError(
                f"slot hours must satisfy 0 <= first <= last <= 23, "
                f"got {self.first_slot_hour}..{self.last_slot_hour}"
            )
        if self.slot_capacity <= 0:
            raise ValueError("slot_capacity must be positive")
        return self


def resolve_project(settings: Settings) -> str:
    """Explicit setting first, then the project attached to ADC, then GCP_PROJECT."""
    if settings.gcp_project:
        return settings.gcp_project
    _, project_id = google.auth.default()
    project_id = project_id or os.getenv("GCP_PROJECT")
    if not project_id:
        raise RuntimeError("GCP project ID not found")
    return project_id


def get_firebase_api_key(settings: Settings) -> str:
    if settings.firebase_api_key is not None:
        return settings.firebase_api_key.get_secret_value()

    project_id = resolve_project(settings)
    logger.info(
        "Reading Firebase API key from secret %s in project %s",
        settings.firebase_api_key_secret,
        project_id,
    )
    sm = secretmanager.SecretManagerServiceClient()
    name = f"projects/{project_id}/secrets/{settings.firebase_api_key_secret}/versions/latest"
    return sm.access_secret_version(name=name).payload.data.decode()
