# lambdas/common/settings.py
"""
Environment-driven configuration shared by the Lambda functions.
Values are read from the environment, or from a local .env file when present.
"""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore', populate_by_name=True
    )

    # Shortcut
    shortcut_token: str = Field("", alias='SHORTCUT_TOKEN')
    shortcut_incident_label_id: int = Field(0, alias='SHORTCUT_INCIDENT_LABEL_ID')
    shortcut_api_url: str = Field("https://api.app.shortcut.com/api/v3", alias='SHORTCUT_API_URL')
    request_timeout_seconds: int = Field(10, alias='REQUEST_TIMEOUT_SECONDS')

    # Product all Shortcut stories are attributed to
    repo_name: str = Field("eHawk", alias='REPO_NAME')

    # Storage
    aws_region: str = Field("us-east-1", alias='AWS_REGION')
    table_name: str = Field("DoraEventsTable", alias='TABLE_NAME')

    # Queries
    max_date_range: int = Field(365, alias='MAX_DATE_RANGE')
    allowed_origin: str = Field("*", alias='ALLOWED_ORIGIN')

    @field_validator('shortcut_incident_label_id', mode='before')
    @classmethod
    def _parse_label_id(cls, value):
        # Anything that is not an integer counts as "not configured".
        try:
            return int(value)
        except (TypeError, ValueError):
            return 0


def get_settings() -> AppSettings:
    """Builds a settings instance from the current environment."""
    return AppSettings()
