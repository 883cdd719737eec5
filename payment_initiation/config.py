"""Application configuration via environment variables and appsettings.json."""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, JsonConfigSettingsSource

SANDBOX_AUTH_URI = "https://auth.sandbox.openbankingplatform.com"
SANDBOX_API_URI = "https://api.sandbox.openbankingplatform.com"
PRODUCTION_AUTH_URI = "https://auth.openbankingplatform.com"
PRODUCTION_API_URI = "https://api.openbankingplatform.com"


class Settings(BaseSettings):
    client_id: str = ""
    client_secret: Optional[SecretStr] = None  # Prompted for when not configured
    redirect_uri: str = ""
    use_production_environment: bool = False
    production_client_certificate_file: Optional[str] = None
    production_client_key_file: Optional[str] = None
    production_certificate_password: Optional[SecretStr] = None
    psu_ip_address: str = "127.0.0.1"
    psu_user_agent: str = "payment-initiation/0.1.0"
    payments_file: str = "payments.json"
    log_level: str = "INFO"

    poll_interval_ms: int = 2000
    sca_status_max_wait_seconds: Optional[float] = 900.0  # None waits forever
    payment_status_max_wait_seconds: Optional[float] = 300.0
    authentication_method_id: str = "mbid"
    decoupled_return_uri: str = "https://openpayments.io"
    request_timeout_seconds: float = 30.0

    callback_host: str = "127.0.0.1"
    callback_port: int = 8765

    model_config = {
        "env_prefix": "PIS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "json_file": "appsettings.json",
        "json_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @property
    def auth_uri(self) -> str:
        return PRODUCTION_AUTH_URI if self.use_production_environment else SANDBOX_AUTH_URI

    @property
    def api_uri(self) -> str:
        return PRODUCTION_API_URI if self.use_production_environment else SANDBOX_API_URI

    @property
    def poll_interval(self) -> float:
        """Polling interval in seconds."""
        return self.poll_interval_ms / 1000


settings = Settings()
