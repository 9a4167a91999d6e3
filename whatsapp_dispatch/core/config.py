from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional
import os


# Define the acceptable environments for type checking
Environment = Literal["development", "staging", "production"]

DEFAULT_WHATSAPP_ENDPOINT = (
    "https://api.nextel.io/API_V2/Whatsapp/send_template/MFZPSnRHL3BiOHNsdnZMMTYwK0xrUT09"
)


class Settings(BaseSettings):
    """
    Application-wide settings.
    Settings are loaded from environment variables (case-insensitive)
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", case_sensitive=False
    )

    # CORE APPLICATION SETTINGS ---
    PROJECT_NAME: str = "WhatsApp Dispatch Service"
    ENVIRONMENT: Environment = "development"
    DEBUG: bool = True
    VERSION: str = "1.0.0"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    API_V1_PREFIX: str = "/api/v1"

    # WHATSAPP GATEWAY ---
    WHATSAPP_API_KEY: Optional[str] = None
    WHATSAPP_ENDPOINT: str = DEFAULT_WHATSAPP_ENDPOINT
    WHATSAPP_TEMPLATE_LANGUAGE: str = "en"
    WHATSAPP_SEND_TIMEOUT_SECONDS: float = 20.0
    WHATSAPP_HEALTH_TIMEOUT_SECONDS: float = 5.0

    # Connection probe: must be a real approved template
    WHATSAPP_PROBE_TEMPLATE_ID: str = "vehicle_checkin"
    WHATSAPP_PROBE_PHONE: str = "919999999999"

    # Phone numbers with exactly 10 digits get this prefix
    DEFAULT_COUNTRY_CODE: str = "91"
    CURRENCY_SYMBOL: str = "₹"

    # Transport retry (1 = single attempt, no retry)
    DISPATCH_MAX_ATTEMPTS: int = 1
    DISPATCH_RETRY_BASE_DELAY: float = 1.0

    @property
    def WHATSAPP_CONFIGURED(self) -> bool:
        return bool(self.WHATSAPP_API_KEY)

    # --- REDIS (template approvals & delivery log) ---
    REDIS_HOST: str
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    # Bounds connect and command waits so a dead Redis cannot stall a send
    REDIS_SOCKET_TIMEOUT_SECONDS: float = 2.0

    @property
    def REDIS_URL(self) -> str:
        """Resolve Redis URL. Prefer explicit REDIS_URL/REDIS_URI env var, otherwise build from parts."""
        env_url = os.getenv("REDIS_URL") or os.getenv("REDIS_URI")
        if env_url:
            return env_url

        pwd = os.getenv("REDIS_PASS") or self.REDIS_PASSWORD
        if pwd:
            return f"redis://:{pwd}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Hash of template_id -> approval record JSON, written by the template sync job
    TEMPLATE_APPROVALS_KEY: str = "whatsapp:templates"
    DELIVERY_LOG_TTL_SECONDS: int = 86400  # 24 hours

    # Circuit Breaker Settings
    CIRCUIT_BREAKER_MAX_FAILURES: int = 5
    CIRCUIT_BREAKER_RESET_TIMEOUT: int = 30


settings = Settings()
