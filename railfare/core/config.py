from pydantic import BaseModel
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application configuration settings loaded from .env file"""

    # Application
    APP_NAME: str = "railfare"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # CORS
    CORS_ORIGINS: str = "*"

    # Outbound HTTP
    HTTP_TIMEOUT: float = 10.0  # Seconds per remote call

    # IPWS booking API
    IPWS_BASE_URL: str = "https://ipws.cdis.cz/IP.svc"
    IPWS_APP_ID: str = "{A6AB5B3E-8A7E-4E84-9DC8-801561CE886F}"
    IPWS_USER_DESC: str = (
        "294|34|Google sdk_gphone64_x86_64|^|546338e6-5fa8-8c06-0000-0196a7501a71"
        "|en|US|440|1080|2154|2.13.3"
    )
    IPWS_LANG: int = 1
    IPWS_USER_AGENT: str = "okhttp/4.9.3"
    IPWS_MAX_STATIONS: int = 5
    IPWS_MAX_CONNECTIONS: int = 8
    IPWS_CARRIER: int = 2
    IPWS_PASSENGER_ID: int = 5

    # Exchange rates
    RATES_URL: str = "https://api.frankfurter.dev/v1/latest"
    SOURCE_CURRENCY: str = "CZK"

    # Logging
    LOG_DIR: str = "logs"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS origins to list"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


class NotificationSettings(BaseModel):
    """Notification preferences sent when a booking session is opened"""
    iNotificationMask: int = 2047
    iInitialAdvance: int = 30
    iDelayLimit: int = 5
    iChangeAdvance: int = 5
    iGetOffAdvance: int = 5


class IpwsClientConfig(BaseModel):
    """
    Client identification passed to every IPWS call.

    Built from Settings via from_settings; the IPWS_* values there are the
    only defaults.
    """
    base_url: str
    app_id: str
    user_desc: str
    lang: int
    user_agent: str
    max_stations: int
    max_connections: int
    carrier: int
    passenger_id: int
    doc_type: int = 1
    notifications: NotificationSettings = NotificationSettings()

    @classmethod
    def from_settings(cls, settings: Settings) -> "IpwsClientConfig":
        return cls(
            base_url=settings.IPWS_BASE_URL.rstrip("/"),
            app_id=settings.IPWS_APP_ID,
            user_desc=settings.IPWS_USER_DESC,
            lang=settings.IPWS_LANG,
            user_agent=settings.IPWS_USER_AGENT,
            max_stations=settings.IPWS_MAX_STATIONS,
            max_connections=settings.IPWS_MAX_CONNECTIONS,
            carrier=settings.IPWS_CARRIER,
            passenger_id=settings.IPWS_PASSENGER_ID,
        )


settings = Settings()
