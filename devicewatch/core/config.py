"""
Configuration settings for the DeviceWatch service
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings"""

    # Database
    database_url: str = "sqlite:///./devicewatch.db"
    sql_echo: bool = False

    # API Settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False

    # Gemini text generation (comma-separated key list)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash-lite"
    gemini_api_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout: int = 30  # seconds

    # ThingSpeak feed
    thingspeak_api_url: str = "https://api.thingspeak.com"
    thingspeak_channel_id: str = ""
    thingspeak_read_key: str = ""

    # Feed synchronization
    sync_enabled: bool = True
    sync_interval: int = 10  # seconds
    sync_device_id: str = "IND-MACHINE-01"
    sync_timeout: int = 15  # seconds

    # Analytics and retention
    analytics_window_hours: int = 24
    reading_retention_days: int = 90

    # Voice alerts
    tts_url: str = "https://translate.google.com/translate_tts"
    voice_max_chars: int = 200

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def gemini_api_keys(self) -> List[str]:
        """Parsed credential pool, blank entries dropped"""
        return [key.strip() for key in self.gemini_api_key.split(",") if key.strip()]

    @property
    def feed_url(self) -> str:
        """Latest-entry URL of the configured ThingSpeak channel"""
        return (
            f"{self.thingspeak_api_url}/channels/{self.thingspeak_channel_id}/feeds.json"
            f"?api_key={self.thingspeak_read_key}&results=1"
        )


# Global settings instance
settings = Settings()
