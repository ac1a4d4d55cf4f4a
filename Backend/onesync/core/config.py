import os
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

# Calculate the absolute path to the .env file.
# It finds this file's location and navigates up to the project root.
_config_dir = os.path.dirname(os.path.abspath(__file__))
_backend_dir = os.path.dirname(os.path.dirname(_config_dir))
_project_root = os.path.dirname(_backend_dir)
_dotenv_path = os.path.join(_project_root, '.env')


class Settings(BaseSettings):
    DATABASE_URL: str
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["*"]

    # JWT settings
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Object storage
    STORAGE_ROOT: str = os.path.join(_project_root, "storage")
    STORAGE_PUBLIC_URL: str = "/storage"
    MAX_AUDIO_UPLOAD_MB: int = 100
    MAX_ARTWORK_UPLOAD_MB: int = 10

    # API aggregator (Spotify, Apple Music, Stripe, Intercom passthrough)
    PICA_BASE_URL: str = "https://api.picaos.com"
    PICA_SECRET_KEY: Optional[str] = None
    PICA_SPOTIFY_CONNECTION_KEY: Optional[str] = None
    PICA_APPLE_MUSIC_CONNECTION_KEY: Optional[str] = None
    PICA_STRIPE_CONNECTION_KEY: Optional[str] = None
    PICA_INTERCOM_CONNECTION_KEY: Optional[str] = None
    INTERCOM_PROJECT_REF: Optional[str] = None

    # Trolley payouts
    TROLLEY_BASE_URL: str = "https://api.trolley.com/v1"
    TROLLEY_API_KEY: Optional[str] = None
    TROLLEY_API_SECRET: Optional[str] = None

    # Distributor FTP drop
    FTP_HOST: Optional[str] = None
    FTP_PORT: int = 21
    FTP_USER: Optional[str] = None
    FTP_PASSWORD: Optional[str] = None
    FTP_TIMEOUT_SECONDS: int = 30

    # AI mastering
    MASTERING_API_URL: Optional[str] = None
    MASTERING_API_KEY: Optional[str] = None

    # Spotify account linking
    SPOTIFY_CLIENT_ID: Optional[str] = None
    SPOTIFY_REDIRECT_URI: str = "http://localhost:5173/auth/spotify-callback"

    # Use Pydantic's own mechanism to load the .env file using the absolute path.
    model_config = SettingsConfigDict(
        env_file=_dotenv_path,
        env_file_encoding='utf-8',
        extra='ignore'
    )

settings = Settings()
