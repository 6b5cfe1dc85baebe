from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str = "sqlite+aiosqlite:///./crewlink.db"
    
    # Stores
    store_read_timeout_seconds: float = 5.0
    
    # Listings
    listing_page_size: int = 100
    
    # Notifications
    notification_email_mode: str = "dev"  # dev | prod
    sendgrid_api_key: str = ""
    email_from_address: str = "no-reply@crewlink.example"
    
    # App
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = ""  # comma-separated


settings = Settings()
