from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Food Booking Service"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    ERROR_LOG_FILE: str = "logs/errors.log"  # empty string disables the file sink

    # Booking rules
    ENFORCE_UNIQUE_FOOD_NAME: bool = True
    TRACK_DELIVERY_STATUS: bool = False

    # Storage
    BOOKINGS_FILE: str = ""  # empty string keeps bookings in memory only
    DEFAULT_PAGE_SIZE: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
