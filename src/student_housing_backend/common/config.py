'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "Student Housing Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "The backend API for student housing finance management."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str
    DATABASE_URL_TEST: str
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # Creates missing tables on startup (local sqlite runs)
    AUTO_CREATE_TABLES: bool = False

    # Upper bound in seconds for a single database round-trip
    STORE_TIMEOUT_SECONDS: float = 10.0

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = []

    # Other settings
    CURRENCY: str = "ZAR"

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
