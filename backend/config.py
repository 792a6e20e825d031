import os
from dotenv import load_dotenv

from stockdata.errors import ConfigError


class Config:
    """Runtime settings, built once at startup and handed to each component."""

    def __init__(
        self,
        DATABASE_DSN: str,
        ALPHA_VANTAGE_API_KEY: str = '',
        PORT: int = 8080,
        ALLOWED_ORIGINS: list = None,
        API_MAX_RETRIES: int = 3,
        REQUEST_TIMEOUT: float = 30.0,
        OUTPUT_SIZE: str = 'compact',
        DEBUG: bool = False,
        LOG_LEVEL: str = 'INFO'
    ):
        if not DATABASE_DSN:
            raise ConfigError("Missing required environment variable DATABASE_DSN")

        self.DATABASE_DSN = DATABASE_DSN
        self.ALPHA_VANTAGE_API_KEY = ALPHA_VANTAGE_API_KEY

        # HTTP server
        self.PORT = PORT
        self.ALLOWED_ORIGINS = ALLOWED_ORIGINS or ['*']
        self.DEBUG = DEBUG
        self.LOG_LEVEL = LOG_LEVEL

        # Upstream API
        self.API_MAX_RETRIES = API_MAX_RETRIES
        self.REQUEST_TIMEOUT = REQUEST_TIMEOUT
        self.OUTPUT_SIZE = OUTPUT_SIZE

    @classmethod
    def from_env(cls, env_file: str = None) -> 'Config':
        """Load .env (if present) and read settings from the process environment."""
        load_dotenv(env_file)

        origins = os.getenv('ALLOWED_ORIGINS', '*')

        return cls(
            DATABASE_DSN=os.getenv('DATABASE_DSN', ''),
            ALPHA_VANTAGE_API_KEY=os.getenv('ALPHA_VANTAGE_API_KEY', ''),
            PORT=int(os.getenv('PORT', '8080')),
            ALLOWED_ORIGINS=[o.strip() for o in origins.split(',') if o.strip()],
            API_MAX_RETRIES=int(os.getenv('API_MAX_RETRIES', '3')),
            REQUEST_TIMEOUT=float(os.getenv('REQUEST_TIMEOUT', '30')),
            OUTPUT_SIZE=os.getenv('OUTPUT_SIZE', 'compact'),
            DEBUG=os.getenv('DEBUG', 'False').lower() == 'true',
            LOG_LEVEL=os.getenv('LOG_LEVEL', 'INFO').upper()
        )
