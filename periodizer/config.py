import os
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

MIN_DB_CONNECTIONS = int(os.getenv("PERIODIZER_MIN_DB_CONNECTIONS", "1"))
MAX_DB_CONNECTIONS = int(os.getenv("PERIODIZER_MAX_DB_CONNECTIONS", "10"))

# A week needs at least this completion rate (percent) before it is analysed
DEFAULT_MIN_COMPLETION_RATE = float(os.getenv("PERIODIZER_MIN_COMPLETION_RATE", "50"))


def get_db_connection_params():
    """Determines database connection parameters."""
    database_url = os.getenv("DATABASE_URL")
    if database_url:
        try:
            url = urlparse(database_url)
            return {
                'dbname': url.path[1:],
                'user': url.username,
                'password': url.password,
                'host': url.hostname,
                'port': url.port or 5432
            }
        except ValueError as e:
            logger.error(f"Failed to parse DATABASE_URL: {e}. Falling back to POSTGRES_* vars.")

    return {
        'dbname': os.getenv("POSTGRES_DB"),
        'user': os.getenv("POSTGRES_USER"),
        'password': os.getenv("POSTGRES_PASSWORD"),
        'host': os.getenv("POSTGRES_HOST"),
        'port': os.getenv("POSTGRES_PORT", "5432")
    }
