import atexit
import logging

import psycopg2
import psycopg2.pool

from periodizer.config import MAX_DB_CONNECTIONS, MIN_DB_CONNECTIONS, get_db_connection_params

logger = logging.getLogger(__name__)

db_pool = None


def init_db_pool():
    """Initializes the database connection pool."""
    global db_pool
    if db_pool is None:
        params = get_db_connection_params()
        if not all(params.values()):
            logger.error("Database connection parameters are incomplete. Pool not initialized.")
            return

        logger.info(f"Initializing database connection pool for host '{params.get('host')}' db '{params.get('dbname')}'")
        try:
            db_pool = psycopg2.pool.SimpleConnectionPool(
                MIN_DB_CONNECTIONS,
                MAX_DB_CONNECTIONS,
                **params
            )
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise
        logger.info("Database connection pool initialized successfully.")


def get_db_connection():
    """Gets a connection from the database pool, creating the pool on first use."""
    if db_pool is None:
        init_db_pool()
        if db_pool is None:
            logger.critical("Database pool is not available. Cannot get connection.")
            raise RuntimeError("Database pool not available.")
    return db_pool.getconn()


def release_db_connection(conn):
    """Returns a connection to the pool."""
    if db_pool is not None and conn is not None:
        db_pool.putconn(conn)


@atexit.register
def close_db_pool():
    global db_pool
    if db_pool:
        logger.info("Closing database connection pool.")
        db_pool.closeall()
        db_pool = None
