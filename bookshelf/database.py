"""PostgreSQL key-value store."""
import psycopg2
from psycopg2 import pool
from typing import Optional, Dict, Any
import logging

from bookshelf.storage import KeyValueStore

logger = logging.getLogger(__name__)


class Database(KeyValueStore):
    """PostgreSQL-backed key-value store with connection pooling."""
    
    def __init__(self, connection_string: str, min_conn: int = 1, max_conn: int = 10):
        """
        Initialize database connection pool.
        
        Args:
            connection_string: PostgreSQL connection string
            min_conn: Minimum connections in pool
            max_conn: Maximum connections in pool
        """
        self.connection_pool = pool.SimpleConnectionPool(
            min_conn,
            max_conn,
            connection_string
        )
        
        if self.connection_pool:
            logger.info("Database connection pool created successfully")
        else:
            raise psycopg2.OperationalError("Failed to create connection pool")
    
    def init_schema(self):
        """Create the key-value table if it doesn't exist."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key VARCHAR(255) PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                """)
                
                conn.commit()
                logger.info("Database schema initialized successfully")
        
        finally:
            self.connection_pool.putconn(conn)
    
    def get(self, key: str) -> Optional[str]:
        """Get the value stored under a key."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT value FROM kv_store WHERE key = %s", (key,))
                
                row = cur.fetchone()
                return row[0] if row else None
        finally:
            self.connection_pool.putconn(conn)
    
    def set(self, key: str, value: str) -> None:
        """
        Insert or replace the value under a key.
        
        Raises:
            psycopg2.Error: after rolling back a failed write
        """
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES (%s, %s, CURRENT_TIMESTAMP)
                    ON CONFLICT (key) DO UPDATE SET
                        value = EXCLUDED.value,
                        updated_at = CURRENT_TIMESTAMP
                """, (key, value))
                conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"Failed to write key {key}: {e}")
            raise
        finally:
            self.connection_pool.putconn(conn)
    
    def get_stats(self) -> Dict[str, Any]:
        """Get database statistics."""
        conn = self.connection_pool.getconn()
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM kv_store")
                key_count = cur.fetchone()[0]
                
                return {"stored_keys": key_count}
        finally:
            self.connection_pool.putconn(conn)
    
    def close(self):
        """Close all connections in the pool."""
        if self.connection_pool:
            self.connection_pool.closeall()
            logger.info("Database connection pool closed")
