"""
Redis Recommender Gateway
Writes the preference graph into the Redis keyspace the recommender reads.

Layout:
    {prefix}:user:{user_id}          hash  product_line_id -> rating
    {prefix}:line:{product_line_id}  set   user ids with a preference

Both keys are written in one MULTI/EXEC pipeline. HSET/SADD overwrite and
HDEL/SREM ignore absent members, which gives the idempotency the gateway
contract requires.
"""

import logging
from typing import Optional

import redis
from redis.connection import ConnectionPool

from ..errors import RecommenderGatewayError, RecommenderTimeoutError
from .gateway import PreferenceGateway

logger = logging.getLogger(__name__)


class RedisPreferenceGateway(PreferenceGateway):
    """Preference gateway backed by Redis with connection pooling."""

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        key_prefix: str = "recommender:prefs",
        timeout: float = 2.0,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis gateway.

        Args:
            host: Redis host
            port: Redis port
            db: Redis database number
            key_prefix: Namespace for preference keys
            timeout: Socket and connect timeout in seconds
            client: Pre-built client (overrides host/port/db)
        """
        self.key_prefix = key_prefix
        self.timeout = timeout

        if client is None:
            pool = ConnectionPool(
                host=host,
                port=port,
                db=db,
                decode_responses=True,
                max_connections=20,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
            )
            client = redis.Redis(connection_pool=pool)
        self.client = client

        logger.info(f"Redis recommender gateway initialized: {host}:{port} (db={db})")

    def user_key(self, user_id: int) -> str:
        return f"{self.key_prefix}:user:{user_id}"

    def line_key(self, product_line_id: int) -> str:
        return f"{self.key_prefix}:line:{product_line_id}"

    def add_preference(self, user_id: int, product_line_id: int, rating: float) -> None:
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.hset(self.user_key(user_id), str(product_line_id), rating)
            pipe.sadd(self.line_key(product_line_id), str(user_id))
            pipe.execute()
        except redis.TimeoutError as e:
            raise RecommenderTimeoutError("add_preference", self.timeout) from e
        except redis.RedisError as e:
            raise RecommenderGatewayError(f"Redis add_preference failed: {e}") from e

    def remove_preference(self, user_id: int, product_line_id: int) -> None:
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.hdel(self.user_key(user_id), str(product_line_id))
            pipe.srem(self.line_key(product_line_id), str(user_id))
            pipe.execute()
        except redis.TimeoutError as e:
            raise RecommenderTimeoutError("remove_preference", self.timeout) from e
        except redis.RedisError as e:
            raise RecommenderGatewayError(f"Redis remove_preference failed: {e}") from e

    def close(self) -> None:
        self.client.close()
