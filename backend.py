import redis
from datetime import datetime
from typing import Optional
from constants import REDIS_HOST, REDIS_PORT, REDIS_PASSWORD, REDIS_DB, CALL_HISTORY_LIMIT
from constants import CALL_STATUS_INITIATED, CALL_STATUS_STARTED, CALL_STATUS_ENDED
from redis_keys import REDIS_CALL_KEY, REDIS_CALL_INDEX_KEY
from logging_config import get_logger

logger = get_logger(__name__)

# The client connects lazily on first command; health checks call ping()
redis_client = redis.Redis(
    host=REDIS_HOST,
    port=REDIS_PORT,
    password=REDIS_PASSWORD,
    db=REDIS_DB,
    decode_responses=True,
    socket_timeout=2,
    socket_connect_timeout=2,
)

INT_FIELDS = ("duration_seconds",)


class RedisBackend:
    """Call record storage. Each call is a hash keyed by its room id."""

    def __init__(self, client: Optional[redis.Redis] = None):
        self.redis_client = client if client is not None else redis_client
        logger.info(f"Initializing RedisBackend with connection to {REDIS_HOST}:{REDIS_PORT}")

    def ping(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    def create_call(self, room_id: str, call_data: dict) -> dict:
        logger.info(f"Creating call record for room {room_id}")
        created_at = datetime.now()
        record = {
            "room_id": room_id,
            "status": CALL_STATUS_INITIATED,
            "duration_seconds": 0,
            "created_at": created_at.isoformat(),
            **call_data,
        }
        key = REDIS_CALL_KEY.format(room_id=room_id)
        # Redis hashes hold strings only, skip None values
        mapping = {k: str(v) for k, v in record.items() if v is not None}

        pipe = self.redis_client.pipeline()
        pipe.hset(key, mapping=mapping)
        score = created_at.timestamp()
        for side in ("caller", "receiver"):
            index_key = REDIS_CALL_INDEX_KEY.format(user_type=record[f"{side}_type"], user_id=record[f"{side}_id"])
            pipe.zadd(index_key, {room_id: score})
        pipe.execute()
        logger.debug(f"Call record {room_id} stored under key: {key}")
        return self._decode(mapping)

    def get_call(self, room_id: str) -> Optional[dict]:
        logger.debug(f"Fetching call {room_id}")
        data = self.redis_client.hgetall(REDIS_CALL_KEY.format(room_id=room_id))
        if not data:
            logger.debug(f"Call {room_id} not found in Redis")
            return None
        return self._decode(data)

    def list_calls_for(self, user_id: str, user_type: str, limit: int = CALL_HISTORY_LIMIT) -> list:
        """Latest calls where the user was caller or receiver, newest first."""
        index_key = REDIS_CALL_INDEX_KEY.format(user_type=user_type, user_id=user_id)
        room_ids = self.redis_client.zrevrange(index_key, 0, limit - 1)
        logger.debug(f"User {user_id} ({user_type}) has {len(room_ids)} calls in history")
        calls = []
        for room_id in room_ids:
            call = self.get_call(room_id)
            if call:
                calls.append(call)
        return calls

    def update_call_status(self, room_id: str, status: str, duration: Optional[int] = None) -> Optional[dict]:
        key = REDIS_CALL_KEY.format(room_id=room_id)
        if not self.redis_client.exists(key):
            logger.debug(f"Status update for unknown call {room_id}")
            return None

        updates = {"status": status}
        if status == CALL_STATUS_STARTED:
            updates["started_at"] = datetime.now().isoformat()
        elif status == CALL_STATUS_ENDED:
            updates["ended_at"] = datetime.now().isoformat()
            updates["duration_seconds"] = str(duration or 0)
        self.redis_client.hset(key, mapping=updates)
        logger.info(f"Call {room_id} status set to {status}")
        return self.get_call(room_id)

    @staticmethod
    def _decode(data: dict) -> dict:
        result = dict(data)
        for field in INT_FIELDS:
            if field in result:
                try:
                    result[field] = int(result[field])
                except (ValueError, TypeError):
                    pass
        return result


redis_backend = RedisBackend()


def get_call_store() -> RedisBackend:
    return redis_backend
