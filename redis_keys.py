REDIS_CALL_KEY = "call:meta:{room_id}" # room id - call record hash
REDIS_CALL_INDEX_KEY = "call:index:{user_type}:{user_id}" # sorted set of room ids, scored by created_at

# **Example `call:meta:{room_id}` hash fields**
# - `room_id` = uuid hex, also the signaling room id
# - `caller_id` / `caller_name` / `caller_type`
# - `receiver_id` / `receiver_name` / `receiver_type`
# - `status` = initiated | started | ended | any client supplied status
# - `duration_seconds` = integer
# - `started_at` / `ended_at` / `created_at` = ISO timestamps
