"""Lua scripts executed atomically by the Redis coordinator.

Each script touches exactly one key (KEYS[1]) and returns an integer.
Redis runs a script to completion before serving any other command, so
the read and the write inside a script cannot interleave with another
caller.
"""

from permitgate.coordinator.base import ScriptId

# Grant one permit in the current window if the quota allows it.
# ARGV[1] = permits per second. Returns 1 on grant, 0 on deny.
# The 2 second expiry outlives the 1 second window to absorb clock skew.
BUCKET_CHECK_SCRIPT = """
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local current = tonumber(redis.call('get', key) or '0')
if current + 1 > limit then
    return 0
end
redis.call('incrby', key, 1)
redis.call('expire', key, 2)
return 1
"""

# Take one permit if any is available. Returns 1 on grant, 0 on deny.
# A missing counter means the semaphore was never initialized: deny.
SEMAPHORE_CHECK_SCRIPT = """
local key = KEYS[1]
local current = tonumber(redis.call('get', key) or '0')
if current <= 0 then
    return 0
end
redis.call('decr', key)
return 1
"""

# Return one permit unless the counter already holds the full limit.
# ARGV[1] = limit. Returns 1 if returned, 0 if refused.
SEMAPHORE_RELEASE_SCRIPT = """
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local current = tonumber(redis.call('get', key) or '0')
if current >= limit then
    return 0
end
redis.call('incr', key)
return 1
"""

SCRIPTS: dict[ScriptId, str] = {
    ScriptId.BUCKET_CHECK: BUCKET_CHECK_SCRIPT,
    ScriptId.SEMAPHORE_CHECK: SEMAPHORE_CHECK_SCRIPT,
    ScriptId.SEMAPHORE_RELEASE: SEMAPHORE_RELEASE_SCRIPT,
}
