"""
Shared test helpers: settings isolated from the environment and stand-in
Redis clients for exercising the document storage without a server.
"""

import redis

from hit_counter.config import Settings


class FakeRedis:
    """Just enough of redis.Redis for the document storage (hash commands)"""

    def __init__(self):
        self.hashes = {}

    def ping(self):
        return True

    def hset(self, name, key, value):
        bucket = self.hashes.setdefault(name, {})
        created = key not in bucket
        bucket[key] = value.encode("utf-8") if isinstance(value, str) else value
        return int(created)

    def hgetall(self, name):
        return dict(self.hashes.get(name, {}))

    def hlen(self, name):
        return len(self.hashes.get(name, {}))

    def close(self):
        pass


class BrokenRedis(FakeRedis):
    """Redis client whose server went away after startup"""

    def _fail(self, *args, **kwargs):
        raise redis.ConnectionError("Connection refused")

    hset = _fail
    hgetall = _fail
    hlen = _fail


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment and any .env file"""
    values = {
        "db_type": None,
        "connection_string": None,
        "stats_timezone": "UTC",
        "log_level": "warning",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)
