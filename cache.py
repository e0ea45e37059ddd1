""" cache clients shared by controllers and services

Values are always stored serialized as JSON, so whatever comes back from `tryGet` is a fresh copy
and callers can't accidentally modify what's cached.
"""
import json
import time

import redis

from config.constants import CACHE_KEY_PREFIX, CACHE_MAX_SIZE, CACHE_SOCKET_TIMEOUT, REDIS_URL


class CacheError(Exception):
    """ raised when the cache backend can't be reached or returns garbage """


class BaseCache(object):

    def tryGet(self, key):
        """ returns a tuple of (found, value) """
        raise NotImplementedError

    def set(self, key, value, sliding_expiration=None):
        """ sliding_expiration is in seconds, each successful read restarts the window """
        raise NotImplementedError

    def remove(self, key):
        raise NotImplementedError

    def dumps(self, value):
        return json.dumps(value)

    def loads(self, data):
        try:
            return json.loads(data)
        except ValueError as e:
            raise CacheError('Invalid cached value: ' + str(e))


class MemoryCache(BaseCache):
    """ in memory LRU cache, most recently used key is at the end of `keys`, least is at the front """

    def __init__(self, max_size=CACHE_MAX_SIZE, clock=time.monotonic):
        self.max_size = max_size
        self.clock = clock
        self.entries = {} # key -> [data, sliding_expiration, expires_at]
        self.keys = []

    def tryGet(self, key):
        entry = self.entries.get(key)
        if entry is None:
            return False, None

        data, sliding_expiration, expires_at = entry
        now = self.clock()
        if expires_at is not None and now >= expires_at:
            self.remove(key)
            return False, None

        if sliding_expiration is not None:
            entry[2] = now + sliding_expiration

        # move the key to the end since it was just used
        # (this method avoids a temporary state with the key not existing)
        self.keys.sort(key=key.__eq__)
        return True, self.loads(data)

    def set(self, key, value, sliding_expiration=None):
        if key in self.entries:
            self.keys.remove(key)

        while len(self.keys) >= self.max_size:
            remove_key = self.keys.pop(0)
            del self.entries[remove_key]

        expires_at = None
        if sliding_expiration is not None:
            expires_at = self.clock() + sliding_expiration

        self.keys.append(key)
        self.entries[key] = [self.dumps(value), sliding_expiration, expires_at]

    def remove(self, key):
        if key in self.entries:
            del self.entries[key]
            self.keys.remove(key)

    def clear(self):
        self.entries = {}
        self.keys = []


class RedisCache(BaseCache):
    """ distributed cache backed by redis, shared by every instance of the app

    Redis has no notion of a sliding expiration, so the window is stored next to the value
    and the key's TTL gets pushed back out on every read.
    """

    def __init__(self, client, prefix=CACHE_KEY_PREFIX):
        self.client = client
        self.prefix = prefix

    def makeKey(self, key):
        return self.prefix + key

    def tryGet(self, key):
        full_key = self.makeKey(key)
        try:
            data = self.client.get(full_key)
        except redis.RedisError as e:
            raise CacheError('Cache read failed: ' + str(e))

        if data is None:
            return False, None

        if isinstance(data, bytes):
            try:
                data = data.decode('utf8')
            except UnicodeDecodeError as e:
                raise CacheError('Invalid cached value for ' + full_key + ': ' + str(e))
        envelope = self.loads(data)
        if not isinstance(envelope, dict) or 'value' not in envelope:
            raise CacheError('Invalid cached value for ' + full_key)

        sliding_expiration = envelope.get('sliding')
        if sliding_expiration:
            try:
                self.client.expire(full_key, sliding_expiration)
            except redis.RedisError as e:
                raise CacheError('Cache refresh failed: ' + str(e))

        return True, envelope.get('value')

    def set(self, key, value, sliding_expiration=None):
        data = self.dumps({'sliding': sliding_expiration, 'value': value})
        try:
            self.client.set(self.makeKey(key), data, ex=sliding_expiration)
        except redis.RedisError as e:
            raise CacheError('Cache write failed: ' + str(e))

    def remove(self, key):
        try:
            self.client.delete(self.makeKey(key))
        except redis.RedisError as e:
            raise CacheError('Cache delete failed: ' + str(e))


def fromConfig():
    if REDIS_URL:
        # the connection is lazy, nothing is opened until the first command
        # without timeouts a hung server blocks the request forever instead of raising a TimeoutError
        client = redis.Redis.from_url(REDIS_URL, socket_timeout=CACHE_SOCKET_TIMEOUT,
            socket_connect_timeout=CACHE_SOCKET_TIMEOUT)
        return RedisCache(client)
    return MemoryCache()
