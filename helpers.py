import os
from datetime import timezone

DEBUG = os.getenv('GAE_ENV', 'localdev').startswith('localdev') # "standard" on production (maybe "flexible" too?)
TESTING = '(testbed)' in os.environ.get('SERVER_SOFTWARE', '')


def debug():
    return DEBUG


def testing():
    return TESTING


def w3c_datetime(dt):
    # sitemaps need a timezone designator whenever a time is included, naive values are assumed to be UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.replace(microsecond=0).isoformat()


def limit(string, max_len):
    if len(string) > max_len:
        string = string[0:max_len - 3] + "..."
    return string
