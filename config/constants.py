import os

APP_PATH = os.path.dirname(os.path.dirname(os.path.realpath(__file__)))
VIEWS_PATH = os.path.join(APP_PATH, 'views')

# Datastore
DATASTORE_EMULATOR_HOST = os.environ.get('DATASTORE_EMULATOR_HOST', 'localhost:8081')

# Cache
# leave REDIS_URL empty to use the in-process cache (fine for a single instance)
REDIS_URL = os.environ.get('REDIS_URL', '')
CACHE_KEY_PREFIX = os.environ.get('CACHE_KEY_PREFIX', 'webapp:')
CACHE_MAX_SIZE = 128 # number of unique entries for the in-process cache
# seconds to wait on redis before giving up, a hung backend must not stall the IOLoop forever
CACHE_SOCKET_TIMEOUT = float(os.environ.get('CACHE_SOCKET_TIMEOUT', 0.5))

# Sitemap
# the canonical scheme and host, e.g. "https://www.example.com"
# sitemap URLs come from here instead of the request so a forged Host header can't end up in the cache
# when empty the request's own protocol and host are used
SITE_URL = os.environ.get('SITE_URL', '').rstrip('/')
# the whole set of sitemap documents lives under one key so they can't expire out of sync
SITEMAP_CACHE_KEY = 'SitemapNodes'
SITEMAP_CACHE_SECONDS = int(os.environ.get('SITEMAP_CACHE_SECONDS', 86400))

# the protocol allows 50,000 URLs or 10 MB per file, whichever comes first
# half the URL limit keeps documents with long URLs safely under the size limit
MAX_SITEMAP_ENTRIES = 25000
