""" builds the sitemap documents for the site, see http://www.sitemaps.org/protocol.html

The whole set of documents is cached under a single key. Caching each document on its own could let them
expire out of sync if the number of documents changes between regenerations.
"""
import enum
import math
from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime

from tornado import template

from cache import CacheError
from config.constants import MAX_SITEMAP_ENTRIES, SITEMAP_CACHE_KEY, VIEWS_PATH
import helpers


class ChangeFrequency(enum.Enum):
    ALWAYS = 'always'
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    NEVER = 'never'


@dataclass(frozen=True)
class SitemapEntry:
    url: str
    priority: float = None
    last_modified: datetime = None
    change_frequency: ChangeFrequency = None

    def __post_init__(self):
        if not self.url.startswith(('http://', 'https://')):
            raise ValueError('Sitemap URLs must be absolute: ' + self.url)
        if self.priority is not None and not 0 <= self.priority <= 1:
            raise ValueError('Sitemap priority must be between 0 and 1: ' + str(self.priority))
        if self.change_frequency is not None:
            # accepts the plain string too, e.g. 'weekly'
            object.__setattr__(self, 'change_frequency', ChangeFrequency(self.change_frequency))

    @property
    def lastmod(self):
        return self.last_modified and helpers.w3c_datetime(self.last_modified) or None

    @property
    def changefreq(self):
        return self.change_frequency and self.change_frequency.value or None

    @property
    def formatted_priority(self):
        return self.priority is not None and '%.1f' % self.priority or None


# a route to list in the sitemap, before its absolute URL has been worked out
SitemapRoute = namedtuple('SitemapRoute', ['name', 'args', 'priority', 'change_frequency', 'last_modified'],
    defaults=((), None, None, None))

# add entries for all your important pages here
# for anything that comes from the datastore (products, articles) pass a source to the assembler instead
SITEMAP_ROUTES = [
    SitemapRoute('home', priority=1.0),
    SitemapRoute('about', priority=0.9),
    SitemapRoute('contact', priority=0.9),
]


class SitemapAssembler(object):
    """ produces sitemap XML using the cache-aside pattern

    url_for takes a route name plus its arguments and returns an absolute URL
    sources are callables that return more SitemapRoutes, like this one for a product catalog:

        def products():
            for product in catalog.products(): # any iterable of your own records
                yield SitemapRoute('product', args=(product.slug,), priority=0.8,
                    change_frequency='weekly', last_modified=product.modified_dt)

    There's no lock around regeneration. Two requests that both miss will both build the documents and the
    last one to write wins, which is harmless because the output only depends on the routes.
    """

    def __init__(self, url_for, logger, cache, sliding_expiration, routes=None, sources=None, loader=None,
            max_entries=MAX_SITEMAP_ENTRIES, cache_key=SITEMAP_CACHE_KEY):
        self.url_for = url_for
        self.logger = logger
        self.cache = cache
        self.sliding_expiration = sliding_expiration
        self.routes = routes is None and SITEMAP_ROUTES or routes
        self.sources = sources or []
        self.loader = loader or template.Loader(VIEWS_PATH)
        self.max_entries = max_entries
        self.cache_key = cache_key

    def getDocument(self, index=None):
        """ returns the root document when index is None

        That's a sitemap index if there are more entries than fit in one document, otherwise the only sitemap.
        Returns None if the index is out of range.
        """
        documents = self.getDocuments()

        if index is not None and (index < 0 or index >= len(documents)):
            return None

        return documents[index or 0]

    def getDocuments(self):
        try:
            found, documents = self.cache.tryGet(self.cache_key)
        except CacheError as e:
            # an unavailable cache shouldn't take the sitemap down with it
            self.logger.warning('Sitemap cache unavailable, generating without it: ' + str(e))
            return self.buildDocuments(self.collectEntries())

        if found:
            if self.isDocumentSet(documents):
                return documents
            # whatever is in there is overwritten below
            self.logger.warning('Discarding an invalid cached sitemap')

        documents = self.buildDocuments(self.collectEntries())
        try:
            self.cache.set(self.cache_key, documents, sliding_expiration=self.sliding_expiration)
        except CacheError as e:
            self.logger.warning('Could not cache the sitemap: ' + str(e))

        return documents

    def isDocumentSet(self, documents):
        return (isinstance(documents, list) and len(documents) > 0
            and all(isinstance(document, str) for document in documents))

    def collectEntries(self):
        entries = []
        for route in self.routes:
            self.addEntry(entries, route)

        for source in self.sources:
            try:
                for route in source():
                    self.addEntry(entries, route)
            except Exception as e:
                # keep whatever the source managed to produce
                self.logger.warning('Sitemap source failed: ' + helpers.limit(repr(e), 500))

        return entries

    def addEntry(self, entries, route):
        try:
            url = self.url_for(route.name, *route.args)
            entry = SitemapEntry(url, priority=route.priority, last_modified=route.last_modified,
                change_frequency=route.change_frequency)
        except Exception as e:
            name = str(getattr(route, 'name', route))
            self.logger.warning('Skipping sitemap route "' + name + '": ' + helpers.limit(repr(e), 500))
        else:
            entries.append(entry)

    def buildDocuments(self, entries):
        if len(entries) <= self.max_entries:
            return [self.renderSitemap(entries)]

        count = int(math.ceil(len(entries) / float(self.max_entries)))
        chunks = [entries[i * self.max_entries:(i + 1) * self.max_entries] for i in range(count)]

        # the index is the first document so the sitemaps it links to start at 1
        urls = [self.sitemapUrl(i + 1) for i in range(count)]
        return [self.renderIndex(urls)] + [self.renderSitemap(chunk) for chunk in chunks]

    def sitemapUrl(self, index):
        return self.url_for('sitemap').rstrip('/') + '?index=' + str(index)

    def renderSitemap(self, entries):
        return self.loader.load('sitemap.xml').generate(entries=entries).decode('utf8')

    def renderIndex(self, urls):
        return self.loader.load('sitemap_index.xml').generate(urls=urls).decode('utf8')
