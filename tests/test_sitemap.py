import math
import re
from datetime import datetime

import mock
import redis

from tests.base import BaseTestCase, RecordingLogger, UCHAR

HOST = 'http://testbed.example.com'
PATHS = {'home': '/', 'about': '/about', 'contact': '/contact', 'sitemap': '/sitemap.xml', 'page': '/page/%s'}


def countTags(xml, tag):
    return len(re.findall('<' + tag + '>', xml))


class BaseSitemapTestCase(BaseTestCase):

    def setUp(self):
        super(BaseSitemapTestCase, self).setUp()
        import sitemap
        self.sitemap = sitemap
        self.logger = RecordingLogger()
        self.url_calls = 0

    def url_for(self, name, *args):
        self.url_calls += 1
        path = PATHS[name]
        if args:
            path = path % args
        return HOST + path

    def pageSource(self, count):
        def source():
            for i in range(count):
                yield self.sitemap.SitemapRoute('page', args=(i,), priority=0.5)
        return source

    def makeAssembler(self, **kwargs):
        kwargs.setdefault('sliding_expiration', 60)
        return self.sitemap.SitemapAssembler(self.url_for, self.logger, self.cache, **kwargs)


class TestSitemapEntry(BaseSitemapTestCase):

    def test_init(self):
        entry = self.sitemap.SitemapEntry(HOST + '/', priority=1.0)
        assert entry.formatted_priority == '1.0'
        assert entry.lastmod is None
        assert entry.changefreq is None

        entry = self.sitemap.SitemapEntry(HOST + '/', priority=0.25, last_modified=datetime(2016, 1, 2, 3, 4, 5),
            change_frequency='weekly')
        assert entry.change_frequency is self.sitemap.ChangeFrequency.WEEKLY
        assert entry.changefreq == 'weekly'
        assert entry.lastmod == '2016-01-02T03:04:05+00:00'

        # zero is a real priority
        entry = self.sitemap.SitemapEntry(HOST + '/', priority=0)
        assert entry.formatted_priority == '0.0'

    def test_invalid(self):
        self.assertRaises(ValueError, self.sitemap.SitemapEntry, '/relative')
        self.assertRaises(ValueError, self.sitemap.SitemapEntry, HOST + '/', priority=1.1)
        self.assertRaises(ValueError, self.sitemap.SitemapEntry, HOST + '/', priority=-0.1)
        self.assertRaises(ValueError, self.sitemap.SitemapEntry, HOST + '/', change_frequency='fortnightly')

    def test_immutable(self):
        entry = self.sitemap.SitemapEntry(HOST + '/')
        try:
            entry.url = HOST + '/other'
        except AttributeError:
            pass
        else:
            assert False


class TestCollectEntries(BaseSitemapTestCase):

    def test_default(self):
        entries = self.makeAssembler().collectEntries()
        assert [entry.url for entry in entries] == [HOST + '/', HOST + '/about', HOST + '/contact']
        assert [entry.priority for entry in entries] == [1.0, 0.9, 0.9]
        assert not self.logger.warnings

    def test_sources(self):
        entries = self.makeAssembler(sources=[self.pageSource(2)]).collectEntries()
        assert len(entries) == 5
        assert entries[3].url == HOST + '/page/0'
        assert entries[4].url == HOST + '/page/1'

    def test_badRoute(self):
        # a route that can't be resolved is skipped with a warning, the rest still make it in
        routes = [
            self.sitemap.SitemapRoute('home', priority=1.0),
            self.sitemap.SitemapRoute('missing', priority=0.5),
            self.sitemap.SitemapRoute('about', priority=2.0), # invalid priority
            self.sitemap.SitemapRoute('contact'),
        ]
        entries = self.makeAssembler(routes=routes).collectEntries()
        assert [entry.url for entry in entries] == [HOST + '/', HOST + '/contact']
        assert len(self.logger.warnings) == 2
        assert 'missing' in self.logger.warnings[0]
        assert 'about' in self.logger.warnings[1]

    def test_badSource(self):
        def source():
            yield self.sitemap.SitemapRoute('page', args=(1,))
            raise RuntimeError('database went away' + UCHAR)

        entries = self.makeAssembler(routes=[], sources=[source]).collectEntries()
        assert [entry.url for entry in entries] == [HOST + '/page/1']
        assert len(self.logger.warnings) == 1
        assert 'database went away' in self.logger.warnings[0]


class TestGetDocument(BaseSitemapTestCase):

    def test_single(self):
        assembler = self.makeAssembler()
        xml = assembler.getDocument()

        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
        assert countTags(xml, 'url') == 3

        # in order with their priorities
        home = xml.index('<loc>' + HOST + '/</loc><priority>1.0</priority>')
        about = xml.index('<loc>' + HOST + '/about</loc><priority>0.9</priority>')
        contact = xml.index('<loc>' + HOST + '/contact</loc><priority>0.9</priority>')
        assert home < about < contact

        assert assembler.getDocument(0) == xml
        assert assembler.getDocument(1) is None
        assert assembler.getDocument(-1) is None

    def test_optionalFields(self):
        routes = [self.sitemap.SitemapRoute('home', priority=0.8, change_frequency='daily',
            last_modified=datetime(2016, 1, 2, 3, 4, 5))]
        xml = self.makeAssembler(routes=routes).getDocument()
        assert '<lastmod>2016-01-02T03:04:05+00:00</lastmod>' in xml
        assert '<changefreq>daily</changefreq>' in xml
        assert '<priority>0.8</priority>' in xml

        # nothing optional is rendered when it isn't set
        self.cache.clear()
        xml = self.makeAssembler(routes=[self.sitemap.SitemapRoute('home')]).getDocument()
        assert '<lastmod>' not in xml
        assert '<changefreq>' not in xml
        assert '<priority>' not in xml

    def test_escaping(self):
        def source():
            yield self.sitemap.SitemapRoute('page', args=('a&b',))

        xml = self.makeAssembler(routes=[], sources=[source]).getDocument()
        assert '<loc>' + HOST + '/page/a&amp;b</loc>' in xml

    def test_empty(self):
        xml = self.makeAssembler(routes=[]).getDocument()
        assert '<urlset' in xml
        assert countTags(xml, 'url') == 0

    def test_index(self):
        # 3 default routes plus 7 pages, 4 per document
        assembler = self.makeAssembler(sources=[self.pageSource(7)], max_entries=4)
        xml = assembler.getDocument()

        assert '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">' in xml
        assert countTags(xml, 'sitemap') == 3
        for i in range(1, 4):
            assert '<loc>' + HOST + '/sitemap.xml?index=' + str(i) + '</loc>' in xml

        assert assembler.getDocument(0) == xml
        assert countTags(assembler.getDocument(1), 'url') == 4
        assert countTags(assembler.getDocument(2), 'url') == 4
        assert countTags(assembler.getDocument(3), 'url') == 2
        assert assembler.getDocument(4) is None

        # the entries stay in order across documents
        assert '<loc>' + HOST + '/</loc>' in assembler.getDocument(1)
        assert '<loc>' + HOST + '/page/6</loc>' in assembler.getDocument(3)

    def test_exactlyFull(self):
        assembler = self.makeAssembler(routes=[], sources=[self.pageSource(4)], max_entries=4)
        assert countTags(assembler.getDocument(), 'url') == 4
        assert assembler.getDocument(1) is None

    def test_protocolLimit(self):
        count = self.sitemap.MAX_SITEMAP_ENTRIES + 1
        assembler = self.makeAssembler(routes=[], sources=[self.pageSource(count)])
        xml = assembler.getDocument()
        assert countTags(xml, 'sitemap') == int(math.ceil(count / float(self.sitemap.MAX_SITEMAP_ENTRIES)))
        assert countTags(assembler.getDocument(1), 'url') == self.sitemap.MAX_SITEMAP_ENTRIES
        assert countTags(assembler.getDocument(2), 'url') == 1


class TestCaching(BaseSitemapTestCase):

    def test_cached(self):
        assembler = self.makeAssembler()
        first = assembler.getDocument()
        calls = self.url_calls
        assert calls == 3

        # the second call comes straight from the cache
        assert assembler.getDocument() == first
        assert self.url_calls == calls

        # as does a brand new assembler sharing the same cache
        assert self.makeAssembler().getDocument() == first
        assert self.url_calls == calls

        found, documents = self.cache.tryGet(self.sitemap.SITEMAP_CACHE_KEY)
        assert found
        assert documents == [first]

    def test_expiry(self):
        assembler = self.makeAssembler(sliding_expiration=60)
        first = assembler.getDocument()

        # regular access keeps the cache alive
        self.clock.advance(50)
        assembler.getDocument()
        self.clock.advance(50)
        assembler.getDocument()
        assert self.url_calls == 3

        # a full window without access regenerates, and the result is identical
        self.clock.advance(61)
        assert assembler.getDocument() == first
        assert self.url_calls == 6

    def test_cacheReadError(self):
        cache = mock.Mock()
        cache.tryGet.side_effect = self.cache_module.CacheError('down')
        assembler = self.sitemap.SitemapAssembler(self.url_for, self.logger, cache, 60)

        xml = assembler.getDocument()
        assert countTags(xml, 'url') == 3
        assert not cache.set.called
        assert len(self.logger.warnings) == 1

    def test_cacheWriteError(self):
        cache = mock.Mock()
        cache.tryGet.return_value = (False, None)
        cache.set.side_effect = self.cache_module.CacheError('down')
        assembler = self.sitemap.SitemapAssembler(self.url_for, self.logger, cache, 60)

        xml = assembler.getDocument()
        assert countTags(xml, 'url') == 3
        cache.set.assert_called_once_with(self.sitemap.SITEMAP_CACHE_KEY, [xml], sliding_expiration=60)
        assert len(self.logger.warnings) == 1


class TestCorruptCache(BaseSitemapTestCase):

    def setUp(self):
        super(TestCorruptCache, self).setUp()
        self.client = mock.Mock()
        self.cache = self.cache_module.RedisCache(self.client, prefix='test:')

    def test_invalidValue(self):
        # anything other than a non-empty list of documents is thrown away and rebuilt
        for value in ['"xml"', 'null', '[]', '[1, 2]', '{"a": "b"}']:
            self.client.reset_mock()
            self.logger.warnings = []
            self.client.get.return_value = ('{"sliding": 60, "value": ' + value + '}').encode('utf8')

            xml = self.makeAssembler().getDocument()
            assert countTags(xml, 'url') == 3, value
            assert self.makeAssembler().getDocument(0) == xml, value
            assert len(self.logger.warnings) == 2, value

            # the bad entry gets replaced with a good one
            args, kwargs = self.client.set.call_args
            assert args[0] == 'test:' + self.sitemap.SITEMAP_CACHE_KEY

    def test_undecodable(self):
        self.client.get.return_value = b'\xff\xfe'
        xml = self.makeAssembler().getDocument()
        assert countTags(xml, 'url') == 3
        assert 'Sitemap cache unavailable' in self.logger.warnings[0]

    def test_timeout(self):
        # a backend that stops answering times out and the sitemap is generated without the cache
        self.client.get.side_effect = redis.TimeoutError('Timeout reading from socket')
        xml = self.makeAssembler().getDocument()
        assert countTags(xml, 'url') == 3
        assert not self.client.set.called
        assert 'Timeout reading from socket' in self.logger.warnings[0]
