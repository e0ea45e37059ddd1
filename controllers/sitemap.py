import re

from controllers.base import BaseController
from config.constants import SITEMAP_CACHE_SECONDS
from sitemap import SitemapAssembler

# plain ASCII digits only, int() on its own also takes spaces, signs, underscores and other scripts' digits
INDEX_RE = re.compile(r'-?[0-9]+')


class SitemapController(BaseController):
    """ handles generating a sitemap, or a sitemap index if the site has too many pages for one """

    def get(self):
        index = self.get_argument('index', None, strip=False)
        if index is not None:
            if not INDEX_RE.fullmatch(index):
                return self.renderError(404)
            index = int(index)

        assembler = SitemapAssembler(self.absoluteUrl, self.logger, self.cache, SITEMAP_CACHE_SECONDS,
            sources=self.settings.get('sitemap_sources'))

        xml = assembler.getDocument(index)
        if xml is None:
            return self.renderError(404)

        self.renderXML(xml)
