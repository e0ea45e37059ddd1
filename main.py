# this is the main entry point for the application
import logging

from tornado import web

from config import constants
import cache
import helpers

# logging setup
access_log = logging.getLogger('tornado.access')
access_log.setLevel(logging.INFO)
application_log = logging.getLogger('tornado.application')
application_log.setLevel(logging.INFO)
general_log = logging.getLogger('tornado.general')
general_log.setLevel(logging.INFO)

# URL routes
from controllers import error, index, sitemap, static # NOQA: E402

# routes are named so that the sitemap (and templates) can build URLs for them
handlers = [
    web.url('/', index.IndexController, name='home'),
    web.url('/about', static.StaticController, name='about'),
    web.url('/contact', static.StaticController, name='contact'),
    web.url('/sitemap.xml', sitemap.SitemapController, name='sitemap'),
    # ('/errors/(.*)', static.StaticController), # uncomment to test static error pages
    web.url('/(.*)', error.ErrorController),
]


def makeApp(**settings):
    # pass `cache` to share a specific cache client, `site_url` to override the canonical host,
    # and `sitemap_sources` to add pages to the sitemap
    if 'cache' not in settings:
        settings['cache'] = cache.fromConfig()
    settings.setdefault('site_url', constants.SITE_URL)
    settings.setdefault('debug', helpers.debug())
    # reloading on file changes makes no sense while tests are running
    settings.setdefault('autoreload', settings['debug'] and not helpers.testing())
    return web.Application(handlers=handlers, template_path=constants.VIEWS_PATH, **settings)


app = makeApp()

# call this directly for local development
if __name__ == "__main__":
    from tornado import ioloop
    level = logging.DEBUG
    access_log.setLevel(level)
    application_log.setLevel(level)
    general_log.setLevel(level)
    logging.basicConfig()

    port = 8888
    app.listen(port)
    general_log.info('Server running on port ' + str(port))
    ioloop.IOLoop.current().start()
