# the base file and class for all controllers to inherit from

# python imports
import http.client
import logging

# library imports
from tornado import web

# local imports
import helpers


class BaseController(web.RequestHandler):

    @property
    def logger(self):
        return logging.getLogger('tornado.application')

    @property
    def cache(self):
        # shared by every request, set up once when the application is created
        return self.settings['cache']

    def absoluteUrl(self, name, *args):
        # reverse_url raises a KeyError for a route name that doesn't exist
        site_url = self.settings.get('site_url') or self.request.protocol + "://" + self.request.host
        return site_url + self.reverse_url(name, *args)

    def compileTemplate(self, filename, **kwargs):

        # add some standard variables
        kwargs["h"] = helpers
        kwargs["page_title"] = kwargs.get("page_title", "")

        return self.render_string(filename, **kwargs)

    def securityHeaders(self):
        # uncomment to enable HSTS - note that it can have permanent consequences for your domain
        # self.set_header('Strict-Transport-Security', 'max-age=86400; includeSubDomains')

        # this is purposefully strict by default
        # you can change site-wide or add logic for different environments or actions as needed
        # see https://developers.google.com/web/fundamentals/security/csp/
        CSP = "default-src 'self'; form-action 'self'; "
        CSP += "base-uri 'none'; frame-ancestors 'none'; object-src 'none';"
        self.set_header('Content-Security-Policy', CSP)

    def renderTemplate(self, filename, **kwargs):
        if self.request.method != 'HEAD':
            self.securityHeaders()
            # could have compile call `self.render` but it looks like a lot of extra processing we don't need
            self.write(self.compileTemplate(filename, **kwargs))

    def renderError(self, status_int, stacktrace=None):
        self.set_status(status_int)
        page_title = "Error " + str(status_int) + ": " + http.client.responses[status_int]
        self.renderTemplate("error.html", stacktrace=stacktrace, page_title=page_title)

    def renderXML(self, data):
        self.set_header('Content-Type', 'application/xml; charset=UTF-8')
        if self.request.method != 'HEAD':
            self.write(data)

    def head(self, *args):
        # support HEAD requests in a generic way, the render methods skip the body for these
        # controllers without a `get` fall through to tornado's default, which is a 405
        return self.get(*args)

    # this overrides the base class for handling things like 500 errors
    def write_error(self, status_code, exc_info=None, **kwargs):
        # if this is development, then include a stack trace
        stacktrace = None
        if exc_info and helpers.debug():
            import traceback
            stacktrace = ''.join(traceback.format_exception(*exc_info))

        self.renderError(status_code, stacktrace=stacktrace)
