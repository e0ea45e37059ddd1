from controllers.base import BaseController


class ErrorController(BaseController):
    """ handles any page that falls through the rest of the routes in main """

    def get(self, *args):

        self.renderError(404)
