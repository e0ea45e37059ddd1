# view models for the account management pages
# these only carry data to the templates, the identity provider is what actually fills them in


class UserLoginInfo(object):
    """ an external login (Google, Facebook, etc.) that's linked to an account """

    def __init__(self, login_provider, provider_key, provider_display_name=None):
        self.login_provider = login_provider
        self.provider_key = provider_key
        self.provider_display_name = provider_display_name or login_provider


class AuthenticationDescription(object):
    """ an external login scheme the site supports """

    def __init__(self, authentication_scheme, display_name=None):
        self.authentication_scheme = authentication_scheme
        self.display_name = display_name or authentication_scheme


class ManageLoginsViewModel(object):

    def __init__(self, current_logins=None, other_logins=None, has_password=False):
        self.current_logins = current_logins or []
        self.other_logins = other_logins or []
        self.has_password = has_password

    @property
    def can_remove_login(self):
        # never let someone remove their only way to sign in
        return self.has_password or len(self.current_logins) > 1

    @classmethod
    def fromLogins(cls, current_logins, schemes, has_password=False):
        linked = set(login.login_provider for login in current_logins)
        other_logins = [scheme for scheme in schemes if scheme.authentication_scheme not in linked]
        return cls(current_logins=list(current_logins), other_logins=other_logins, has_password=has_password)


class SelectListItem(object):

    def __init__(self, text, value=None, selected=False):
        self.text = text
        self.value = value is None and text or value
        self.selected = selected


class ConfigureTwoFactorViewModel(object):

    def __init__(self, selected_provider=None, providers=None):
        self.selected_provider = selected_provider
        self.providers = providers or []

    @classmethod
    def fromProviders(cls, providers, selected_provider=None):
        items = [SelectListItem(provider, selected=provider == selected_provider) for provider in providers]
        return cls(selected_provider=selected_provider, providers=items)
