import inspect
import os
from datetime import datetime

from google.cloud import datastore

from config.constants import DATASTORE_EMULATOR_HOST
import helpers

if helpers.debug():
    os.environ.setdefault('DATASTORE_EMULATOR_HOST', DATASTORE_EMULATOR_HOST)

# NOTE if you want to do different namespaces you can pass one to the client here and it'll use it by default
# https://googleapis.github.io/google-cloud-python/latest/datastore/client.html
_client = None


def getClient():
    # created on first use so that importing the models doesn't need credentials or a running emulator
    global _client
    if _client is None:
        _client = datastore.Client(project=os.getenv('GOOGLE_CLOUD_PROJECT', 'test'))
    return _client


class BaseProperty(object):

    def validate(self, value):
        raise NotImplementedError


class BooleanProperty(BaseProperty):

    def __init__(self, default=False):
        self.default = default

    def validate(self, value):
        return isinstance(value, bool)


class DateTimeProperty(BaseProperty):

    def __init__(self, auto_now_add=False, auto_now=False, required=False):
        self.auto_now_add = auto_now_add
        self.auto_now = auto_now
        self.required = required

    def validate(self, value):
        return isinstance(value, datetime) or (not self.required and value is None)

    @property
    def default(self):
        if self.auto_now_add:
            return datetime.utcnow()
        return None


class StringProperty(BaseProperty):

    def __init__(self, required=False, choices=None):
        self.required = required
        self.choices = choices

    def validate(self, value):
        if not isinstance(value, str) and value is not None:
            return False
        if self.required and not value:
            return False
        if self.choices and value is not None and value not in self.choices:
            return False
        return True


class BaseModel(object):

    # used for backups on all model types
    created_dt = DateTimeProperty(auto_now_add=True)
    modified_dt = DateTimeProperty(auto_now=True)

    def __init__(self, entity, create=False, **kwargs):
        self.entity = entity
        self.key = entity.key

        if create:
            self._updateEntity(create=create, **kwargs)

        self._updateProps()

    def _updateEntity(self, create=False, **kwargs):
        unknown = set(kwargs) - set(self.__class__.properties())
        if unknown:
            raise ValueError('Unknown properties for "{}": {}'.format(self.__class__.__name__,
                ', '.join(sorted(unknown))))

        data = {}
        for prop in self.__class__.properties():
            value = None
            prop_object = getattr(self.__class__, prop)
            if prop in kwargs:
                value = kwargs[prop]
                if not prop_object.validate(value):
                    raise ValueError('"{}" is not a valid "{}"'.format(prop, prop_object.__class__.__name__))
            elif hasattr(prop_object, 'auto_now') and prop_object.auto_now:
                # this is above create because it applies to both create and update
                value = datetime.utcnow()
            elif create:
                if hasattr(prop_object, 'default'):
                    value = prop_object.default
            else:
                # default to any pre-existing value
                value = self.entity.get(prop, None)

            data[prop] = value

        self.entity.update(data)

    def _updateProps(self):
        for prop in self.__class__.properties():
            value = self.entity.get(prop, None)
            if isinstance(value, datetime):
                # the datastore hands back datetimes with a UTC tzinfo attached
                # we correct for that here so that you can add, subtract, etc. without having to manipulate
                value = value.replace(tzinfo=None)
            setattr(self, prop, value)

    @property
    def slug(self):
        return str(self.key.id)

    def put(self):
        getClient().put(self.entity)
        self.key = self.entity.key

    def update(self, **kwargs):
        self._updateEntity(**kwargs)
        self._updateProps()

    @classmethod
    def create(cls, parent_key=None, **kwargs):
        entity = datastore.Entity(getClient().key(cls.__name__, parent=parent_key))
        return cls(entity, create=True, **kwargs)

    @classmethod
    def slugToKey(cls, slug):
        return getClient().key(cls.__name__, int(slug))

    @classmethod
    def getBySlug(cls, slug):
        try:
            key = cls.slugToKey(slug)
        except ValueError:
            return None
        entity = getClient().get(key)
        return entity and cls(entity) or None

    @classmethod
    def properties(cls):
        # inspect.getmembers returns a tuple of (name, type) but we only want the name
        return [prop[0] for prop in inspect.getmembers(cls, lambda prop: isinstance(prop, BaseProperty))]


class Profile(BaseModel):
    """ personal details that go with an account """

    SEXES = ['female', 'male', 'other']

    sex = StringProperty(choices=SEXES)
    date_of_birth = DateTimeProperty()
    social_security = StringProperty()
    pic_file = StringProperty()
    is_looking_for_job = BooleanProperty(default=False)

    @property
    def masked_social_security(self):
        # only ever display the last four digits
        if not self.social_security:
            return ''
        return '***-**-' + self.social_security[-4:]

    def age(self, today=None):
        if not self.date_of_birth:
            return None
        today = today or datetime.utcnow()
        born = self.date_of_birth
        return today.year - born.year - ((today.month, today.day) < (born.month, born.day))
