import os

# these have to be set before any app module is imported so debug and testing get detected properly
os.environ['GAE_ENV'] = 'localdev'
os.environ['SERVER_SOFTWARE'] = '(testbed)'
os.environ.pop('REDIS_URL', None)
os.environ.pop('SITE_URL', None)
