"""Cache configuration.

The token store (password reset tokens, upload rate limits) lives in
the cache selected by ``TOKEN_STORE_CACHE_ALIAS`` so it can be moved
to Redis when the app runs as several processes.
"""

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'default',
    },
    'tokens': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'tokens',
    },
}

TOKEN_STORE_CACHE_ALIAS = 'tokens'
