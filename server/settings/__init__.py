"""Main settings entrypoint.

Settings are split into components with ``django-split-settings``.
The environment-specific file is selected by the ``DJANGO_ENV``
variable (``development`` by default).
"""

import django_stubs_ext
from split_settings.tools import include, optional

from server.settings.components import config

# Monkeypatching Django, so stubs will work for all generics,
# see: https://github.com/typeddjango/django-stubs/tree/master/ext
django_stubs_ext.monkeypatch()

# Managing environment via `DJANGO_ENV` variable:
_ENV = config('DJANGO_ENV', default='development')

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/caches.py',
    'components/storages.py',
    'components/files.py',
    'components/tasks.py',

    # Select the right env:
    f'environments/{_ENV}.py',

    # Optionally override some settings:
    optional('environments/local.py'),
)

# Include settings:
include(*_base_settings)
