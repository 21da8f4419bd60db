"""ride2gather API: rider accounts, credentials and profiles.

The ASGI application lives in ``ride2gather.main``; the account and profile
logic it serves lives in ``ride2gather.crud``.
"""

__version__ = "0.1.0"
