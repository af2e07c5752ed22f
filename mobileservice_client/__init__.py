"""
Mobile service client library for remote tabular data services
"""

from .version import __version__
from .client import MobileServiceClient
from .tables import MobileServiceTable, SystemProperty
