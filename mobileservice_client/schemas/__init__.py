"""
Mobile service client schema definitions

This package also contains the ``config`` module, but it's not
exported by default, since it's only used by the settings loader.
"""

from .identifiers import *
