"""
Mobile service table operations

The modules of this package implement the rules for identifiers
(``identifiers``), the handling of system properties
(``system_properties``), the ETag transformation (``etag``),
entity patching (``entities``) and the table client itself (``base``).
"""

from .base import MobileServiceTable, TABLES_PATH
from .system_properties import SystemProperty
