"""
Mobile service client unit tests
"""

import unittest
from .test_cli import CommandLineTests
from .test_identifiers import IdentifierNormalizationTests, IdentifierValidationTests
from .test_settings import LoggingTests, SettingsTests
from .test_system_properties import EntityPatchTests, ETagTests, SystemPropertyTests
from .test_tables import CallbackTests, DeleteTests, InsertTests, LookupAndReadTests, TableSetupTests, UpdateTests
from .test_transport import AiohttpTransportTests, RequestDescriptorTests, RequestsTransportTests


TEST_CLASSES = [
    AiohttpTransportTests,
    CallbackTests,
    CommandLineTests,
    DeleteTests,
    EntityPatchTests,
    ETagTests,
    IdentifierNormalizationTests,
    IdentifierValidationTests,
    InsertTests,
    LoggingTests,
    LookupAndReadTests,
    RequestDescriptorTests,
    RequestsTransportTests,
    SettingsTests,
    SystemPropertyTests,
    TableSetupTests,
    UpdateTests,
]


def get_suite() -> unittest.TestSuite:
    suite = unittest.TestSuite()
    for cls in TEST_CLASSES:
        for fixture in filter(lambda f: f.startswith("test_"), dir(cls)):
            suite.addTest(cls(fixture))
    return suite
