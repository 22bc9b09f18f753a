"""
Test suite for runtime configuration.

This module tests loading RuntimeConfig from environment variables,
validation of bad values, and the process-wide active configuration.
"""

import unittest

from rill.config import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_ENCODING,
    DEFAULT_REPR_LIMIT,
    RuntimeConfig,
    check_encoding,
    get_config,
    load_config,
    set_config,
)


class TestRuntimeConfig(unittest.TestCase):
    def test_defaults(self):
        config = load_config({})
        self.assertEqual(config.buffer_size, DEFAULT_BUFFER_SIZE)
        self.assertEqual(config.encoding, DEFAULT_ENCODING)
        self.assertEqual(config.repr_limit, DEFAULT_REPR_LIMIT)

    def test_environment_overrides(self):
        config = RuntimeConfig.load(
            {
                "RILL_BUFFER_SIZE": "16",
                "RILL_ENCODING": "latin-1",
                "RILL_REPR_LIMIT": "3",
                "UNRELATED": "x",
            }
        )
        self.assertEqual(config.buffer_size, 16)
        self.assertEqual(config.encoding, "latin-1")
        self.assertEqual(config.repr_limit, 3)
        self.assertNotIn("UNRELATED", config._raw)

    def test_invalid_values(self):
        for environ in (
            {"RILL_BUFFER_SIZE": "big"},
            {"RILL_BUFFER_SIZE": "0"},
            {"RILL_REPR_LIMIT": "-2"},
            {"RILL_ENCODING": "no-such-codec"},
        ):
            with self.subTest(environ=environ):
                with self.assertRaises(ValueError):
                    RuntimeConfig.load(environ)

    def test_direct_validation(self):
        with self.assertRaises(ValueError):
            RuntimeConfig(buffer_size=0)

    def test_check_encoding(self):
        self.assertEqual(check_encoding("latin-1"), "latin-1")
        with self.assertRaises(ValueError):
            check_encoding("no-such-codec")


class TestActiveConfig(unittest.TestCase):
    def tearDown(self):
        set_config(None)

    def test_set_and_get(self):
        config = RuntimeConfig(buffer_size=32)
        set_config(config)
        self.assertIs(get_config(), config)

    def test_reset_reloads(self):
        set_config(RuntimeConfig(buffer_size=32))
        set_config(None)
        self.assertIsInstance(get_config(), RuntimeConfig)
        self.assertIs(get_config(), get_config())


if __name__ == "__main__":
    unittest.main()
