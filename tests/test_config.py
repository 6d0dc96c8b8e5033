import json
import logging
import os
import tempfile
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

from trackmymatch.config import DATA_DIR_ENV, resolve_store_config
from trackmymatch.logging_setup import setup_logging
from trackmymatch.match_types import STORAGE_KEY, StoreConfig


class StoreConfigTest(TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop(DATA_DIR_ENV, None)
            cfg = resolve_store_config()
        self.assertEqual(cfg.data_dir, "data/trackmymatch")
        self.assertEqual(cfg.storage_key, STORAGE_KEY)
        self.assertTrue(cfg.autosave)
        self.assertEqual(cfg.log_level, "WARNING")

    def test_passes_through_config_object(self):
        cfg = StoreConfig(data_dir="x")
        self.assertIs(resolve_store_config(cfg), cfg)

    def test_env_placeholders_and_override(self):
        with patch.dict(os.environ, {"TMM_HOME": "/srv/tmm", DATA_DIR_ENV: "/var/tmm"}):
            expanded = resolve_store_config({"data_dir": "${TMM_HOME}/store", "autosave": "no", "log_level": "debug"})
            defaulted = resolve_store_config({})
        self.assertEqual(expanded.data_dir, "/srv/tmm/store")
        self.assertFalse(expanded.autosave)
        self.assertEqual(expanded.log_level, "DEBUG")
        self.assertEqual(defaulted.data_dir, "/var/tmm")

    def test_rejects_bad_input(self):
        with self.assertRaises(ValueError):
            resolve_store_config(["not", "a", "dict"])
        with self.assertRaises(ValueError):
            resolve_store_config({"log_level": "LOUD"})


class LoggingSetupTest(TestCase):
    def tearDown(self):
        logger = logging.getLogger("trackmymatch")
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_json_lines_to_file_without_duplicate_handlers(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "store.log"
            setup_logging("INFO", str(log_file))
            logger = setup_logging("INFO", str(log_file))
            self.assertEqual(len(logger.handlers), 1)

            logging.getLogger("trackmymatch.store").info("recorded %s", "fixture-1", extra={"version": 3})
            logger.handlers[0].flush()
            record = json.loads(log_file.read_text().strip().splitlines()[-1])
            self.tearDown()

        self.assertEqual(record["level"], "INFO")
        self.assertEqual(record["logger"], "trackmymatch.store")
        self.assertEqual(record["message"], "recorded fixture-1")
        self.assertEqual(record["version"], 3)
