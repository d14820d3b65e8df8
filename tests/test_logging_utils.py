import logging
import unittest

from utils import logging_utils
from utils.logging_utils import (
    EnsureTagFilter,
    MaxLevelFilter,
    build_logging_config,
    coarse_location,
    get_tagged_logger,
)


class _ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        self.records.append(record)


class TestLoggingUtils(unittest.TestCase):
    def test_build_logging_config_has_expected_handlers_and_filters(self):
        cfg = build_logging_config(job_name="sunset_walk")
        self.assertIn("stdout", cfg["handlers"])
        self.assertIn("stderr", cfg["handlers"])
        self.assertEqual(cfg["handlers"]["stderr"]["level"], "WARNING")
        self.assertEqual(cfg["filters"]["job_name"]["job_name"], "sunset_walk")

    def test_get_tagged_logger_injects_tag(self):
        handler = _ListHandler()
        logger = get_tagged_logger("walk.tests", tag="custom_tag")
        base_logger = logger.logger
        base_logger.setLevel(logging.DEBUG)
        base_logger.addHandler(handler)
        base_logger.propagate = False

        logger.info("hello world", extra={"location": coarse_location(1, 2)})

        record = handler.records[-1]
        self.assertEqual(record.tag, "custom_tag")
        self.assertEqual(record.location, "1.0,2.0")

        base_logger.removeHandler(handler)

    def test_tag_defaults_to_last_name_segment(self):
        logger = get_tagged_logger("app.data_sources.sunset_client")
        self.assertEqual(logger.extra["tag"], "sunset_client")

    def test_filters(self):
        record = logging.LogRecord("uvicorn.error", logging.WARNING, __file__, 1, "msg", None, None)
        self.assertTrue(EnsureTagFilter().filter(record))
        self.assertEqual(record.tag, "error")
        self.assertFalse(MaxLevelFilter(logging.INFO).filter(record))

    def test_setup_logging_override_applies_filters(self):
        root = logging.getLogger()
        orig_handlers = root.handlers[:]
        orig_level = root.level
        try:
            logging_utils.setup_logging(level="INFO", job_name="sunset_walk", override_existing=True)
            self.assertTrue(
                any(
                    any(f.__class__.__name__ == "JobNameFilter" for f in h.filters)
                    for h in root.handlers
                )
            )
        finally:
            root.handlers = orig_handlers
            root.setLevel(orig_level)
            logging_utils._CONFIGURED = False  # reset for other tests


class TestCoarseLocation(unittest.TestCase):
    def test_rounds_to_two_places(self):
        self.assertEqual(coarse_location(41.878113, -87.629799), "41.88,-87.63")

    def test_custom_precision(self):
        self.assertEqual(coarse_location(41.878113, -87.629799, places=1), "41.9,-87.6")

    def test_missing_or_bad_values(self):
        self.assertEqual(coarse_location(None, 1.0), "unknown")
        self.assertEqual(coarse_location("north", 1.0), "unknown")


if __name__ == "__main__":
    unittest.main()
