"""
Tests for editor options, the exception hierarchy and logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from docugenius.config import EditorOptions
from docugenius.exceptions import (
    ConfigurationError,
    DocuGeniusError,
    LayoutError,
    MalformedPackage,
    OverflowUnresolvable,
    UnsupportedEmbed,
)
from docugenius.utils.logger import add_file_handler, configure_logging, get_logger, set_log_level


class TestEditorOptions:
    """Test cases for EditorOptions."""

    def test_defaults(self):
        """Test A4 defaults."""
        options = EditorOptions()

        assert options.page_width_mm == 210.0
        assert options.page_height_mm == 297.0
        assert options.overflow_epsilon == 1.0
        assert options.image_fallback_extent_emu == (3_000_000, 2_000_000)

    def test_from_mapping(self):
        """Test building options from a mapping."""
        options = EditorOptions.from_mapping({"page_height_mm": 279.4, "max_pagination_ticks": 50})

        assert options.page_height_mm == 279.4
        assert options.max_pagination_ticks == 50

    def test_unknown_option(self):
        """Test that unknown option names are rejected."""
        with pytest.raises(ConfigurationError) as excinfo:
            EditorOptions.from_mapping({"paper": "A4"})

        assert "paper" in str(excinfo.value)

    @pytest.mark.parametrize("values", [
        {"page_height_mm": 0},
        {"overflow_epsilon": -0.5},
        {"default_margin_mm": 120},
        {"max_pagination_ticks": 0},
    ])
    def test_invalid_values(self, values):
        """Test that sizes which cannot produce a page are rejected."""
        with pytest.raises(ConfigurationError):
            EditorOptions(**values)

    def test_to_dict_round_trip(self):
        """Test to_dict/from_mapping."""
        options = EditorOptions(default_font_family="Georgia")

        assert EditorOptions.from_mapping(options.to_dict()).to_dict() == options.to_dict()


class TestExceptions:
    """Test cases for the exception hierarchy."""

    @pytest.mark.parametrize("error_class", [
        MalformedPackage, UnsupportedEmbed, LayoutError, ConfigurationError,
    ])
    def test_common_base(self, error_class):
        """Test that every error derives from DocuGeniusError."""
        assert issubclass(error_class, DocuGeniusError)

    def test_details_in_message(self):
        """Test string formatting with details."""
        assert str(MalformedPackage("Not a ZIP package", "bad header")) == "Not a ZIP package: bad header"
        assert str(LayoutError("Stuck")) == "Stuck"

    def test_overflow_unresolvable(self):
        """Test the overflow error payload."""
        error = OverflowUnresolvable("abc", 12.5)

        assert error.node_id == "abc"
        assert error.overflow == 12.5
        assert "12.5" in str(error)


class TestLogger:
    """Test cases for logging configuration."""

    def test_get_logger(self):
        """Test getting a named logger."""
        assert get_logger("docugenius.test").name == "docugenius.test"

    def test_get_logger_requires_name(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValueError):
            get_logger("")

    def test_configure_logging_plain(self):
        """Test configuring a plain console handler."""
        configure_logging(level="DEBUG", use_rich=False)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_configure_logging_rich(self):
        """Test configuring the rich console handler."""
        configure_logging(level="WARNING")

        assert type(logging.getLogger().handlers[0]).__name__ == "RichHandler"

    def test_invalid_level(self):
        """Test that unknown levels are rejected."""
        with pytest.raises(ValueError):
            configure_logging(level="LOUD")

    def test_file_handler(self, tmp_path):
        """Test adding a rotating file handler."""
        logger = logging.getLogger("docugenius.file_test")
        path = tmp_path / "logs" / "docugenius.log"

        add_file_handler(logger, str(path), level="INFO")
        try:
            logger.warning("written")
            handler = logger.handlers[-1]
            assert isinstance(handler, RotatingFileHandler)
            handler.flush()
            assert "written" in path.read_text()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_set_log_level(self):
        """Test changing the level of the root logger and handlers."""
        configure_logging(level="INFO", use_rich=False)
        set_log_level("ERROR")

        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert all(handler.level == logging.ERROR for handler in root.handlers)
