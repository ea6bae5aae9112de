"""Tests for diffnote.cli.utils module."""

import logging

from diffnote.cli.utils import setup_logging, valid_providers_text


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_verbose_enables_debug(self, mocker):
        basic_config = mocker.patch("diffnote.cli.utils.logging.basicConfig")

        setup_logging(verbose=True)

        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_default_is_warning(self, mocker):
        basic_config = mocker.patch("diffnote.cli.utils.logging.basicConfig")

        setup_logging()

        assert basic_config.call_args.kwargs["level"] == logging.WARNING


def test_valid_providers_text():
    assert valid_providers_text() == "anthropic, openai, google, cohere, groq, openrouter"
