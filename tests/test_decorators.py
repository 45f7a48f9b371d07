import logging

import pytest
from selenium.common.exceptions import WebDriverException

from visible_copy.utils.decorators import error_handler


class Mirror:
    def __init__(self, error=None):
        self.error = error

    @error_handler
    def render(self):
        if self.error:
            raise self.error
        return True


def test_result_passes_through():
    assert Mirror().render() is True


def test_browser_failure_is_logged_and_absorbed(caplog):
    with caplog.at_level(logging.ERROR):
        assert Mirror(WebDriverException("javascript error: root is null\n(Session info)")).render() is None

    assert "Mirror.render failed in page: javascript error: root is null" in caplog.text
    assert "Session info" not in caplog.text


def test_other_errors_propagate():
    with pytest.raises(KeyError):
        Mirror(KeyError("missing")).render()
