"""Unit tests for settings validation."""

import pytest
from pydantic import ValidationError

from chatstate.core.config import Settings


class TestSettings:
    def test_max_sessions_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(MAX_SESSIONS=0)

    def test_max_sessions_of_one_is_allowed(self):
        assert Settings(MAX_SESSIONS=1).MAX_SESSIONS == 1
