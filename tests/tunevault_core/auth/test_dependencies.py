"""Unit tests for auth dependencies."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from tunevault_core.auth.dependencies import get_auth_context, get_optional_auth_context
from tunevault_core.domain.auth import AuthContext, Principal
from tunevault_core.domain.exceptions import MissingCredentialError


class TestGetOptionalAuthContext:
    def test_returns_context_from_request_state(self, auth_context):
        mock_request = MagicMock()
        mock_request.state.auth = auth_context

        assert get_optional_auth_context(mock_request) is auth_context

    def test_returns_none_when_state_has_no_auth(self):
        mock_request = MagicMock()
        mock_request.state = MagicMock(spec=[])  # No 'auth' attribute

        assert get_optional_auth_context(mock_request) is None


class TestGetAuthContext:
    """Tests for get_auth_context dependency."""

    def test_returns_auth_context(self, auth_context):
        assert get_auth_context(auth_context) is auth_context

    def test_raises_401_when_not_authenticated(self):
        with pytest.raises(MissingCredentialError) as exc_info:
            get_auth_context(None)

        assert exc_info.value.status_code == 401
        assert exc_info.value.code == "CREDENTIAL_MISSING"


# --- Fixtures ---


@pytest.fixture
def auth_context():
    return AuthContext(
        principal=Principal(
            subject_id="user-1",
            display_label="user@example.com",
            roles=frozenset(["authenticated"]),
        ),
        authenticated_at=datetime.now(timezone.utc),
        request_id="req-123",
    )
