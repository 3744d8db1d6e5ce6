"""
Tests for RemoteSession.
"""

from unittest.mock import MagicMock

import pytest

from conftest import RecordingTransport, json_response
from driverwire.capabilities import Capabilities
from driverwire.errors import InvalidSessionIdError, NoSuchElementError
from driverwire.models import Dialect
from driverwire.remote.codec import W3CHttpResponseCodec
from driverwire.remote.session import RemoteSession


@pytest.fixture
def w3c_transport() -> RecordingTransport:
    """Create a transport primed with a W3C new-session response."""
    return RecordingTransport(
        json_response({"value": {"sessionId": "abc123", "capabilities": {"browserName": "firefox"}}})
    )


class TestCreate:
    """Tests for opening a session."""

    def test_create(self, w3c_transport):
        """Test that create negotiates through the handshake."""
        session = RemoteSession.create(w3c_transport, Capabilities.firefox())

        assert session.session_id == "abc123"
        assert session.dialect == Dialect.W3C
        assert session.capabilities.browser_name == "firefox"
        assert not session.closed


class TestExecute:
    """Tests for executing commands."""

    def test_session_id_substituted(self, w3c_transport):
        """Test that :sessionId is replaced in command paths."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(json_response({"value": "Example Domain"}))

        title = session.execute("GET", "/session/:sessionId/title")

        assert title == "Example Domain"
        request = w3c_transport.requests[-1]
        assert request.method == "GET"
        assert request.path == "/session/abc123/title"
        assert request.body == b""

    def test_post_sends_params(self, w3c_transport):
        """Test that POST parameters become the JSON body."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(json_response({"value": None}))

        session.execute("post", "/session/:sessionId/url", {"url": "https://example.com"})

        assert w3c_transport.requests[-1].method == "POST"
        assert w3c_transport.payload() == {"url": "https://example.com"}

    def test_post_without_params(self, w3c_transport):
        """Test that a POST without parameters sends an empty object."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(json_response({"value": None}))

        session.execute("POST", "/session/:sessionId/refresh")
        assert w3c_transport.payload() == {}

    def test_error_raised(self, w3c_transport):
        """Test that decoded errors are raised."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(
            json_response({"value": {"error": "no such element", "message": "nope"}}, status=404)
        )

        with pytest.raises(NoSuchElementError, match="nope"):
            session.execute("POST", "/session/:sessionId/element", {"using": "css selector", "value": "#x"})

    def test_element_converter(self, w3c_transport):
        """Test that values pass through the codec's converter."""
        codec = W3CHttpResponseCodec(element_converter=lambda v: ("element", v))
        session = RemoteSession.create(w3c_transport, {}, codec=codec)
        w3c_transport.queue(json_response({"value": {"element-6066-11e4-a52e-4f735466cecf": "e1"}}))

        value = session.execute("POST", "/session/:sessionId/element", {})
        assert value == ("element", {"element-6066-11e4-a52e-4f735466cecf": "e1"})


class TestQuit:
    """Tests for quitting a session."""

    def test_quit_deletes_once(self, w3c_transport):
        """Test that quit sends one DELETE and is idempotent."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(json_response({"value": None}))

        session.quit()
        session.quit()

        deletes = [r for r in w3c_transport.requests if r.method == "DELETE"]
        assert len(deletes) == 1
        assert deletes[0].path == "/session/abc123"
        assert session.closed

    def test_execute_after_quit(self, w3c_transport):
        """Test that commands are rejected after quit."""
        session = RemoteSession.create(w3c_transport, {})
        w3c_transport.queue(json_response({"value": None}))
        session.quit()

        with pytest.raises(InvalidSessionIdError):
            session.execute("GET", "/session/:sessionId/title")

    def test_context_manager(self, w3c_transport):
        """Test that leaving the block quits and closes owned resources."""
        on_quit = MagicMock()
        w3c_transport.queue(json_response({"value": None}))

        with RemoteSession.create(w3c_transport, {}, close_transport=True, on_quit=on_quit) as session:
            assert not session.closed

        assert session.closed
        assert w3c_transport.closed
        on_quit.assert_called_once()

    def test_on_quit_runs_when_delete_fails(self, w3c_transport):
        """Test that cleanup happens even if the remote end errors."""
        on_quit = MagicMock()
        session = RemoteSession.create(w3c_transport, {}, on_quit=on_quit)
        w3c_transport.queue(
            json_response({"value": {"error": "invalid session id", "message": "gone"}}, status=404)
        )

        with pytest.raises(InvalidSessionIdError):
            session.quit()
        on_quit.assert_called_once()
        assert not w3c_transport.closed
