from __future__ import annotations

from livestreams.services.errors import (
    ProviderError,
    UnknownChannelError,
    UnknownVideoError,
    YouTubeError,
)


def test_errors_share_base_class():
    assert issubclass(UnknownChannelError, YouTubeError)
    assert issubclass(UnknownVideoError, YouTubeError)
    assert issubclass(ProviderError, YouTubeError)


def test_provider_error_keeps_status_and_body():
    error = ProviderError(500, "backend error")

    assert error.status_code == 500
    assert error.body == "backend error"
    assert "HTTP 500" in str(error)


def test_admin_message_includes_hint():
    message = ProviderError(403, "quotaExceeded").to_admin_message()

    assert "YouTube API request failed" in message
    assert "quota" in message


def test_unknown_channel_message():
    error = UnknownChannelError("UCnope")

    assert error.channel_id == "UCnope"
    assert "UCnope" in error.to_admin_message()


def test_admin_message_escapes_html_body():
    message = ProviderError(502, "<!DOCTYPE html><html>Bad Gateway</html>").to_admin_message()

    assert "<html>" not in message
    assert "&lt;html&gt;Bad Gateway&lt;/html&gt;" in message
    assert message.startswith("🔑 <b>Error: YouTube API request failed</b>")


def test_admin_message_escapes_user_supplied_id():
    message = UnknownChannelError("<b>UC").to_admin_message()

    assert "'&lt;b&gt;UC'" in message


def test_provider_error_truncates_long_body():
    error = ProviderError(500, "x" * 5000)

    assert error.body == "x" * 5000
    assert len(error.to_admin_message()) < 1000
    assert str(error).endswith("...")
