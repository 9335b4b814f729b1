"""Tests for the DAVID HTTP/HTML transport."""

from unittest.mock import Mock, patch

import pytest
import requests

from david_pipeline.api_clients.base import DavidClient, HtmlPage
from david_pipeline.config import load_config
from david_pipeline.errors import TransportError


def _response(text="", url="https://david.example.org/page", status_code=200):
    response = Mock()
    response.status_code = status_code
    response.text = text
    response.url = url
    response.raise_for_status = Mock()
    return response


def test_get_page_parses_html():
    """Test that GET responses are parsed into an HtmlPage."""
    client = DavidClient(base_url="https://david.example.org")
    html = "<html><head><script>var x = 1;</script></head><body><form></form></body></html>"

    with patch.object(client.session, "request") as mock_request:
        mock_request.return_value = _response(html, url="https://david.example.org/api.jsp")
        page = client.get_page("https://david.example.org/api.jsp")

    assert isinstance(page, HtmlPage)
    assert page.url == "https://david.example.org/api.jsp"
    assert page.soup.find("script").get_text() == "var x = 1;"
    assert page.soup.find("form") is not None
    mock_request.assert_called_once_with(
        "GET", "https://david.example.org/api.jsp", timeout=30
    )


def test_post_form_sends_data():
    """Test that form data is POSTed with the configured timeout."""
    client = DavidClient(base_url="https://david.example.org", timeout=12)

    with patch.object(client.session, "request") as mock_request:
        mock_request.return_value = _response("<html><body>ok</body></html>")
        page = client.post_form("https://david.example.org/summary.jsp", {"rowids": "1"})

    assert "ok" in page.text
    mock_request.assert_called_once_with(
        "POST",
        "https://david.example.org/summary.jsp",
        timeout=12,
        data={"rowids": "1"},
    )


def test_connection_error_becomes_transport_error():
    """Test that network failures surface as TransportError."""
    client = DavidClient()

    with patch.object(client.session, "request") as mock_request:
        mock_request.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(TransportError) as exc_info:
            client.get_page("https://david.example.org/api.jsp")

    assert exc_info.value.url == "https://david.example.org/api.jsp"
    assert isinstance(exc_info.value.__cause__, requests.ConnectionError)


def test_http_error_becomes_transport_error():
    """Test that HTTP status failures surface as TransportError without retry."""
    client = DavidClient()
    response = _response(status_code=500)
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")

    with patch.object(client.session, "request") as mock_request:
        mock_request.return_value = response

        with pytest.raises(TransportError):
            client.post_form("https://david.example.org/summary.jsp", {})

    assert mock_request.call_count == 1


def test_get_text_lines_strips_newlines():
    """Test that report text is split into newline-free lines."""
    client = DavidClient()

    with patch.object(client.session, "get") as mock_get:
        mock_get.return_value = _response("GENE_SYMBOL\tSpecies\r\nTP53\tHomo sapiens\n")
        lines = client.get_text_lines("https://david.example.org/UserDownload/a.txt")

    assert lines == ["GENE_SYMBOL\tSpecies", "TP53\tHomo sapiens"]


def test_download_not_retried_by_default():
    """Test that a failed download is attempted once with default settings."""
    client = DavidClient()

    with patch.object(client.session, "get") as mock_get:
        mock_get.side_effect = requests.Timeout("timed out")

        with pytest.raises(TransportError):
            client.get_text_lines("https://david.example.org/UserDownload/a.txt")

    assert mock_get.call_count == 1


def test_download_retries_when_configured():
    """Test that download_retries > 1 retries transient failures."""
    client = DavidClient(download_retries=3)

    with patch("time.sleep"), patch.object(client.session, "get") as mock_get:
        mock_get.side_effect = [
            requests.ConnectionError("reset"),
            _response("line1\nline2"),
        ]
        lines = client.get_text_lines("https://david.example.org/UserDownload/a.txt")

    assert lines == ["line1", "line2"]
    assert mock_get.call_count == 2


def test_client_from_config(tmp_path):
    """Test creating client from DavidConfig."""
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text("""
service:
  base_url: https://david.example.org/
api:
  timeout_seconds: 60
  user_agent: test-agent/1.0
  download_retries: 2
""")

    config = load_config(config_file)
    client = DavidClient.from_config(config)

    assert client.base_url == "https://david.example.org"
    assert client.timeout == 60
    assert client.download_retries == 2
    assert client.session.headers["User-Agent"] == "test-agent/1.0"


def test_client_closes_session():
    """Test that the context manager closes the session."""
    mock_session = Mock()

    with DavidClient(session=mock_session) as client:
        assert client.session is mock_session

    mock_session.close.assert_called_once()
