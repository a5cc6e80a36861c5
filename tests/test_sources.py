"""Tests for the Elexon FUELINST client."""

from datetime import datetime, timezone

import pytest
import requests

from fuelinst.errors import FetchError
from fuelinst.sources import ELEXON_INSIGHTS_BASE, ElexonFuelinstSource


class FakeResponse:
    def __init__(self, text="[]", status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, exc=None):
        self.response = response or FakeResponse()
        self.exc = exc
        self.calls = []

    def get(self, url, params=None, timeout=None, headers=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.exc:
            raise self.exc
        return self.response


class TestElexonSource:
    """Test request construction and error wrapping."""

    def test_stream_request(self):
        """Stream fetch hits the FUELINST stream endpoint with minute-precision bounds."""
        session = FakeSession(FakeResponse('[{"dataset": "FUELINST"}]'))
        source = ElexonFuelinstSource(session=session)
        text = source.fetch_stream(
            datetime(2024, 2, 12, 17, 0, 30, tzinfo=timezone.utc),
            datetime(2024, 2, 12, 18, 0, tzinfo=timezone.utc),
        )
        assert text == '[{"dataset": "FUELINST"}]'
        call = session.calls[0]
        assert call["url"] == f"{ELEXON_INSIGHTS_BASE}/datasets/FUELINST/stream"
        assert call["params"] == {"from": "2024-02-12T17:00Z", "to": "2024-02-12T18:00Z"}

    def test_stream_bad_range(self):
        source = ElexonFuelinstSource(session=FakeSession())
        with pytest.raises(ValueError):
            source.fetch_stream(
                datetime(2024, 2, 12, 18, 0, tzinfo=timezone.utc),
                datetime(2024, 2, 12, 17, 0, tzinfo=timezone.utc),
            )

    def test_legacy_csv_url_trimmed(self):
        """Surrounding whitespace in configured URLs is ignored."""
        session = FakeSession(FakeResponse("HDR\nFTR,0\n"))
        source = ElexonFuelinstSource(session=session)
        assert source.fetch_legacy_csv(" https://example.org/f.csv\n") == "HDR\nFTR,0\n"
        assert session.calls[0]["url"] == "https://example.org/f.csv"

    def test_http_error_wrapped(self):
        """HTTP failures surface as FetchError."""
        source = ElexonFuelinstSource(session=FakeSession(FakeResponse(status=503)))
        with pytest.raises(FetchError):
            source.fetch_legacy_csv("https://example.org/f.csv")

    def test_connection_error_wrapped(self):
        """Network failures surface as FetchError."""
        session = FakeSession(exc=requests.ConnectionError("refused"))
        with pytest.raises(FetchError):
            ElexonFuelinstSource(session=session).fetch_legacy_csv("https://example.org/f.csv")


@pytest.mark.integration
class TestAPIIntegration:
    """Integration tests against the real API (skipped in CI by default)."""

    def test_stream_decodes(self):
        """A recent hour of stream data decodes into intervals."""
        from datetime import timedelta

        from fuelinst import stream_json

        end = datetime.now(timezone.utc) - timedelta(hours=1)
        payload = ElexonFuelinstSource().fetch_stream(end - timedelta(hours=1), end)
        grouped = stream_json.decode(payload)
        assert len(grouped) >= 6
