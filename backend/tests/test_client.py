import json

import httpx
import pytest

from debug_server.client import DebugLogClient, append_to_file, build_entry


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://test")


class TestAgainstServer:
    def test_log_round_trip(self, client):
        dbg = DebugLogClient(http_client=client, session_id="checkout-bug", run_id="initial")

        assert dbg.log("cart.py:10", "total computed", {"total": 99}, hypothesis_id="B") is True

        entries = dbg.fetch_logs()
        assert len(entries) == 1
        entry = entries[0]
        assert entry["location"] == "cart.py:10"
        assert entry["data"] == {"total": 99}
        assert entry["sessionId"] == "checkout-bug"
        assert entry["runId"] == "initial"
        assert entry["hypothesisId"] == "B"
        assert isinstance(entry["timestamp"], int)
        assert entry["id"] and entry["serverTimestamp"]

    def test_run_id_override_per_call(self, client):
        dbg = DebugLogClient(http_client=client, run_id="initial")
        dbg.log("a.py:1", "after fix", run_id="post-fix")
        assert dbg.fetch_logs()[0]["runId"] == "post-fix"

    def test_health_and_clear(self, client):
        dbg = DebugLogClient(http_client=client)
        dbg.log("a.py:1", "x")
        assert dbg.health()["logCount"] == 1

        dbg.clear()
        assert dbg.health()["logCount"] == 0
        assert dbg.fetch_logs() == []

    def test_close_leaves_borrowed_client_open(self, client):
        DebugLogClient(http_client=client).close()
        assert client.get("/health").status_code == 200


class TestFireAndForget:
    def test_connection_error_returns_false(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        dbg = DebugLogClient(http_client=mock_client(refuse))
        assert dbg.log("a.py:1", "x") is False

    def test_timeout_returns_false(self):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        dbg = DebugLogClient(http_client=mock_client(slow))
        assert dbg.log("a.py:1", "x") is False

    def test_unserializable_data_returns_false(self):
        dbg = DebugLogClient(http_client=mock_client(lambda request: httpx.Response(200, text="ok")))
        assert dbg.log("a.py:1", "x", {"obj": object()}) is False

    def test_bad_message_type_returns_false(self):
        dbg = DebugLogClient(http_client=mock_client(lambda request: httpx.Response(200, text="ok")))
        assert dbg.log("a.py:1", 42) is False

    def test_clashing_keyword_returns_false(self):
        dbg = DebugLogClient(http_client=mock_client(lambda request: httpx.Response(200, text="ok")), session_id="s1")
        assert dbg.log("a.py:1", "x", session_id="other") is False
        assert dbg.log("a.py:1", "x", timestamp=5) is False

    def test_error_status_returns_false(self):
        dbg = DebugLogClient(http_client=mock_client(lambda request: httpx.Response(400, text="Invalid JSON")))
        assert dbg.log("a.py:1", "x") is False

    def test_payload_shape(self):
        seen = {}

        def capture(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, text="ok")

        dbg = DebugLogClient(http_client=mock_client(capture), session_id="s1")
        dbg.log("a.py:1", "x", hypothesis_id="C", attempt=2)

        assert seen["path"] == "/debug"
        body = seen["body"]
        assert body["sessionId"] == "s1"
        assert body["hypothesisId"] == "C"
        assert body["attempt"] == 2
        assert "runId" not in body
        assert "id" not in body
        assert "serverTimestamp" not in body


class TestOperatorCalls:
    def test_fetch_logs_raises_on_server_error(self):
        dbg = DebugLogClient(http_client=mock_client(lambda request: httpx.Response(500)))
        with pytest.raises(httpx.HTTPStatusError):
            dbg.fetch_logs()

    def test_owned_client_closed(self):
        with DebugLogClient("http://127.0.0.1:1") as dbg:
            http = dbg._http
        assert http.is_closed


class TestAppendToFile:
    def test_appends_stamped_line(self, tmp_path):
        path = tmp_path / "logs" / "debug.ndjson"
        assert append_to_file(str(path), "job.py:3", "direct", {"k": 1}, hypothesis_id="A", run_id="initial")
        assert append_to_file(str(path), "job.py:4", "again")

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        first = json.loads(lines[0])
        assert first["id"].startswith("log_")
        assert first["hypothesisId"] == "A"
        assert first["runId"] == "initial"
        assert "serverTimestamp" not in first

    def test_io_error_returns_false(self, tmp_path):
        assert append_to_file(str(tmp_path), "a.py:1", "x") is False

    def test_bad_arguments_return_false(self, tmp_path):
        path = tmp_path / "debug.ndjson"
        assert append_to_file(str(path), "a.py:1", 42) is False
        assert append_to_file(str(path), "a.py:1", "x", timestamp="soon") is False
        assert not path.exists()

    def test_unencodable_data_returns_false(self, tmp_path):
        path = tmp_path / "debug.ndjson"
        assert append_to_file(str(path), "a.py:1", "x", {"v": float("nan")}) is False
        assert not path.exists()


def test_build_entry_omits_unset_fields():
    entry = build_entry("a.py:1", "x")
    assert set(entry) == {"timestamp", "location", "message", "data"}
