import logging
import unittest
from unittest.mock import patch
from urllib.parse import parse_qs

import httpx

logging.disable(logging.CRITICAL)


def _client(handler):
    from prbridge.services.backlog_client import BacklogClient

    http = httpx.Client(
        base_url="https://ex.backlog.com/api/v2",
        params={"apiKey": "secret"},
        transport=httpx.MockTransport(handler),
    )
    return BacklogClient("ex.backlog.com", "secret", http=http)


class _Recorder:
    """MockTransport handler; replays (status, json) pairs, repeating the last one."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        planned = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(planned, Exception):
            raise planned
        status, body = planned
        return httpx.Response(status, json=body)


class BacklogClientApiCallTests(unittest.TestCase):
    def test_init_builds_http_client_without_scheme(self):
        from prbridge.services.backlog_client import BacklogClient

        with patch("prbridge.services.backlog_client.httpx.Client") as client_ctor:
            client = BacklogClient("https://ex.backlog.jp/", "secret", timeout=5)

        self.assertEqual(client.host, "ex.backlog.jp")
        client_ctor.assert_called_once_with(
            base_url="https://ex.backlog.jp/api/v2",
            params={"apiKey": "secret"},
            timeout=5,
        )

    def test_get_issue(self):
        rec = _Recorder((200, {"issueKey": "PROJ-1", "summary": "S"}))
        client = _client(rec)

        issue = client.get_issue("PROJ-1")

        self.assertEqual(issue["summary"], "S")
        request = rec.requests[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.url.path, "/api/v2/issues/PROJ-1")
        self.assertEqual(request.url.params["apiKey"], "secret")

    def test_get_issue_not_found(self):
        from prbridge.errors import NotFoundError

        client = _client(_Recorder((404, {"errors": []})))

        with self.assertRaises(NotFoundError):
            client.get_issue("PROJ-404")

    def test_issue_exists(self):
        self.assertTrue(_client(_Recorder((200, {}))).issue_exists("PROJ-1"))
        self.assertFalse(_client(_Recorder((404, {}))).issue_exists("PROJ-1"))

    def test_issue_exists_propagates_transport_errors(self):
        from prbridge.errors import TransportError

        rec = _Recorder((500, {}))
        client = _client(rec)

        with patch("prbridge.services.backlog_client.time.sleep") as sleep:
            with self.assertRaises(TransportError) as ctx:
                client.issue_exists("PROJ-1")

        self.assertEqual(ctx.exception.status_code, 500)
        # Reads are retried (3 attempts, 2 sleeps).
        self.assertEqual(len(rec.requests), 3)
        self.assertEqual(sleep.call_count, 2)

    def test_get_retries_transient_error_then_succeeds(self):
        rec = _Recorder((503, None), (200, {"summary": "ok"}))
        client = _client(rec)

        with patch("prbridge.services.backlog_client.time.sleep"):
            issue = client.get_issue("PROJ-1")

        self.assertEqual(issue["summary"], "ok")
        self.assertEqual(len(rec.requests), 2)

    def test_add_comment_posts_form_content(self):
        rec = _Recorder((201, {"id": 10, "content": "hello"}))
        client = _client(rec)

        comment = client.add_comment("PROJ-1", "hello\nworld")

        self.assertEqual(comment["id"], 10)
        request = rec.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url.path, "/api/v2/issues/PROJ-1/comments")
        self.assertEqual(parse_qs(request.content.decode()), {"content": ["hello\nworld"]})

    def test_writes_are_not_retried(self):
        from prbridge.errors import TransportError

        rec = _Recorder((503, None))
        client = _client(rec)

        with self.assertRaises(TransportError):
            client.add_comment("PROJ-1", "hello")

        self.assertEqual(len(rec.requests), 1)

    def test_network_error_is_transport_error(self):
        from prbridge.errors import TransportError

        client = _client(_Recorder(httpx.ConnectError("connection refused")))

        with self.assertRaises(TransportError):
            client.update_status("PROJ-1", 3)

    def test_update_status_patches_status_id(self):
        rec = _Recorder((200, {"issueKey": "PROJ-1"}))
        client = _client(rec)

        client.update_status("PROJ-1", 3)

        request = rec.requests[0]
        self.assertEqual(request.method, "PATCH")
        self.assertEqual(request.url.path, "/api/v2/issues/PROJ-1")
        self.assertEqual(parse_qs(request.content.decode()), {"statusId": ["3"]})

    def test_get_project_statuses(self):
        rec = _Recorder((200, [{"id": 3, "name": "Resolved"}]))
        client = _client(rec)

        self.assertEqual(client.get_project_statuses("PROJ"), [{"id": 3, "name": "Resolved"}])
        self.assertEqual(rec.requests[0].url.path, "/api/v2/projects/PROJ/statuses")

    def test_strip_scheme(self):
        from prbridge.services.backlog_client import strip_scheme

        self.assertEqual(strip_scheme("https://ex.backlog.com"), "ex.backlog.com")
        self.assertEqual(strip_scheme("HTTP://ex.backlog.com/"), "ex.backlog.com")
        self.assertEqual(strip_scheme("ex.backlog.com"), "ex.backlog.com")


if __name__ == "__main__":
    unittest.main()
