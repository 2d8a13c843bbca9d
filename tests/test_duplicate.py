import httpx

from api_http_protocol.message import RequestMessage, ResponseMessage


def _response(body: bytes) -> httpx.Response:
    request = httpx.Request("POST", "http://svc/items", headers={"X-Request-Id": "rid-1"})
    return httpx.Response(
        200, headers={"Content-Type": "application/json"}, content=body, request=request
    )


def test_missing_duplicates_report_absence() -> None:
    assert RequestMessage().get_duplicate_request() == (None, False)
    assert ResponseMessage().get_duplicate_response() == (None, False)
    assert RequestMessage().curl_command() == ""


def test_duplicate_response_is_replayable() -> None:
    body = b'{"code":"0","data":{"id":1}}'
    message = ResponseMessage()
    message.set_duplicate_response(_response(body), body)

    first, ok_first = message.get_duplicate_response()
    second, ok_second = message.get_duplicate_response()

    assert ok_first and ok_second
    assert first is not None and second is not None
    assert first.read() == body
    assert first.read() == body
    assert second.content == body
    assert first.headers == second.headers
    assert message.get_raw() == body


def test_duplicate_response_falls_back_to_raw_body() -> None:
    message = ResponseMessage()
    message.set_raw(b"raw-bytes")
    message.set_duplicate_response(httpx.Response(204))

    duplicate, _ = message.get_duplicate_response()

    assert duplicate is not None
    assert duplicate.content == b"raw-bytes"


def test_duplicate_response_keeps_attached_request_id() -> None:
    message = ResponseMessage()
    message.set_duplicate_response(_response(b"{}"), b"{}")

    assert message.request_id == "rid-1"


def test_duplicate_header_mutation_does_not_leak() -> None:
    message = RequestMessage("POST", "http://svc/items")
    message.set_header("X-Tenant", "a")
    message.set_duplicate_request(message.to_httpx_request(), b"{}")

    first, _ = message.get_duplicate_request()
    assert first is not None
    first.headers["X-Injected"] = "1"
    first.headers["X-Tenant"] = "b"

    second, _ = message.get_duplicate_request()
    assert second is not None
    assert "X-Injected" not in second.headers
    assert second.headers["X-Tenant"] == "a"
    assert "X-Injected" not in message.headers
    assert message.get_header("X-Tenant") == "a"


def test_duplicate_request_body_is_buffered() -> None:
    message = RequestMessage("POST", "http://svc/items")
    message.payload = {"x": 1}
    message.set_duplicate_request(message.to_httpx_request())

    duplicate, _ = message.get_duplicate_request()

    assert duplicate is not None
    assert duplicate.content == b'{"x":1}'


def test_curl_command_reproduces_request() -> None:
    message = RequestMessage("POST", "http://svc/items?page=1")
    message.set_header("Content-Type", "application/json")
    message.set_raw(b'{"name":"it\'s"}')
    message.set_duplicate_request(message.to_httpx_request())

    curl = message.curl_command()

    assert curl.startswith("curl -X POST")
    assert "-H 'Content-Type: application/json'" in curl
    assert "content-length" not in curl.lower()
    assert "it'\"'\"'s" in curl
    assert curl.endswith("'http://svc/items?page=1'")
