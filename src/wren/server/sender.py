"""ASGI response sending — translates wren Responses to ASGI messages."""

from wren._internal.asgi import Send
from wren.http.response import Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a wren Response into ASGI send() calls.

    An explicit ``content-length`` header wins over the body length; a
    body-less HEAD copy uses it to report the length of the GET body.
    """
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    allowed = _body_allowed(response.status)
    body = response.body_bytes if allowed else b""
    content_length = str(len(body))

    for name, value in response.headers:
        lowered = name.lower()
        if lowered == "content-length":
            if allowed:
                content_length = value
            continue
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    raw_headers.append((b"content-length", content_length.encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
