# wsnet

wsnet holds the building blocks of a WebSocket client and server
(RFC 6455), together with the permessage-deflate extension (RFC 7692).
It uses only the standard library and supports Python 3.10 and later.

## Modules

| Module | What it gives you |
| --- | --- |
| `wsnet.headers` | `CaseInsensitiveDict`, a header mapping whose keys ignore ASCII case and iterate in case-insensitive sorted order; `case_insensitive_less`; and `parse_http_headers`, which reads a header block one byte at a time up to the empty line and raises `HeaderParseError` if the stream ends first. |
| `wsnet.urlparser` | `parse_url` splits `ws://`, `wss://`, `http://` and `https://` URLs into a frozen `ParsedUrl` (`protocol`, `host`, `path`, `query`, `port`, `is_protocol_default_port`). The path always starts with `/` and carries the query. A missing or out-of-range port falls back to the scheme's default, given by `protocol_port` (80, 443, or -1). Malformed URLs raise `UrlParseError`. |
| `wsnet.tls_options` | `SocketTLSOptions`: certificate, key, CA and cipher settings. `ca_file` may be a path, `"SYSTEM"`, `"NONE"` or PEM text. `validate()` raises `TLSOptionsError` for missing files or a certificate without a key; `is_valid()` returns a bool; `description()` gives a readable summary. |
| `wsnet.useragent` | `platform_name()` and `user_agent()`, which builds the `User-Agent` / `Server` value from the package version, platform, OpenSSL version and zlib version. |
| `wsnet.ids` | `uuid4_hex()` returns a random version-4 UUID as 32 lower-case hex digits. |
| `wsnet.close` | `CloseCode` (an `IntEnum` of close status codes), `CloseMessage` (a `str` enum of close reasons) and the frozen `CloseInfo` record (`code`, `reason`, `remote`). |
| `wsnet.keygen` | `generate_accept_key` computes `Sec-WebSocket-Accept` from `Sec-WebSocket-Key`. |
| `wsnet.deflate_options` | `PerMessageDeflateOptions`: build it directly or with `from_header()` from a `Sec-WebSocket-Extensions` value (window sizes are clamped to 8–15, and a client window of 8 becomes 9); `generate_header()` returns the header line with its CRLF. `remove_spaces` strips ASCII whitespace. |
| `wsnet.deflate` | `DeflateCompressor`, `DeflateDecompressor` and `PerMessageDeflate`, which pairs the two from negotiated options. The trailing empty stored block is removed on compression and restored on decompression. Failures raise `DeflateError`. |
| `wsnet.udp` | `UdpSocket`: a non-blocking IPv4 UDP socket bound to one remote address, usable as a context manager; `is_wait_needed` tells whether an error only means "would block". |
| `wsnet.handshake` | `client_handshake` and `server_handshake` run the opening handshake over an already connected binary stream (for example `sock.makefile("rwb")`) and return a `HandshakeResult` whose `deflate` is a `PerMessageDeflate` when compression was agreed. The pieces are also available separately: `generate_key`, `build_client_request`, `check_server_response`, `check_client_request`, `build_server_response` and `build_error_response`. Failures raise `HandshakeError`, which carries `http_status`, `headers` and `uri`; the server side sends an error response before raising. |
| `wsnet.tls_context` | `create_client_context` and `create_server_context` build `ssl.SSLContext` objects from `SocketTLSOptions`; `add_ca_roots_from_string` trusts PEM certificates given as text; `describe_ssl_error` turns an exception into a readable message. Failures raise `TLSError`. |
| `wsnet.tls_socket` | `TLSSocket`: a TLS connection over a non-blocking TCP socket. `connect(host, port, is_cancelled)` opens and secures a client connection; `accept()` runs the server handshake on a socket given to the constructor. `send` and `recv` raise `BlockingIOError` when they must be retried. |

## Examples

Compute the handshake accept value:

```python
from wsnet.keygen import generate_accept_key

generate_accept_key("dGhlIHNhbXBsZSBub25jZQ==")
# 's3pPLMBiTxaQ9kYGzzhZRbK+xOo='
```

Read a header block; lookups ignore case:

```python
import io
from wsnet.headers import parse_http_headers

buf = io.BytesIO(b"Host: example.com\r\nUpgrade: websocket\r\n\r\n")
headers = parse_http_headers(lambda: buf.read(1))
headers["upgrade"]
# 'websocket'
```

Negotiate and use permessage-deflate:

```python
from wsnet.deflate import PerMessageDeflate
from wsnet.deflate_options import PerMessageDeflateOptions

options = PerMessageDeflateOptions.from_header(
    "permessage-deflate; client_no_context_takeover"
)
print(options.generate_header(), end="")
# Sec-WebSocket-Extensions: permessage-deflate; client_no_context_takeover; server_max_window_bits=15; client_max_window_bits=15

codec = PerMessageDeflate(options)
payload = codec.compress(b"hello hello hello")
```

Split a WebSocket URL:

```python
from wsnet.urlparser import parse_url

parsed = parse_url("ws://localhost:8008/chat?room=1")
parsed.host, parsed.port, parsed.path
# ('localhost', 8008, '/chat?room=1')
```

Run a client handshake over a plain TCP connection:

```python
import socket
from wsnet.handshake import client_handshake

with socket.create_connection(("localhost", 8008)) as sock:
    stream = sock.makefile("rwb")
    result = client_handshake(stream, "ws://localhost:8008/chat")
    print(result.status)  # 101
```

## What wsnet does not do

wsnet stops at the opening handshake. It does not encode or decode
WebSocket frames, send pings or pongs, or keep a connection open and
reconnect it. There is no ready-made WebSocket client object, no server
that listens and accepts connections, no proxy, and no command-line tool:
those are left to the code that uses these building blocks.