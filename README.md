# kernelwire

Building blocks for Jupyter kernels written in Python on top of ZeroMQ
(pyzmq). The messages follow protocol version 5.3.

## Modules

- `kernelwire.config`: `KernelConfiguration`, a dataclass with `transport`
  (default `"tcp"`), `ip` (default `"127.0.0.1"`), `control_port`,
  `shell_port`, `stdin_port`, `iopub_port`, `hb_port` (empty means "pick a
  free port"), `signature_scheme` (default `"hmac-sha256"`) and `key`.
  `get_protocol_version()` returns `"5.3"` and `get_version()` returns
  `"0.23.2"`.
- `kernelwire.authentication`: `Authentication`, an abstract base class with
  `sign(header, parent_header, metadata, content)` and
  `verify(signature, header, parent_header, metadata, content)`. Subclasses
  implement `_sign` and `_verify`.
- `kernelwire.message`: `Message` (with `identities`) and `PubMessage` (with
  `topic`), both holding `header`, `parent_header`, `metadata`, `content` and
  `buffers`. `to_frames(auth)` gives the multipart frames (identities or
  topic, the `<IDS|MSG>` delimiter, signature, the four JSON parts as compact
  JSON with sorted keys, then the buffers); `from_frames(frames, auth)` reads
  them back and raises `MessageError` when the delimiter is missing, a frame is
  incomplete or not valid JSON, or the signature does not match.
  `make_header(msg_type, user_name, session_id)` builds a header with a new
  UUID message id, the current date from `iso8601_now()` and the protocol
  version.
- `kernelwire.logger`: `Channel`, `LogLevel` (`MSG_TYPE`, `CONTENT`, `FULL`),
  and the loggers `NullLogger`, `ConsoleLogger` (standard error, or a stream
  you pass) and `FileLogger` (appends indented JSON entries to a file). Each
  `CommonLogger` passes every entry on to its `next_logger`, so loggers can be
  chained. `make_console_logger(level, next_logger)` and
  `make_file_logger(level, file_name, next_logger)` build them;
  `is_utf8_valid(data)` checks identities before they are written.
- `kernelwire.middleware`: end point helpers `get_end_point()`,
  `get_controller_end_point()`, `get_publisher_end_point()`, the socket
  linger (`get_socket_linger()`, 1000 ms), `init_socket()` (binds to the given
  port, or to a random free port in 49152–65536 when the port is empty),
  `bind_socket()`, `get_socket_port()` and `find_free_port(max_tries, start,
  stop)`, which raises `RuntimeError` when no port could be bound.
- `kernelwire.server`: `Server`, the abstract server interface, with
  `ServerChannel`, sending and publishing methods, and registration and
  notification of shell, control, stdin and internal listeners. Notifying a
  listener that was never registered raises `RuntimeError`.
- `kernelwire.messenger`: `ControlMessenger.send_to_shell(message)` sends a
  JSON request to the shell and returns the decoded reply. `TrivialMessenger`
  calls the server's internal listener directly; `ZmqMessenger` talks to the
  shell, publisher and heartbeat controllers over in-process sockets
  (`connect()`, `stop_channels()`, `close()`).
- `kernelwire.publisher`: `Publisher` relays everything published on the
  in-process publisher end point to the iopub socket until a stop request
  arrives on its controller.
- `kernelwire.shell`: `Shell` owns the shell and stdin sockets, hands shell
  requests to the server's shell listener, answers controller requests through
  the internal listener, and stops on `"stop"`. `abort_queue()` drains pending
  shell requests.
- `kernelwire.system`: `get_temp_directory_path()`, `create_directory()`,
  `get_current_pid()` and `get_cell_tmp_file()`.

## Installing

```
pip install kernelwire
```

## Example

A signer has to be supplied by subclassing `Authentication`; here is one
using HMAC-SHA256:

```python
import hashlib
import hmac

from kernelwire.authentication import Authentication
from kernelwire.message import Message, MessageError, make_header


class HmacAuthentication(Authentication):
    def __init__(self, key: bytes) -> None:
        self._key = key

    def _sign(self, header, parent_header, metadata, content):
        mac = hmac.new(self._key, digestmod=hashlib.sha256)
        for part in (header, parent_header, metadata, content):
            mac.update(part)
        return mac.hexdigest().encode()

    def _verify(self, signature, header, parent_header, metadata, content):
        expected = self._sign(header, parent_header, metadata, content)
        return hmac.compare_digest(signature, expected)


auth = HmacAuthentication(b"secret")
header = make_header("kernel_info_request", "user", "session-1")
message = Message(header=header, identities=[b"client"])

frames = message.to_frames(auth)
same = Message.from_frames(frames, auth)
assert same == message

try:
    Message.from_frames(frames, HmacAuthentication(b"placeholder"))
except MessageError as error:
    print(error)  # Signatures don't match
```

Finding a port and building an end point:

```python
from kernelwire.config import KernelConfiguration
from kernelwire.middleware import find_free_port, get_end_point

config = KernelConfiguration(key="secret")
port = find_free_port(100, 49152, 65536)
print(get_end_point(config.transport, config.ip, port))  # tcp://127.0.0.1:<port>
```

## What this package does not do

kernelwire is a set of pieces, not a runnable kernel. It has no command to
start, no interpreter, no heartbeat channel, no complete server (`Server` is
abstract: you supply the transport by subclassing it), no reading of
connection files, and no ready-made signer for `signature_scheme`: you
provide an `Authentication` subclass yourself.

## Running the tests

```
pip install -e ".[test]"
pytest
```