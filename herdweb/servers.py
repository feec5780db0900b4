"""HTTP servers that run a WSGI application until they are shut down."""

from __future__ import annotations

import logging
import socket
import ssl
import threading
from abc import ABC, abstractmethod
from socketserver import ThreadingMixIn
from typing import Optional
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer

_log = logging.getLogger("herdweb.servers")


class _Handler(WSGIRequestHandler):
    def setup(self) -> None:
        if not isinstance(self.client_address, tuple) or not self.client_address:
            self.client_address = ("", 0)
        super().setup()

    def log_message(self, format: str, *args) -> None:
        _log.debug("%s - %s", self.client_address[0], format % args)


class _WSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = False
    block_on_close = True


def _parse_addr(addr: str) -> tuple[str, int]:
    if not addr:
        return "", 80
    host, _, port = addr.rpartition(":")
    host = host.strip("[]")
    return host, int(port) if port else 80


class Server(ABC):
    """A server that can be given an address, started and shut down."""

    @abstractmethod
    def set_addr(self, addr: str) -> None:
        """Set the address unless one is already set."""

    @abstractmethod
    def start(self, app) -> None:
        """Serve the WSGI application until shut down."""

    @abstractmethod
    def shutdown(self, timeout: Optional[float] = None) -> None:
        """Stop serving and wait for ongoing requests to finish."""


class SimpleServer(Server):
    """Plain HTTP server listening on ``addr`` (``host:port``)."""

    def __init__(self, addr: str = "") -> None:
        self.addr = addr
        self._lock = threading.Lock()
        self._httpd: Optional[_WSGIServer] = None
        self._closed = False

    def __str__(self) -> str:
        return f"simple server on {self.addr}"

    def set_addr(self, addr: str) -> None:
        if not self.addr:
            self.addr = addr

    def _make_server(self, app) -> _WSGIServer:
        httpd = _WSGIServer(_parse_addr(self.addr), _Handler)
        httpd.set_app(app)
        return httpd

    def start(self, app) -> None:
        """Serve ``app``, blocking until :meth:`shutdown` is called."""
        with self._lock:
            if self._closed:
                return
            httpd = self._make_server(app)
            self._httpd = httpd
        httpd.serve_forever()

    def shutdown(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            self._closed = True
            httpd = self._httpd
        if httpd is None:
            return
        httpd.shutdown()
        closer = threading.Thread(target=httpd.server_close, daemon=True)
        closer.start()
        closer.join(timeout)
        if closer.is_alive():
            raise TimeoutError("server shutdown timed out")


class TLSServer(SimpleServer):
    """HTTP server that serves over TLS with the given certificate and key."""

    def __init__(self, cert_file: str, key_file: str, addr: str = "") -> None:
        super().__init__(addr)
        self.cert_file = cert_file
        self.key_file = key_file

    def __str__(self) -> str:
        return f"TLS server on {self.addr}"

    def _make_server(self, app) -> _WSGIServer:
        context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        context.load_cert_chain(self.cert_file, self.key_file)
        httpd = super()._make_server(app)
        httpd.socket = context.wrap_socket(httpd.socket, server_side=True)
        return httpd

    def start(self, app) -> None:
        """Serve ``app`` over TLS, blocking until shut down."""
        super().start(app)


class ListenerServer(SimpleServer):
    """HTTP server on an already listening socket."""

    def __init__(self, sock: socket.socket, addr: str = "") -> None:
        super().__init__(addr)
        self.sock = sock

    def __str__(self) -> str:
        return f"listener on {self.addr}"

    def _make_server(self, app) -> _WSGIServer:
        httpd = _WSGIServer(("", 0), _Handler, bind_and_activate=False)
        httpd.socket.close()
        httpd.socket = self.sock
        name = self.sock.getsockname()
        if isinstance(name, tuple):
            httpd.server_address = name
            httpd.server_name = name[0] or "localhost"
            httpd.server_port = name[1]
        else:
            httpd.server_address = name
            httpd.server_name = "localhost"
            httpd.server_port = 0
        httpd.setup_environ()
        httpd.set_app(app)
        return httpd

    def start(self, app) -> None:
        """Serve ``app`` on the socket, blocking until shut down."""
        super().start(app)


def unix_socket(path: str) -> ListenerServer:
    """Return a server listening on a Unix domain socket at ``path``."""
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        sock.listen()
    except OSError:
        sock.close()
        raise
    return ListenerServer(sock)