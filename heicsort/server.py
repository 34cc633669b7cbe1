"""
Static file server for the destination directory, with optional mutual TLS.
"""

import ssl
import sys
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional

from .constants import get_logger
from .errors import ServerConfigError

logger = get_logger("heicsort.server")

# Seconds a client may stay silent, TLS handshake included
REQUEST_TIMEOUT = 30


class StaticFileHandler(SimpleHTTPRequestHandler):
    """Read-only file server handler that logs through the program logger.

    On TLS sockets the handshake runs here, in the request thread, so a
    stalled client only holds up its own connection.
    """
    timeout = REQUEST_TIMEOUT

    def setup(self):
        self.request.settimeout(self.timeout)
        if isinstance(self.request, ssl.SSLSocket):
            self.request.do_handshake()
        super().setup()

    def log_message(self, format, *args):
        logger.info(f"{self.address_string()} - {format % args}")

    def log_error(self, format, *args):
        logger.warning(f"{self.address_string()} - {format % args}")


class StaticFileServer(ThreadingHTTPServer):
    """Threaded server; one thread per connection."""

    def handle_error(self, request, client_address):
        # Failed handshakes, rejected client certificates and dropped connections
        exc = sys.exc_info()[1]
        logger.warning(f"{client_address[0]} - connection failed: {exc}")


def create_tls_context(certfile: Path, keyfile: Path,
                       client_ca: Optional[Path] = None) -> ssl.SSLContext:
    """Create a server TLS context (TLS 1.2 minimum).

    When client_ca is given, clients must present a certificate signed by
    one of the CAs in that bundle.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    try:
        context.load_cert_chain(certfile=str(certfile), keyfile=str(keyfile))
    except (OSError, ssl.SSLError) as e:
        raise ServerConfigError(f"Could not load server certificate {certfile}: {e}") from e

    if client_ca:
        try:
            context.load_verify_locations(cafile=str(client_ca))
        except (OSError, ssl.SSLError) as e:
            raise ServerConfigError(f"Could not load client CA bundle {client_ca}: {e}") from e
        context.verify_mode = ssl.CERT_REQUIRED

    return context


def create_server(directory: Path, port: int, host: str = "",
                  tls_context: Optional[ssl.SSLContext] = None) -> StaticFileServer:
    """Create a threaded HTTP(S) server serving directory at '/'."""
    directory = Path(directory)
    if not directory.is_dir():
        raise ServerConfigError(f"Cannot serve {directory}: not a directory")

    handler = partial(StaticFileHandler, directory=str(directory))
    try:
        server = StaticFileServer((host, port), handler)
    except OSError as e:
        raise ServerConfigError(f"Could not listen on port {port}: {e}") from e

    if tls_context is not None:
        server.socket = tls_context.wrap_socket(server.socket, server_side=True,
                                               do_handshake_on_connect=False)
    return server


def serve(server: StaticFileServer) -> None:
    """Serve requests until interrupted."""
    host, port = server.server_address[:2]
    scheme = "https" if isinstance(server.socket, ssl.SSLSocket) else "http"
    logger.info(f"starting up server on {scheme}://{host or '0.0.0.0'}:{port}")
    try:
        server.serve_forever()
    finally:
        server.server_close()
