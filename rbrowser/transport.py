import logging
import socket
import ssl
from typing import Optional

from .errors import ConnectFailed, ReadFailed, TlsHandshakeFailed, WriteFailed
from .model import Request
from .url import Scheme


logger = logging.getLogger(__name__)

READ_SIZE = 64 * 1024


class Transport:
    """
    Exchanges one request for the raw bytes of one response.

    Every exchange uses a fresh connection. `Connection: close` is always sent, so the end of the response is simply
    the end of the stream.
    """

    def __init__(self, timeout: Optional[float] = None, ssl_context: Optional[ssl.SSLContext] = None) -> None:
        """
        @param timeout
          Socket timeout in seconds. `None` blocks for as long as the server takes.
        @param ssl_context
          Context used for HTTPS. Defaults to one trusting the system's certificate authorities, with hostname
          verification enabled.
        """
        self.__timeout = timeout
        self.__ssl_context = ssl_context

    def exchange(self, request: Request) -> bytes:
        url = request.url
        logger.info('Connecting to {}:{}'.format(url.host, url.port))
        try:
            sock = socket.create_connection((url.host, url.port), timeout=self.__timeout)
        except OSError as e:
            raise ConnectFailed('Could not connect to {}:{}: {}'.format(url.host, url.port, e)) from e

        try:
            if url.scheme is Scheme.HTTPS:
                sock = self._wrap(sock, url.host)
            self._write(sock, request)
            return self._read(sock)
        finally:
            sock.close()

    def _wrap(self, sock: socket.socket, host: str) -> ssl.SSLSocket:
        logger.info('Starting TLS handshake with {}'.format(host))
        context = self.__ssl_context
        if context is None:
            context = ssl.create_default_context()
        try:
            return context.wrap_socket(sock, server_hostname=host)
        except (ssl.SSLError, ssl.CertificateError, OSError) as e:
            raise TlsHandshakeFailed('TLS handshake with {} failed: {}'.format(host, e)) from e

    def _write(self, sock: socket.socket, request: Request) -> None:
        logger.info('Sending request for {}'.format(request.url))
        try:
            sock.sendall(request.render().encode('utf-8'))
        except OSError as e:
            raise WriteFailed('Could not send the request: {}'.format(e)) from e

    def _read(self, sock: socket.socket) -> bytes:
        chunks = []
        try:
            while True:
                chunk = sock.recv(READ_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
        except OSError as e:
            raise ReadFailed('Could not read the response: {}'.format(e)) from e

        response = b''.join(chunks)
        logger.info('Read {} bytes.'.format(len(response)))
        return response


def connect_and_exchange(request: Request) -> bytes:
    return Transport().exchange(request)
