"""
gopher_fetcher.py - Module for fetching Gopher items over a plain TCP connection.
"""

import logging
import socket
import time
from typing import Optional

from moku_pona.utils.logging_utils import log_fetch_failure, log_fetch_success

logger = logging.getLogger(__name__)

BUFFER_SIZE = 4096


class GopherFetcher:
    """
    Fetches one Gopher selector per connection.
    """

    def __init__(self, timeout: float = 10):
        """
        Initialize the Gopher fetcher.

        Args:
            timeout (float): Deadline in seconds covering connect and read.
        """
        self.timeout = timeout
        logger.debug(f"GopherFetcher initialized with timeout {timeout}s")

    def _read_all(self, sock: socket.socket, deadline: float) -> bytes:
        chunks = []
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise socket.timeout(f"no end of response after {self.timeout}s")
            sock.settimeout(remaining)
            chunk = sock.recv(BUFFER_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def fetch(self, selector: str, host: str, port: int) -> Optional[bytes]:
        """
        Request a selector and read the full response.

        Args:
            selector (str): Selector to send
            host (str): Server host
            port (int): Server port

        Returns:
            Optional[bytes]: Response bytes, or None if the fetch failed.
        """
        start = time.monotonic()
        deadline = start + self.timeout

        try:
            with socket.create_connection((host, port), timeout=self.timeout) as sock:
                sock.sendall(f"{selector}\r\n".encode("utf-8"))
                sock.shutdown(socket.SHUT_WR)
                content = self._read_all(sock, deadline)
        except (OSError, UnicodeError) as e:
            # socket.timeout and socket.gaierror are OSError subclasses
            log_fetch_failure(logger, host, port, selector, str(e) or e.__class__.__name__)
            return None

        log_fetch_success(logger, host, selector, len(content), time.monotonic() - start)
        return content
