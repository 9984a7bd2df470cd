"""
Defines the types flowing through the fetch pipeline.

These types are as simple as possible. Turning wire bytes into them lives in
`rbrowser.response`; here we only keep the data and the few questions it can
answer about itself.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional

from .url import Url


class HttpStatusKind(Enum):
    OK = 200
    MOVED_PERMANENTLY = 301
    FOUND = 302
    TEMPORARY_REDIRECT = 307
    PERMANENT_REDIRECT = 308
    NOT_FOUND = 404
    UNSUPPORTED = None
    """
    Catch-all for any status code this browser does not know, or a status line it could not read. Its value is not
    a status code.
    """

    @staticmethod
    def from_code(code: str) -> 'HttpStatusKind':
        if len(code) != 3 or not code.isascii() or not code.isdigit():
            return HttpStatusKind.UNSUPPORTED
        try:
            return HttpStatusKind(int(code))
        except ValueError:
            return HttpStatusKind.UNSUPPORTED

    def is_redirect(self) -> bool:
        return self in _REDIRECTS


DEFAULT_USER_AGENT = 'rbrowser'

_REDIRECTS = frozenset({
    HttpStatusKind.MOVED_PERMANENTLY,
    HttpStatusKind.FOUND,
    HttpStatusKind.TEMPORARY_REDIRECT,
    HttpStatusKind.PERMANENT_REDIRECT,
})


@dataclass
class Request:
    """
    A GET request for a single resource.

    There is never a body, and the connection is always closed by the server
    after it answers, so nothing beyond the URL and some headers is needed.
    """

    url: Url
    """
    The resource being requested.
    """

    headers: Dict[str, str] = field(default_factory=dict)
    """
    Extra headers sent after `Host` and `Connection`. Names are kept as given. A `User-Agent` here replaces the
    default one.
    """

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def render(self) -> str:
        lines = [
            'GET {} HTTP/1.1'.format(self.url.path),
            'Host: {}'.format(self.url.host),
            'Connection: close',
        ]
        if not any(name.lower() == 'user-agent' for name in self.headers):
            lines.append('User-Agent: {}'.format(DEFAULT_USER_AGENT))
        lines.extend('{}: {}'.format(name, value) for name, value in self.headers.items())
        return '\r\n'.join(lines) + '\r\n\r\n'


@dataclass(frozen=True)
class Response:
    """
    A fully read and decoded response.
    """

    status: HttpStatusKind

    headers: Mapping[str, str] = field(compare=False)
    """
    Header values by lower-cased name. Lookups through `header()` ignore case.
    """

    body: str
    """
    The body after de-chunking, decompression and charset decoding.
    """

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())

    def is_redirect(self) -> bool:
        return self.status.is_redirect()

    def cache_max_age(self) -> int:
        """
        How many seconds this response may be served from the cache.

        Comes from `Cache-Control: max-age=<seconds>`. Zero when the header is missing or unreadable, or says
        `no-store`.
        """
        cache_control = self.header('Cache-Control')
        if cache_control is None:
            return 0

        max_age = 0
        for directive in cache_control.split(','):
            directive = directive.strip().lower()
            if directive == 'no-store':
                return 0
            name, equals, value = directive.partition('=')
            if equals and name.strip() == 'max-age':
                value = value.strip().strip('"')
                if value.isascii() and value.isdigit():
                    max_age = int(value)
        return max_age


@dataclass(frozen=True)
class CacheEntry:
    """
    A cache entry as stored on disk: `"<valid_until>\\r\\n<body>"`.
    """

    valid_until: int
    """
    Unix time, in seconds, from which the entry is stale.
    """

    body: str

    def is_fresh(self, at: int) -> bool:
        return at < self.valid_until

    def serialize(self) -> str:
        return '{}\r\n{}'.format(self.valid_until, self.body)

    @staticmethod
    def deserialize(text: str) -> Optional['CacheEntry']:
        """
        Read an entry back, or `None` if `text` is not a well-formed entry.
        """
        first_line, separator, body = text.partition('\r\n')
        if not separator or not first_line.isascii() or not first_line.isdigit():
            return None
        return CacheEntry(valid_until=int(first_line), body=body)
