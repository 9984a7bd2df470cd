"""
Parsing of the strings a user can ask the browser to load.

Two levels are handled here. `Url` is a plain `http(s)://host[:port]/path`
locator. `UrlType` classifies a raw input into something fetchable over the
network (`HttpUrl`), the same but to be shown as source (`ViewSourceUrl`), or
an inline RFC 2397 payload (`DataUrl`).
"""

import base64
import binascii
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import unquote_to_bytes

from .errors import InvalidDataUrlFormat, InvalidPort, NoHost, UnknownScheme
from .util import decode_text


class Scheme(Enum):
    HTTP = 'http'
    HTTPS = 'https'

    @property
    def default_port(self) -> int:
        return 443 if self is Scheme.HTTPS else 80


@dataclass(frozen=True)
class Url:
    scheme: Scheme
    """
    Either `http` or `https`. Matched case-sensitively.
    """

    host: str
    """
    The host name or address, exactly as written in the URL. Never empty.
    """

    port: int
    """
    The explicit port, or the default port of `scheme` when the URL names none.
    """

    path: str
    """
    Always starts with `/`.
    """

    @staticmethod
    def parse(text: str) -> 'Url':
        scheme_name, separator, rest = text.partition('://')
        if not separator:
            raise UnknownScheme(text)
        try:
            scheme = Scheme(scheme_name)
        except ValueError:
            raise UnknownScheme(text)

        authority, slash, path = rest.partition('/')
        host, colon, port_text = authority.partition(':')
        if not host:
            raise NoHost(text)

        if colon:
            if not port_text.isascii() or not port_text.isdigit() or int(port_text) > 0xffff:
                raise InvalidPort(text)
            port = int(port_text)
        else:
            port = scheme.default_port

        return Url(scheme=scheme, host=host, port=port, path='/' + path)

    def with_path(self, path: str) -> 'Url':
        """
        A new `Url` on the same origin, but pointing at `path`.
        """
        return Url(scheme=self.scheme, host=self.host, port=self.port, path=path)

    def __str__(self) -> str:
        return '{}://{}:{}{}'.format(self.scheme.value, self.host, self.port, self.path)


class UrlType:
    """
    Base of the things an input string can denote.
    """

    @staticmethod
    def parse(text: str) -> 'UrlType':
        if text.startswith('http://') or text.startswith('https://'):
            return HttpUrl(Url.parse(text))
        if text.startswith('view-source:'):
            return ViewSourceUrl(Url.parse(text[len('view-source:'):]))
        if text.startswith('data:'):
            return DataUrl.parse(text)
        raise UnknownScheme(text)


@dataclass(frozen=True)
class HttpUrl(UrlType):
    url: Url


@dataclass(frozen=True)
class ViewSourceUrl(UrlType):
    url: Url


@dataclass(frozen=True)
class DataUrl(UrlType):
    mediatype: Optional[str]
    base64: bool
    data: str

    @staticmethod
    def parse(text: str) -> 'DataUrl':
        # data:[<mediatype>][;base64],<data>
        meta, comma, data = text[len('data:'):].partition(',')
        if not comma:
            raise InvalidDataUrlFormat(text)

        is_base64 = meta.endswith(';base64')
        if is_base64:
            meta = meta[:-len(';base64')]

        return DataUrl(mediatype=meta or None, base64=is_base64, data=data)

    def content(self) -> str:
        """
        The payload as text.

        Base64 payloads are decoded, anything else is percent-decoded. The resulting bytes are read as UTF-8, falling
        back to ISO-8859-1.
        """
        if self.base64:
            try:
                payload = base64.b64decode(self.data, validate=True)
            except binascii.Error:
                raise InvalidDataUrlFormat(self.data)
        else:
            payload = unquote_to_bytes(self.data)
        return decode_text(payload)
