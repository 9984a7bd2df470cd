import logging
from pathlib import Path
from typing import Optional

from .cache import Cache, create as create_cache
from .errors import CacheError
from .redirect import RedirectResolver
from .text import lex
from .transport import Transport
from .url import DataUrl, HttpUrl, Url, UrlType, ViewSourceUrl


logger = logging.getLogger(__name__)


class Loader:
    """
    Produces the text to display for a parsed input.

    HTTP(S) resources go through the cache first. On a miss they are fetched, following redirects, and stored if the
    response allows it.
    """

    def __init__(self, cache: Cache, resolver: RedirectResolver) -> None:
        self.cache = cache
        self.resolver = resolver

    def load(self, url_type: UrlType) -> str:
        if isinstance(url_type, ViewSourceUrl):
            return self.fetch(url_type.url)
        if isinstance(url_type, HttpUrl):
            return lex(self.fetch(url_type.url))
        if isinstance(url_type, DataUrl):
            return lex(url_type.content())
        raise TypeError('Cannot load {!r}'.format(url_type))

    def fetch(self, url: Url) -> str:
        """
        The body of the resource at `url`.

        @throws TransportError
          If a connection failed. Nothing is cached in that case.
        @throws DecodeError
          If a response body could not be decoded.
        @throws ProtocolError
          If a redirect did not say where to go.
        """
        body = self.cache.get(url)
        if body is not None:
            logger.info('Cache hit for {}'.format(url))
            return body

        logger.info('Cache miss for {}. Fetching.'.format(url))
        response = self.resolver.resolve(url)

        try:
            self.cache.add(url, response)
        except CacheError:
            # The body was fetched fine; only the cache is affected.
            logger.exception('Could not cache the response for {}'.format(url))

        return response.body


def create(cache_directory: Optional[Path] = None, timeout: Optional[float] = None) -> Loader:
    return Loader(create_cache(cache_directory), RedirectResolver(Transport(timeout=timeout)))
