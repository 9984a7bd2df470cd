import logging
from typing import Mapping, Optional

from .errors import MissingLocation
from .model import Request, Response
from .response import parse_response
from .transport import Transport
from .url import Url


logger = logging.getLogger(__name__)

MAX_REDIRECTS = 5

DEFAULT_HEADERS = {
    'Accept-Encoding': 'gzip',
}


class RedirectResolver:
    """
    Follows redirects until a final response is reached.

    At most `max_redirects` redirects are followed. When the limit is hit while the server is still redirecting, the
    last (redirect) response is returned as is, rather than failing.
    """

    def __init__(self,
                 transport: Transport,
                 max_redirects: int = MAX_REDIRECTS,
                 headers: Optional[Mapping[str, str]] = None) -> None:
        self.__transport = transport
        self.__max_redirects = max_redirects
        self.__headers = dict(DEFAULT_HEADERS if headers is None else headers)

    def resolve(self, url: Url) -> Response:
        hops = 0
        while True:
            request = Request(url)
            for name, value in self.__headers.items():
                request.set_header(name, value)

            response = parse_response(self.__transport.exchange(request))

            if not response.is_redirect():
                return response
            if hops >= self.__max_redirects:
                logger.warning('Giving up after {} redirects. Returning the last redirect response for {}'.format(
                    hops, url))
                return response

            url = self._next_url(url, response)
            hops += 1
            logger.info('Redirect {} of at most {}: {}'.format(hops, self.__max_redirects, url))

    def _next_url(self, current: Url, response: Response) -> Url:
        location = response.header('Location')
        if location is None:
            raise MissingLocation('{} answered {} without a Location header'.format(current, response.status.value))
        if location.startswith('/'):
            return current.with_path(location)
        return Url.parse(location)
