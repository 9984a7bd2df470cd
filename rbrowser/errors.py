"""
Exceptions raised by the fetch pipeline.

Every failure the pipeline can report derives from `BrowserError` so that a
caller can catch everything in one place, while still being able to tell a bad
URL from a network failure or a body that could not be decoded.
"""


class BrowserError(Exception):
    pass


# region URL parsing

class UrlError(BrowserError, ValueError):
    def __init__(self, text: str, message: str) -> None:
        super().__init__('{}: {!r}'.format(message, text))
        self.__text = text

    @property
    def text(self) -> str:
        """
        The input that could not be parsed.
        """
        return self.__text


class UnknownScheme(UrlError):
    def __init__(self, text: str) -> None:
        super().__init__(text, 'Unknown scheme')


class NoHost(UrlError):
    def __init__(self, text: str) -> None:
        super().__init__(text, 'No host')


class InvalidPort(UrlError):
    def __init__(self, text: str) -> None:
        super().__init__(text, 'Invalid port')


class InvalidDataUrlFormat(UrlError):
    def __init__(self, text: str) -> None:
        super().__init__(text, 'Invalid data URL')

# endregion


# region Transport

class TransportError(BrowserError):
    pass


class ConnectFailed(TransportError):
    pass


class TlsHandshakeFailed(TransportError):
    pass


class ReadFailed(TransportError):
    pass


class WriteFailed(TransportError):
    pass

# endregion


# region Response decoding

class DecodeError(BrowserError):
    pass


class MalformedChunk(DecodeError):
    pass


class UnsupportedTransferEncoding(DecodeError):
    pass


class UnsupportedContentEncoding(DecodeError):
    pass


class UnsupportedCharset(DecodeError):
    pass

# endregion


class ProtocolError(BrowserError):
    pass


class MissingLocation(ProtocolError):
    pass


# region Cache writes

class CacheError(BrowserError):
    pass


class DirectoryUnwritable(CacheError):
    pass


class FileUnwritable(CacheError):
    pass

# endregion
