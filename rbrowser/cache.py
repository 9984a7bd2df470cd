from abc import ABC, abstractmethod
import logging
import os
from pathlib import Path
import tempfile
from typing import Callable, Optional

from .errors import DirectoryUnwritable, FileUnwritable
from .model import CacheEntry, Response
from .url import Url
from .util import now, stable_hash


logger = logging.getLogger(__name__)

CACHE_DIRECTORY_NAME = 'rbrowser'


class Cache(ABC):
    """
    An abstraction of a response body cache.

    A cache remembers the body of a response so that it can be recalled later for the same URL, until the entry
    expires. Deciding whether a response may be cached at all is left to decorators such as `HttpAwareCache`.
    """

    @abstractmethod
    def get(self, url: Url) -> Optional[str]:
        """
        Retrieve a cached body for `url`.

        @param url
          The URL to look up in the cache.
        @return
          The cached body, or `None` if there is no fresh entry. A missing, expired or unreadable entry is never an
          error.
        """

    @abstractmethod
    def add(self, url: Url, response: Response) -> Optional[CacheEntry]:
        """
        Add a response body to the cache, replacing any prior entry for `url`.

        @param url
          The URL the response was fetched for.
        @param response
          The response to cache.
        @return
          The stored entry, or `None` if the response was not cached.
        @throws CacheError
          If the entry could not be written.
        """

    @abstractmethod
    def delete(self, url: Url) -> None:
        """
        Delete the entry for `url`, if any.
        """


class HttpAwareCache(Cache):
    """
    Augments a cache with HTTP-specific knowledge.

    Only responses that declare a positive lifetime through `Cache-Control` are stored, and redirects are never stored
    since the cache keeps nothing but the body.
    """

    def __init__(self, implementation: Cache) -> None:
        self.__impl = implementation

    def get(self, url: Url) -> Optional[str]:
        logger.info('Delegating cache lookup to decorated cache.')
        return self.__impl.get(url)

    def add(self, url: Url, response: Response) -> Optional[CacheEntry]:
        if response.is_redirect():
            logger.info('Refusing to create cache entry. Status {} is a redirect.'.format(response.status.value))
            return None
        if response.cache_max_age() <= 0:
            logger.info('Refusing to create cache entry. The response has no positive max-age.')
            return None

        logger.info('Delegating cache entry creation to decorated cache.')
        return self.__impl.add(url, response)

    def delete(self, url: Url) -> None:
        logger.info('Delegating cache entry deletion to decorated cache.')
        self.__impl.delete(url)


class CorruptEntry(Exception):
    def __init__(self, entry_path: Path):
        super().__init__()
        self.__entry_path = entry_path

    @property
    def entry_path(self) -> Path:
        return self.__entry_path


class FileCache(Cache):
    """
    Keeps one text file per URL, `<directory>/<hash>.txt`, holding `"<valid_until>\\r\\n<body>"`.

    There is no locking. Several processes may write the same entry, in which case the last writer wins. Each write
    goes through a temporary file that is then renamed over the entry, so readers see either the old or the new entry.
    """

    def __init__(self, directory: Path, clock: Callable[[], int] = now) -> None:
        """
        Initialize the file cache.

        @param directory
          The directory holding the entry files. It is created on the first write.
        @param clock
          Returns the current Unix time in seconds.
        """
        self.__directory = directory
        self.__clock = clock

    def _get_path(self, url: Url) -> Path:
        return self.__directory / '{}.txt'.format(stable_hash(str(url)))

    def _load_entry(self, url: Url) -> CacheEntry:
        """
        Read the cache entry for `url`.

        @throws FileNotFoundError
          If there is no entry file.
        @throws CorruptEntry
          If the entry file could not be read or parsed.
        """
        entry_path = self._get_path(url)
        try:
            text = entry_path.read_bytes().decode('utf-8')
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError):
            raise CorruptEntry(entry_path)

        entry = CacheEntry.deserialize(text)
        if entry is None:
            raise CorruptEntry(entry_path)
        return entry

    def get(self, url: Url) -> Optional[str]:
        try:
            logger.info('Looking at the file system for a cache entry for {}'.format(url))
            entry = self._load_entry(url)
        except CorruptEntry as e:
            logger.warning('Found a corrupt cache entry: {}. Deleting it.'.format(e.entry_path))
            self._unlink(e.entry_path)
            return None
        except FileNotFoundError:
            logger.info('No matching cache entry found.')
            return None

        if not entry.is_fresh(self.__clock()):
            logger.info('Cache entry expired at {}. Deleting it.'.format(entry.valid_until))
            self.delete(url)
            return None

        logger.info('Returning the body from the cache.')
        return entry.body

    def add(self, url: Url, response: Response) -> CacheEntry:
        entry = CacheEntry(valid_until=self.__clock() + response.cache_max_age(), body=response.body)

        try:
            self.__directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryUnwritable('Unable to create cache directory {}: {}'.format(self.__directory, e)) from e

        entry_path = self._get_path(url)
        logger.info('Writing cache entry {} valid until {}'.format(entry_path, entry.valid_until))
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(mode='wb', dir=str(self.__directory), delete=False) as f:
                temp_path = Path(f.name)
                f.write(entry.serialize().encode('utf-8'))
            os.replace(str(temp_path), str(entry_path))
        except OSError as e:
            if temp_path is not None:
                self._unlink(temp_path)
            raise FileUnwritable('Unable to write cache entry {}: {}'.format(entry_path, e)) from e

        return entry

    def delete(self, url: Url) -> None:
        path = self._get_path(url)
        if path.exists():
            self._unlink(path)
        else:
            logger.info('No matching cache entry found. Nothing to delete.')

    def _unlink(self, path: Path) -> None:
        try:
            logger.info('Deleting {}'.format(path))
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            logger.exception('Unexpected error occurred while deleting {}'.format(path))


def default_directory() -> Path:
    """
    The per-user cache directory: `$XDG_CACHE_HOME/rbrowser`, or `~/.cache/rbrowser`.
    """
    base = os.environ.get('XDG_CACHE_HOME')
    root = Path(base) if base else Path.home() / '.cache'
    return root / CACHE_DIRECTORY_NAME


def create(directory: Optional[Path] = None) -> Cache:
    return HttpAwareCache(FileCache(directory if directory is not None else default_directory()))
