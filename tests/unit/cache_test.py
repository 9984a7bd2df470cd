from ddt import ddt, data, unpack
import os
from mockito import ANY, mock, unstub, verify, when
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Optional
from unittest import TestCase
from unittest.mock import patch

from requests.structures import CaseInsensitiveDict

from rbrowser import cache as cache_module
from rbrowser.cache import Cache, FileCache, HttpAwareCache
from rbrowser.errors import DirectoryUnwritable, FileUnwritable
from rbrowser.model import CacheEntry, HttpStatusKind, Response
from rbrowser.url import Url
from rbrowser.util import stable_hash


URL = Url.parse('http://google.ca')


def make_response(body: str = 'some contents',
                  cache_control: Optional[str] = 'max-age=60',
                  status: HttpStatusKind = HttpStatusKind.OK) -> Response:
    headers = CaseInsensitiveDict()
    if cache_control is not None:
        headers['cache-control'] = cache_control
    return Response(status=status, headers=headers, body=body)


class Clock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@ddt
class TestFileCache(TestCase):
    def setUp(self):
        self.__directory = TemporaryDirectory()
        self.__root = Path(self.__directory.name) / 'rbrowser'
        self.__clock = Clock(1000)
        self.__sut = FileCache(self.__root, clock=self.__clock)

    def tearDown(self):
        self.__directory.cleanup()

    def _entry_path(self, url: Url) -> Path:
        return self.__root / '{}.txt'.format(stable_hash(str(url)))

    def _write_entry(self, url: Url, contents: bytes) -> Path:
        path = self._entry_path(url)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)
        return path

    def test_round_trip(self):
        self.__sut.add(URL, make_response(body='<p>line\r\nbreaks</p>', cache_control='max-age=60'))
        self.assertEqual('<p>line\r\nbreaks</p>', self.__sut.get(URL))

    def test_add_writes_the_entry_format(self):
        entry = self.__sut.add(URL, make_response(body='héllo', cache_control='max-age=60'))

        self.assertEqual(CacheEntry(valid_until=1060, body='héllo'), entry)
        self.assertEqual('1060\r\nhéllo'.encode('utf-8'), self._entry_path(URL).read_bytes())
        # Only the entry itself is left behind.
        self.assertEqual([self._entry_path(URL)], list(self.__root.iterdir()))

    def test_add_replaces_an_existing_entry(self):
        self.__sut.add(URL, make_response(body='old'))
        self.__sut.add(URL, make_response(body='new'))
        self.assertEqual('new', self.__sut.get(URL))

    def test_entry_expires(self):
        self.__sut.add(URL, make_response(cache_control='max-age=60'))

        self.__clock.now = 1059
        self.assertEqual('some contents', self.__sut.get(URL))

        self.__clock.now = 1060
        self.assertIsNone(self.__sut.get(URL))
        self.assertFalse(self._entry_path(URL).exists(), 'Expired entries should be deleted')

    def test_urls_are_kept_apart(self):
        other = Url.parse('http://google.ca:8080/')
        self.__sut.add(URL, make_response(body='default port'))
        self.__sut.add(other, make_response(body='other port'))

        self.assertEqual('default port', self.__sut.get(URL))
        self.assertEqual('other port', self.__sut.get(other))

    def test_missing_entry_is_a_miss(self):
        self.assertIsNone(self.__sut.get(URL))

    @data(
        b'',
        b'1060',
        b'1060\nbody',
        b'later\r\nbody',
        b'10\xff60\r\nbody',
        b'1060\r\n\xff\xfe',
    )
    def test_corrupt_entry_is_a_miss(self, contents: bytes):
        path = self._write_entry(URL, contents)
        self.assertIsNone(self.__sut.get(URL))
        self.assertFalse(path.exists(), 'Corrupt entries must be deleted')

    def test_partially_written_entry_is_a_miss(self):
        path = self._write_entry(URL, b'106')
        self.assertIsNone(self.__sut.get(URL))
        self.assertFalse(path.exists())

    def test_corrupt_entry_is_replaced_on_next_add(self):
        self._write_entry(URL, b'garbage')
        self.assertIsNone(self.__sut.get(URL))

        self.__sut.add(URL, make_response(body='fresh', cache_control='max-age=60'))

        self.assertEqual('fresh', self.__sut.get(URL))

    def test_unwritable_directory(self):
        blocker = Path(self.__directory.name) / 'file'
        blocker.write_text('not a directory')
        sut = FileCache(blocker / 'rbrowser', clock=self.__clock)

        with self.assertRaises(DirectoryUnwritable):
            sut.add(URL, make_response())

    def test_unwritable_file(self):
        # A directory where the entry file should go can't be replaced by a file.
        self._entry_path(URL).mkdir(parents=True)

        with self.assertRaises(FileUnwritable):
            self.__sut.add(URL, make_response())
        self.assertEqual([self._entry_path(URL)], list(self.__root.iterdir()), 'The temporary file should be removed')

    def test_delete(self):
        self.__sut.add(URL, make_response())
        self.__sut.delete(URL)
        self.assertFalse(self._entry_path(URL).exists())
        # Deleting again is harmless.
        self.__sut.delete(URL)


@ddt
class TestHttpAwareCache(TestCase):
    def setUp(self):
        self.__wrapped = mock(Cache)
        self.__sut = HttpAwareCache(self.__wrapped)

    def tearDown(self):
        unstub()

    @data(None, 'cached body')
    def test_get(self, decorated_result: Optional[str]):
        when(self.__wrapped).get(URL).thenReturn(decorated_result)
        self.assertEqual(decorated_result, self.__sut.get(URL))

    @data(
        # When the response declares a lifetime, it is cached.
        (make_response(cache_control='max-age=60'), True),
        (make_response(cache_control='public, max-age=1', status=HttpStatusKind.NOT_FOUND), True),
        # Without a positive lifetime, nothing is cached.
        (make_response(cache_control=None), False),
        (make_response(cache_control='max-age=0'), False),
        (make_response(cache_control='max-age=soon'), False),
        (make_response(cache_control='max-age=60, no-store'), False),
        # Redirects are never cached, since only the body is kept.
        (make_response(cache_control='max-age=60', status=HttpStatusKind.MOVED_PERMANENTLY), False),
    )
    @unpack
    def test_add(self, response: Response, expected_to_be_cached: bool):
        entry = CacheEntry(valid_until=60, body=response.body)
        when(self.__wrapped).add(URL, response).thenReturn(entry)

        result = self.__sut.add(URL, response)

        self.assertEqual(entry if expected_to_be_cached else None, result)
        verify(self.__wrapped, 1 if expected_to_be_cached else 0).add(URL, ANY)

    def test_delete(self):
        when(self.__wrapped).delete(URL).thenReturn(None)

        self.__sut.delete(URL)

        verify(self.__wrapped).delete(URL)


class TestDefaultDirectory(TestCase):
    def test_uses_xdg_cache_home(self):
        with patch.dict(os.environ, {'XDG_CACHE_HOME': '/tmp/xdg'}):
            self.assertEqual(Path('/tmp/xdg', 'rbrowser'), cache_module.default_directory())

    def test_falls_back_to_home(self):
        with patch.dict(os.environ, {'HOME': '/home/someone'}):
            os.environ.pop('XDG_CACHE_HOME', None)
            self.assertEqual(Path('/home/someone', '.cache', 'rbrowser'), cache_module.default_directory())

    def test_create(self):
        cache = cache_module.create(Path('/tmp/somewhere'))
        self.assertIsInstance(cache, HttpAwareCache)
