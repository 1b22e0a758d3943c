'''
Write sitemap files incrementally.

A :class:`SitemapBuilder` writes each entry as soon as it is added. Once the
per-file item limit is reached, the current file is closed and the next one is
opened, so memory use does not grow with the number of URLs. When all entries
have been added, the caller finishes with either
:meth:`SitemapBuilder.finalize_current_file` or
:meth:`SitemapBuilder.build_index`.
'''
from dataclasses import dataclass, replace
from datetime import datetime, timezone, tzinfo
import logging
import pathlib

from lxml import etree

from . import SitemapError
from .dates import normalize_date
from .entry import (
    InvalidEntryError,
    NewsInfo,
    SitemapVariant,
    UrlEntry,
    check_xml_text,
)
from .xmlwriter import XmlDocumentWriter


logger = logging.getLogger(__name__)

SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'
NEWS_NS = 'http://www.google.com/schemas/sitemap-news/0.9'
EXT = '.xml'
SEPARATOR = '-'
INDEX_SUFFIX = 'index'
DEFAULT_FILENAME = 'sitemap'
DEFAULT_PRIORITY = 0.5
ITEMS_PER_FILE = 50_000


class MissingNewsFieldError(SitemapError):
    ''' A field required by News sitemaps is missing. '''
    def __init__(self, field):
        super().__init__(f'News sitemap entries require a {field}')
        self.field = field


class NoOpenDocumentError(SitemapError):
    ''' There is no open sitemap document to write to or finalize. '''


class ConfigurationLockedError(SitemapError):
    ''' Configuration cannot change once the first file has been written. '''


class SitemapIOError(SitemapError):
    ''' A sitemap file could not be opened or written. '''


def _sm(tag):
    return f'{{{SITEMAP_NS}}}{tag}'


def _news(tag):
    return f'{{{NEWS_NS}}}{tag}'


@dataclass(frozen=True)
class BuilderConfig:
    ''' Settings for a sitemap builder. '''
    domain: str
    path: str = ''
    filename: str = DEFAULT_FILENAME
    variant: SitemapVariant = SitemapVariant.WEB_PAGES
    items_per_file: int = ITEMS_PER_FILE
    default_priority: float = DEFAULT_PRIORITY
    tz: tzinfo = timezone.utc

    def __post_init__(self):
        ''' Validate and coerce settings. '''
        object.__setattr__(self, 'variant', SitemapVariant.parse(self.variant))
        if int(self.items_per_file) < 1:
            raise ValueError('Items per file must be at least 1, got {}'
                .format(self.items_per_file))
        object.__setattr__(self, 'items_per_file', int(self.items_per_file))


@dataclass
class BuilderState:
    ''' Counters and the open output stream for one builder. '''
    items_added: int = 0
    files_opened: int = 0
    stream: XmlDocumentWriter = None
    finalized: bool = False


class SitemapBuilder:
    '''
    Writes URL entries into one or more sitemap files.

    Entries ``0..L-1`` go to ``{filename}.xml``, entries ``L..2L-1`` go to
    ``{filename}-1.xml``, and so on, where ``L`` is the configured number of
    items per file.

    A builder can be used as a context manager, which guarantees that the open
    file is closed even if an exception is raised::

        with SitemapBuilder('https://example.com') as builder:
            builder.set_path('public')
            for path in paths:
                builder.add_item(path, changefreq='daily')
            builder.build_index('https://example.com/')

    A builder is not safe for concurrent use. Use separate builders with
    distinct paths or filenames instead.
    '''
    def __init__(self, domain, variant=None, **options):
        '''
        Constructor.

        :param domain: Prepended to each entry's location, e.g.
            ``https://example.com``. A :class:`BuilderConfig` may be passed
            instead, in which case no other arguments are allowed.
        :param variant: A :class:`SitemapVariant`, its integer value, or its
            name. Defaults to web pages.
        :param options: Any other :class:`BuilderConfig` field.
        :raises InvalidVariantError:
        '''
        if isinstance(domain, BuilderConfig):
            if variant is not None or options:
                raise TypeError('Cannot combine a BuilderConfig with other'
                    ' settings')
            self._config = domain
        else:
            self._config = BuilderConfig(domain, variant=variant, **options)
        self._state = BuilderState()

    @classmethod
    def from_config(cls, config):
        ''' Create a builder from a :class:`BuilderConfig`. '''
        return cls(config)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        stream = self._state.stream
        if stream is None:
            return
        if exc_type is None:
            self._close_stream()
            self._state.finalized = True
        else:
            self._state.stream = None
            stream.abort(exc_type, exc_value, traceback)

    @property
    def config(self):
        return self._config

    @property
    def items_added(self):
        return self._state.items_added

    @property
    def files_opened(self):
        return self._state.files_opened

    def file_paths(self):
        ''' Return the paths of all data files opened so far, in order. '''
        return [self._output_path(self._file_name(i))
            for i in range(self._state.files_opened)]

    def set_domain(self, domain):
        ''' Set the root URL of the website, e.g. ``https://example.com``. '''
        return self._reconfigure(domain=domain)

    def set_path(self, path):
        ''' Set the directory that sitemap files are written to. '''
        return self._reconfigure(path=path)

    def set_filename(self, filename):
        ''' Set the filename stem, e.g. ``sitemap`` for ``sitemap.xml``. '''
        return self._reconfigure(filename=filename)

    def add_item(self, entry, **fields):
        '''
        Write one URL to the current sitemap file, opening a new file first if
        the current one is full.

        The entry is validated before anything is written, so a rejected entry
        is neither counted nor partially written.

        :param entry: A :class:`UrlEntry`, or a location string, in which case
            ``fields`` are passed to the :class:`UrlEntry` constructor.
        :returns: This builder.
        :raises InvalidEntryError: If a field is invalid.
        :raises MissingNewsFieldError: If this is a News sitemap and a
            required News field is missing.
        :raises InvalidDateError: If a date cannot be parsed.
        :raises NoOpenDocumentError: If the builder was already finalized.
        :raises SitemapIOError: If a file cannot be opened or written.
        '''
        if isinstance(entry, str):
            entry = UrlEntry(entry, **fields)
        elif fields:
            raise TypeError('Keyword fields require a location string, not {}'
                .format(type(entry).__name__))

        if self._state.finalized:
            raise NoOpenDocumentError(
                'Cannot add items to a sitemap that has been finalized')

        children, news = self._prepare(entry)

        if self._state.items_added % self._config.items_per_file == 0:
            if self._state.stream is not None:
                logger.debug('Item limit %d reached after %d items',
                    self._config.items_per_file, self._state.items_added)
            self._open_next_file()
        elif self._state.stream is None:
            raise NoOpenDocumentError('The current sitemap file was abandoned'
                ' after an error')

        self._state.items_added += 1
        stream = self._state.stream
        try:
            with stream.element(_sm('url'), 1):
                for tag, text in children:
                    stream.leaf(tag, text, 2)
                if news is not None:
                    self._write_news(stream, news)
        except (OSError, etree.LxmlError, ValueError) as exc:
            self._state.stream = None
            stream.abort(type(exc), exc, exc.__traceback__)
            if isinstance(exc, ValueError):
                raise InvalidEntryError(
                    f'Cannot write item to {stream.path}: {exc}') from exc
            raise SitemapIOError(f'Cannot write to {stream.path}: {exc}') \
                from exc
        logger.debug('Added item #%d: %s', self._state.items_added,
            children[0][1])
        return self

    def finalize_current_file(self):
        '''
        Close the current sitemap file.

        If no file was ever opened, an empty sitemap file is written, so that
        finalizing an empty builder still produces a valid sitemap.

        :raises NoOpenDocumentError: If the current file was already closed.
        :raises SitemapIOError:
        '''
        if self._state.stream is None:
            if self._state.files_opened or self._state.finalized:
                raise NoOpenDocumentError('No sitemap file is open')
            self._open_next_file()
        self._close_stream()
        self._state.finalized = True

    def build_index(self, loc_prefix, lastmod='Today'):
        '''
        Finalize the current file and write a sitemap index that lists every
        file written by this builder.

        The same ``lastmod`` is used for every file in the index.

        :param str loc_prefix: The URL where the sitemap files are published,
            e.g. ``https://example.com/sitemaps/``.
        :param lastmod: Any value accepted by :func:`normalize_date`.
        :returns: The path of the index file.
        :rtype: pathlib.Path
        :raises InvalidDateError:
        :raises NoOpenDocumentError:
        :raises SitemapIOError:
        '''
        lastmod = normalize_date(lastmod, self._config.tz)
        self.finalize_current_file()
        path = self._output_path(self._config.filename + SEPARATOR +
            INDEX_SUFFIX + EXT)
        try:
            with XmlDocumentWriter(path, _sm('sitemapindex'),
                    {None: SITEMAP_NS}) as index:
                for i in range(self._state.files_opened):
                    with index.element(_sm('sitemap'), 1):
                        index.leaf(_sm('loc'), loc_prefix + self._file_name(i),
                            2)
                        index.leaf(_sm('lastmod'), lastmod, 2)
        except (OSError, etree.LxmlError) as exc:
            raise SitemapIOError(f'Cannot write index {path}: {exc}') from exc
        logger.info('Wrote sitemap index %s with %d files', path,
            self._state.files_opened)
        return path

    def _reconfigure(self, **changes):
        if self._state.files_opened or self._state.finalized:
            raise ConfigurationLockedError('Cannot change {} after sitemap'
                ' files have been written'.format(', '.join(changes)))
        self._config = replace(self._config, **changes)
        return self

    def _file_name(self, index):
        ''' The first file has no suffix. Later files are suffixed ``-N``. '''
        if index:
            return f'{self._config.filename}{SEPARATOR}{index}{EXT}'
        return self._config.filename + EXT

    def _output_path(self, name):
        return pathlib.Path(self._config.path) / name

    def _nsmap(self):
        nsmap = {None: SITEMAP_NS}
        if self._config.variant is SitemapVariant.NEWS:
            nsmap['news'] = NEWS_NS
        return nsmap

    def _open_next_file(self):
        if self._state.stream is not None:
            self._close_stream()
        path = self._output_path(self._file_name(self._state.files_opened))
        try:
            self._state.stream = XmlDocumentWriter(path, _sm('urlset'),
                self._nsmap())
        except (OSError, etree.LxmlError) as exc:
            raise SitemapIOError(f'Cannot open {path}: {exc}') from exc
        self._state.files_opened += 1
        logger.info('Opened sitemap file #%d: %s', self._state.files_opened,
            path)

    def _close_stream(self):
        stream, self._state.stream = self._state.stream, None
        try:
            stream.close()
        except (OSError, etree.LxmlError) as exc:
            raise SitemapIOError(f'Cannot close {stream.path}: {exc}') \
                from exc
        logger.info('Closed sitemap file %s', stream.path)

    def _prepare(self, entry):
        '''
        Validate ``entry`` and resolve it to the text of each element.

        :returns: A list of (tag, text) for the ``<url>`` children, and a
            :class:`NewsInfo` with resolved values or None.
        '''
        tz = self._config.tz
        check_xml_text(self._config.domain, 'Domain')
        priority = entry.priority
        if priority is None:
            priority = self._config.default_priority
        children = [
            (_sm('loc'), self._config.domain + entry.location),
            (_sm('priority'), priority),
        ]
        if entry.changefreq is not None:
            children.append((_sm('changefreq'), entry.changefreq.value))
        lastmod = None
        if entry.lastmod not in (None, ''):
            lastmod = normalize_date(entry.lastmod, tz)
            children.append((_sm('lastmod'), lastmod))

        if self._config.variant is not SitemapVariant.NEWS:
            return children, None

        news = entry.news or NewsInfo()
        missing = news.missing_field()
        if missing is not None:
            raise MissingNewsFieldError(missing)
        if news.publication_date:
            publication_date = normalize_date(news.publication_date, tz)
        elif lastmod is not None:
            publication_date = lastmod
        else:
            publication_date = normalize_date(datetime.now(tz), tz)
        return children, replace(news, publication_date=publication_date)

    def _write_news(self, stream, news):
        with stream.element(_news('news'), 2):
            with stream.element(_news('publication'), 3):
                stream.leaf(_news('name'), news.publication_name, 4)
                stream.leaf(_news('language'), news.language, 4)
            if news.access:
                stream.leaf(_news('access'), news.access, 3)
            if news.genres:
                stream.leaf(_news('genres'), news.genres, 3)
            stream.leaf(_news('publication_date'), news.publication_date, 3)
            stream.leaf(_news('title'), news.title, 3)
            if news.keywords:
                stream.leaf(_news('keywords'), news.keywords, 3)
            if news.stock_tickers:
                stream.leaf(_news('stock_tickers'), news.stock_tickers, 3)
