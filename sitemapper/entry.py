from dataclasses import dataclass, fields
from enum import Enum
import logging
import re

from . import SitemapError


logger = logging.getLogger(__name__)
MAX_LOCATION_LENGTH = 2048
# Anything outside the XML 1.0 Char production.
_INVALID_XML_RE = re.compile(
    '[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')


class InvalidEntryError(SitemapError):
    ''' A URL entry has an invalid field. '''


class InvalidVariantError(SitemapError):
    ''' An unrecognized sitemap variant was requested. '''


class SitemapVariant(Enum):
    ''' The kind of sitemap a builder produces. '''
    WEB_PAGES = 0
    NEWS = 1

    @classmethod
    def parse(cls, value):
        '''
        Get a variant from a variant, its integer value, or its name.

        Names are case insensitive and may omit the underscore, so ``news``,
        ``webpages``, and ``WEB_PAGES`` are all accepted.

        :raises InvalidVariantError:
        '''
        if value is None:
            return cls.WEB_PAGES
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        elif isinstance(value, str):
            name = value.strip().upper().replace('-', '_')
            for variant in cls:
                if name in (variant.name, variant.name.replace('_', '')):
                    return variant
        raise InvalidVariantError(f'Unavailable sitemap variant: {value!r}')


class ChangeFrequency(Enum):
    ''' How frequently a page is likely to change. '''
    ALWAYS = 'always'
    HOURLY = 'hourly'
    DAILY = 'daily'
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    NEVER = 'never'


def _join(value):
    ''' News list fields may be given as a string or a list of strings. '''
    if value is None or isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        raise InvalidEntryError(f'Expected a string or a list: {value!r}')
    return ', '.join(str(v) for v in value)


def check_xml_text(value, name):
    '''
    Raise if ``value`` contains characters that cannot appear in XML, such as
    NUL or most other control characters.

    :raises InvalidEntryError:
    '''
    match = _INVALID_XML_RE.search(value)
    if match is not None:
        raise InvalidEntryError('{} contains a character that is not allowed'
            ' in XML: {!r}'.format(name, match.group()))


@dataclass
class NewsInfo:
    '''
    Google News metadata for one URL.

    ``publication_name``, ``language``, and ``title`` are required by News
    sitemaps; this is checked by the builder when the entry is written, so
    that the error names the first missing field.
    '''
    publication_name: str = None
    language: str = None
    title: str = None
    access: str = None
    genres: object = None
    publication_date: object = None
    keywords: object = None
    stock_tickers: object = None

    def __post_init__(self):
        self.genres = _join(self.genres)
        self.keywords = _join(self.keywords)
        self.stock_tickers = _join(self.stock_tickers)
        for name in _NEWS_TEXT_FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, str):
                raise InvalidEntryError(
                    f'News {name} must be a string: {value!r}')
            check_xml_text(value, f'News {name}')

    @classmethod
    def from_doc(cls, doc):
        '''
        Create news metadata from a dictionary.

        :param dict doc:
        :rtype: NewsInfo
        :raises InvalidEntryError: If ``doc`` has unknown keys.
        '''
        unknown = set(doc) - {f.name for f in fields(cls)}
        if unknown:
            raise InvalidEntryError('Unknown news fields: {}'.format(
                ', '.join(sorted(str(k) for k in unknown))))
        return cls(**doc)

    def missing_field(self):
        '''
        Return the name of the first required field that is empty, or None.

        Fields are checked in the order title, name, language.
        '''
        if not self.title:
            return 'title'
        if not self.publication_name:
            return 'publication_name'
        if not self.language:
            return 'language'
        return None


_NEWS_TEXT_FIELDS = ('publication_name', 'language', 'title', 'access',
    'genres', 'keywords', 'stock_tickers')


@dataclass
class UrlEntry:
    ''' A single ``<url>`` record. It is written immediately, never stored. '''
    location: str
    priority: float = None
    changefreq: ChangeFrequency = None
    lastmod: object = None
    news: NewsInfo = None

    def __post_init__(self):
        ''' Validate fields. '''
        if not isinstance(self.location, str):
            raise InvalidEntryError(
                f'Location must be a string: {self.location!r}')
        if len(self.location) > MAX_LOCATION_LENGTH:
            raise InvalidEntryError('Location is {} characters, the maximum is'
                ' {}: {}...'.format(len(self.location), MAX_LOCATION_LENGTH,
                self.location[:64]))
        check_xml_text(self.location, 'Location')

        if self.priority is not None:
            if isinstance(self.priority, bool):
                raise InvalidEntryError(
                    f'Priority must be a number: {self.priority!r}')
            try:
                priority = float(self.priority)
            except (TypeError, ValueError):
                raise InvalidEntryError(
                    f'Priority must be a number: {self.priority!r}') from None
            if not 0.0 <= priority <= 1.0:
                raise InvalidEntryError(
                    f'Priority must be between 0.0 and 1.0: {self.priority!r}')

        if self.changefreq is not None and \
                not isinstance(self.changefreq, ChangeFrequency):
            try:
                self.changefreq = ChangeFrequency(
                    str(self.changefreq).strip().lower())
            except ValueError:
                raise InvalidEntryError(
                    f'Invalid change frequency: {self.changefreq!r}') from None

        if isinstance(self.news, dict):
            self.news = NewsInfo.from_doc(self.news)
        elif self.news is not None and not isinstance(self.news, NewsInfo):
            raise InvalidEntryError(
                f'News must be a NewsInfo or a dict: {self.news!r}')

    @classmethod
    def from_doc(cls, doc):
        '''
        Create an entry from a dictionary, e.g. one line of a JSON input file.

        Unknown keys are ignored with a warning. Unknown keys in the nested
        ``news`` object are an error.

        :param dict doc:
        :rtype: UrlEntry
        '''
        if not isinstance(doc, dict):
            raise InvalidEntryError(f'Entry must be an object: {doc!r}')
        known = {f.name for f in fields(cls)}
        unknown = set(doc) - known
        if unknown:
            logger.warning('Ignoring unknown entry fields: %s',
                ', '.join(sorted(unknown)))
        kwargs = {k: v for k, v in doc.items() if k in known}
        try:
            return cls(**kwargs)
        except TypeError as exc:
            raise InvalidEntryError(str(exc)) from exc
