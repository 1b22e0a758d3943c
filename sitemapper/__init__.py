'''
Generate Sitemap Protocol XML files, optionally with Google News extensions,
split across multiple files and tied together by a sitemap index.
'''
from .version import __version__


class SitemapError(Exception):
    ''' Base class for all errors raised while building sitemaps. '''


from .builder import (
    BuilderConfig,
    ConfigurationLockedError,
    MissingNewsFieldError,
    NoOpenDocumentError,
    SitemapBuilder,
    SitemapIOError,
)
from .dates import InvalidDateError, normalize_date
from .entry import (
    ChangeFrequency,
    InvalidEntryError,
    InvalidVariantError,
    NewsInfo,
    SitemapVariant,
    UrlEntry,
)
