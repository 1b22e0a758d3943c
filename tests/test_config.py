from datetime import datetime, timedelta

from dateutil.tz import gettz
import pytest

import sitemapper.config
from sitemapper.entry import InvalidVariantError, SitemapVariant


LOCAL_INI = '''[sitemap]
domain = https://example.com
path = /var/www/sitemaps
variant = news
timezone = Europe/Berlin'''


SYSTEM_INI = '''[sitemap]
domain =
path =
filename = sitemap
variant = webpages
items_per_file = 50000
default_priority = 0.5
timezone = UTC'''


@pytest.fixture
def conf_root(tmp_path, monkeypatch):
    ''' Point the module's private _root variable at a temp directory. '''
    monkeypatch.setattr(sitemapper.config, '_root', tmp_path)
    config_dir = tmp_path / 'conf'
    config_dir.mkdir()
    with (config_dir / 'system.ini').open('w') as f:
        f.write(SYSTEM_INI)
    return tmp_path


def test_get_config(conf_root):
    with (conf_root / 'conf' / 'local.ini').open('w') as f:
        f.write(LOCAL_INI)

    config = sitemapper.config.get_config()
    sitemap = config['sitemap']

    assert sitemap['domain'] == 'https://example.com'
    assert sitemap['filename'] == 'sitemap'
    assert sitemap['items_per_file'] == '50000'
    assert sitemap['variant'] == 'news'


def test_builder_config(conf_root):
    with (conf_root / 'conf' / 'local.ini').open('w') as f:
        f.write(LOCAL_INI)

    config = sitemapper.config.get_config()
    builder_config = sitemapper.config.builder_config(config['sitemap'])

    assert builder_config.domain == 'https://example.com'
    assert builder_config.path == '/var/www/sitemaps'
    assert builder_config.filename == 'sitemap'
    assert builder_config.variant is SitemapVariant.NEWS
    assert builder_config.items_per_file == 50_000
    assert builder_config.default_priority == 0.5
    assert builder_config.tz == gettz('Europe/Berlin')


def test_builder_config_overrides(conf_root):
    config = sitemapper.config.get_config()
    builder_config = sitemapper.config.builder_config(config['sitemap'],
        domain='https://override.example', items_per_file=10, variant=None)

    assert builder_config.domain == 'https://override.example'
    assert builder_config.items_per_file == 10
    assert builder_config.variant is SitemapVariant.WEB_PAGES
    assert builder_config.tz.utcoffset(datetime(2021, 7, 1)) == timedelta(0)


def test_builder_config_errors():
    config = sitemapper.config.get_config([])
    config.read_string('[sitemap]\nvariant = video\n'
        '[other]\ntimezone = Mars/Olympus_Mons\n')
    with pytest.raises(InvalidVariantError):
        sitemapper.config.builder_config(config['sitemap'])
    with pytest.raises(ValueError):
        sitemapper.config.builder_config(config['other'])


def test_default_config_file():
    config = sitemapper.config.get_config(
        [sitemapper.config.get_path('conf/system.ini')])
    builder_config = sitemapper.config.builder_config(config['sitemap'])
    assert builder_config.filename == 'sitemap'
    assert builder_config.items_per_file == 50_000
