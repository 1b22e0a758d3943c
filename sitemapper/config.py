import configparser
import pathlib

from dateutil.tz import gettz

from .builder import BuilderConfig


_root = pathlib.Path(__file__).resolve().parent.parent


def get_path(relpath):
    ''' Get absolute path to a project-relative path. '''
    return _root / relpath


def get_config(config_files=None):
    '''
    Read the application configuration from the standard configuration files.

    :param list config_files: Override the default files, which are
        ``conf/system.ini`` followed by ``conf/local.ini``.
    :rtype: ConfigParser
    '''
    if config_files is None:
        config_dir = get_path("conf")
        config_files = [
            config_dir / "system.ini",
            config_dir / "local.ini",
        ]
    config = configparser.ConfigParser()
    config.optionxform = str
    config.read(config_files)
    return config


def builder_config(section, **overrides):
    '''
    Convert a ``[sitemap]`` configuration section to a builder configuration.

    Keyword arguments that are not None take precedence over the section.

    :param configparser.SectionProxy section:
    :rtype: BuilderConfig
    :raises ValueError: If a number or the timezone is invalid.
    :raises InvalidVariantError:
    '''
    settings = {
        'domain': section.get('domain', ''),
        'path': section.get('path', ''),
        'filename': section.get('filename', '') or None,
        'variant': section.get('variant', '') or None,
        'items_per_file': section.getint('items_per_file', fallback=None),
        'default_priority': section.getfloat('default_priority',
            fallback=None),
    }
    settings.update((k, v) for k, v in overrides.items() if v is not None)

    tz_name = section.get('timezone', '') or 'UTC'
    tz = gettz(tz_name)
    if tz is None:
        raise ValueError(f'Unknown timezone: {tz_name}')

    return BuilderConfig(tz=tz,
        **{k: v for k, v in settings.items() if v is not None})
