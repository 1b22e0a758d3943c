'''
Packaging for sitemapper. The command line tool is also available as
``python -m sitemapper``.
'''
from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent

# Get version
version = {}
with (here / "sitemapper" / "version.py").open() as f:
    exec(f.read(), version)

setup(
    name='sitemapper',
    version=version['__version__'],
    description='Write multi-file XML sitemaps, news sitemaps, and sitemap'
        ' indexes',
    python_requires=">=3.7",
    keywords='sitemap xml google news seo',
    packages=find_packages(exclude=['docs', 'tests']),
    install_requires=[
        'lxml',
        'python-dateutil',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': ['sitemapper=sitemapper.__main__:main'],
    },
)
