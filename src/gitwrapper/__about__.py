"""Metadata package."""

from __future__ import annotations

__title__ = "gitwrapper"
__package_name__ = "gitwrapper"
__version__ = "0.1.0"
__description__ = "Typed, event-instrumented Python API for the git binary"
__email__ = "gitwrapper@example.org"
__author__ = "gitwrapper contributors"
__github__ = "https://github.com/gitwrapper/gitwrapper"
__docs__ = "https://github.com/gitwrapper/gitwrapper#readme"
__tracker__ = "https://github.com/gitwrapper/gitwrapper/issues"
__pypi__ = "https://pypi.org/project/gitwrapper/"
__license__ = "MIT"
__copyright__ = "Copyright 2026- gitwrapper contributors"
