"""HTTP clients for the external evidence sources."""

from .base import FetchClient
from .search import SerperSearchClient
from .weather import OpenMeteoClient
from .wiki import MediaWikiClient

__all__ = ["FetchClient", "SerperSearchClient", "OpenMeteoClient", "MediaWikiClient"]
