"""
placelist_extractor - Google Maps list to KML/CSV converter
"""

__version__ = '0.1.0'

from .errors import (  # noqa: E402
    FetchFailed,
    PayloadExtractionFailed,
    PayloadParseFailed,
    PlaceListError,
    RequiredFieldMissing,
    ScriptNotFound,
    SignatureNotFound,
    StructureTooDeep,
)
from .jobs.models import GoogleMapsListData, ListMetadata, Place  # noqa: E402
from .scraper.pipeline import fetch_list, parse_list_html, parse_script_text  # noqa: E402
