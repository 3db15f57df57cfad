"""Schema, partial decoding, and snapshot merging for structured pages."""

from .merger import SiteDocumentAssembler, merge_snapshots, validate_site_document
from .models import (
    SECTION_TYPES,
    PartialSiteDocument,
    Section,
    SiteDocument,
    WikiSection,
)
from .partial_json import PartialJSONError, parse_partial_json

__all__ = [
    "SECTION_TYPES",
    "PartialJSONError",
    "PartialSiteDocument",
    "Section",
    "SiteDocument",
    "SiteDocumentAssembler",
    "WikiSection",
    "merge_snapshots",
    "parse_partial_json",
    "validate_site_document",
]
