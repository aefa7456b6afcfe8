"""
app/parsers package marker.
"""

from app.parsers.metadata_extractor import FileMetadataExtractor
from app.parsers.report_parser import MarketplaceReportParser, get_report_parser

__all__ = [
    "FileMetadataExtractor",
    "MarketplaceReportParser",
    "get_report_parser",
]
