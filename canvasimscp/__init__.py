"""
canvasimscp - Question import for Canvas IMS Content Packages.
"""

from .errors import (
    CanvasImsCpError,
    ConfigurationError,
    Failure,
    FailureReason,
    HTMLConversionError,
    QtiParseError,
)
from .config import Settings, load_settings
from .xml_tree import Element, parse_xml
from .file_reader import get_file_content
from .manifest import resolve_qti_resources
from .ingest import read_data
from .aggregate import aggregate
from .qti import parse_qti_questions
from .format import QuestionFormat, CanvasImsCpFormat

__all__ = [
    "CanvasImsCpError",
    "ConfigurationError",
    "Failure",
    "FailureReason",
    "HTMLConversionError",
    "QtiParseError",
    "Settings",
    "load_settings",
    "Element",
    "parse_xml",
    "get_file_content",
    "resolve_qti_resources",
    "read_data",
    "aggregate",
    "parse_qti_questions",
    "QuestionFormat",
    "CanvasImsCpFormat",
]
