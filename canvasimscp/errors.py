#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

errors.py

Exception types and pipeline failure values.

Two kinds of error reporting live here:

- Exceptions (CanvasImsCpError and subclasses) are raised by configuration
  loading and by the collaborators (QTI parsing, HTML conversion).
- Failure values are returned by the import pipeline itself. A caller
  branches on them explicitly instead of catching:

    result = read_data(path)
    if isinstance(result, Failure):
        print(result.reason, result.message)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


# ============================================================================
# Exceptions
# ============================================================================

class CanvasImsCpError(Exception):
    """Base error with an optional suggestion and debugging context."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause is not None:
            parts.append(f"({self.cause})")
        if self.suggestion:
            parts.append(f"- {self.suggestion}")
        return " ".join(parts)


class ConfigurationError(CanvasImsCpError):
    """Invalid or unreadable settings file."""
    pass


class QtiParseError(CanvasImsCpError):
    """A QTI document could not be parsed into questions."""
    pass


class HTMLConversionError(CanvasImsCpError):
    """Error during HTML to Markdown conversion"""
    pass


# ============================================================================
# Pipeline failures
# ============================================================================

class FailureReason(str, Enum):
    """Machine-readable reason codes for a failed import."""

    CANNOT_READ_UPLOAD_FILE = "cannotreaduploadfile"
    CANNOT_COPY_ARCHIVE = "cannotcopybackup"
    CANNOT_UNZIP = "cannotunzip"
    XML_FORMAT_ERROR = "xmlformaterror"
    MISSING_RESOURCE_FILE = "missingresourcefile"
    MALFORMED_MANIFEST = "malformedmanifest"


@dataclass(frozen=True)
class Failure:
    """Terminal result of a failed import stage."""

    reason: FailureReason
    message: str = ""

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        if self.message:
            return f"{self.reason.value}: {self.message}"
        return self.reason.value
