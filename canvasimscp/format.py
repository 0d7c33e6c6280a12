#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

format.py

Question import formats.

QuestionFormat is the interface a question-bank importer talks to: read the
upload into payloads, then turn payloads into question records.
CanvasImsCpFormat handles Canvas IMS Content Package zips; the QTI body
parser is passed in rather than inherited, so another QTI dialect only
needs a different parser function.

Usage:
    from canvasimscp.format import CanvasImsCpFormat

    fmt = CanvasImsCpFormat()
    result = fmt.import_questions("quiz_export.zip")
    if isinstance(result, Failure):
        ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from canvasimscp.aggregate import QtiParser, aggregate
from canvasimscp.config import Settings
from canvasimscp.errors import Failure, FailureReason, QtiParseError
from canvasimscp.icons import ERROR, SUCCESS
from canvasimscp.ingest import Extractor, read_data
from canvasimscp.qti import parse_qti_questions


class QuestionFormat(ABC):
    """Importer/exporter capabilities plus the two import stages."""

    def __init__(self):
        self.errors: List[str] = []

    @abstractmethod
    def provide_import(self) -> bool:
        ...

    @abstractmethod
    def provide_export(self) -> bool:
        ...

    @abstractmethod
    def mime_type(self) -> str:
        ...

    def export_file_extension(self) -> str:
        return ""

    def error(self, message: str) -> None:
        """Record an import error for the caller to display."""
        self.errors.append(message)
        print(f"[import:err] {ERROR} {message}")

    @abstractmethod
    def read_data(self, source: Union[str, Path]) -> Union[List[str], Failure]:
        """Read the upload into payloads, one per question file."""

    @abstractmethod
    def read_questions(self, payloads: Sequence[str]) -> Union[List[Any], Failure]:
        """Turn payloads into question records."""

    def import_questions(self, source: Union[str, Path]) -> Union[List[Any], Failure]:
        """read_data + read_questions; either every record or one Failure."""
        payloads = self.read_data(source)
        if isinstance(payloads, Failure):
            return payloads
        return self.read_questions(payloads)


class CanvasImsCpFormat(QuestionFormat):
    """Question import for a Canvas IMS Content Package."""

    def __init__(
        self,
        qti_parser: QtiParser = parse_qti_questions,
        extractor: Optional[Extractor] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__()
        self.qti_parser = qti_parser
        self.extractor = extractor
        self.settings = settings or Settings()

    def provide_import(self) -> bool:
        return True

    def provide_export(self) -> bool:
        return False

    def mime_type(self) -> str:
        return "application/zip"

    def export_file_extension(self) -> str:
        return ".zip"

    def read_data(self, source: Union[str, Path]) -> Union[List[str], Failure]:
        result = read_data(source, extractor=self.extractor, settings=self.settings)
        if isinstance(result, Failure):
            self.errors.append(str(result))
        return result

    def read_questions(self, payloads: Sequence[str]) -> Union[List[Any], Failure]:
        """
        Each payload is the entire content of one QTI file defining one or
        more questions; all of them are parsed and merged in file order.
        """
        try:
            questions = aggregate(payloads, self.qti_parser)
        except QtiParseError as e:
            self.error(str(e))
            return Failure(FailureReason.XML_FORMAT_ERROR, str(e))

        if self.settings.verbose:
            print(f"[import] {SUCCESS} Parsed {len(questions)} question(s) from {len(payloads)} file(s)")
        return questions
