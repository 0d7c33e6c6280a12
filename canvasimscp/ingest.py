#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

ingest.py

Turn an uploaded content package into the raw text of its QTI files.

Steps:
1. Create a fresh working directory
2. Copy the upload into it as content.zip
3. Extract the archive
4. Read and parse imsmanifest.xml
5. Resolve the QTI resources listed in the manifest
6. Read each resource file, in manifest order

The working directory is removed when read_data() returns, whether it
succeeded or not; only the decoded payloads leave the call.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Union

from canvasimscp.config import Settings
from canvasimscp.errors import Failure, FailureReason
from canvasimscp.extract import extract_to_pathname
from canvasimscp.file_reader import get_file_content
from canvasimscp.icons import ERROR
from canvasimscp.manifest import resolve_qti_resources
from canvasimscp.workdir import WorkingDirectory
from canvasimscp.xml_tree import Element, parse_xml


Extractor = Callable[[Path, Path], bool]
XmlParser = Callable[..., Union[Element, Failure]]


def _fail(reason: FailureReason, message: str = "") -> Failure:
    failure = Failure(reason, message)
    print(f"[import:err] {ERROR} {failure}")
    return failure


def decode_payload(data: bytes) -> str:
    """UTF-8 decode, dropping a leading byte order mark."""
    return data.decode("utf-8-sig")


def read_data(
    source_path: Union[str, Path],
    extractor: Optional[Extractor] = None,
    xml_parser: XmlParser = parse_xml,
    settings: Optional[Settings] = None,
) -> Union[List[str], Failure]:
    """
    Return the content of all QTI files in the package, one string per file.

    Args:
        source_path: Uploaded zip archive
        extractor: extract(archive, dest) -> bool; defaults to the safe
            zip extractor configured with settings
        xml_parser: parse_xml-compatible manifest parser
        settings: Import settings (defaults if omitted)

    Returns:
        Payloads in manifest order, or a single Failure
    """
    settings = settings or Settings()
    if extractor is None:
        def extractor(archive: Path, dest: Path) -> bool:
            return extract_to_pathname(archive, dest, settings)

    source = Path(source_path)

    def log(message: str) -> None:
        if settings.verbose:
            print(f"[import] {message}")

    with WorkingDirectory(settings.temp_base) as workdir:
        log(f"Working directory: {workdir}")

        if not (source.is_file() and os.access(source, os.R_OK)):
            return _fail(FailureReason.CANNOT_READ_UPLOAD_FILE, str(source))

        archive = workdir / settings.archive_name
        try:
            shutil.copyfile(source, archive)
        except OSError as e:
            return _fail(FailureReason.CANNOT_COPY_ARCHIVE, str(e))
        log(f"Copied {source.name} -> {archive.name}")

        if not extractor(archive, workdir):
            return _fail(FailureReason.CANNOT_UNZIP, source.name)
        log("Extracted archive")

        manifest_bytes = get_file_content(workdir, settings.manifest_name)
        if manifest_bytes is None:
            return _fail(
                FailureReason.XML_FORMAT_ERROR,
                f"{settings.manifest_name} not found in package",
            )

        # Keep white space as it is (important for markdown format)
        manifest = xml_parser(manifest_bytes, preserve_whitespace=True, encoding="UTF-8")
        del manifest_bytes
        if isinstance(manifest, Failure):
            return _fail(manifest.reason, manifest.message)
        log(f"Parsed {settings.manifest_name}")

        paths = resolve_qti_resources(manifest, settings.qti_resource_type)
        if isinstance(paths, Failure):
            return _fail(paths.reason, paths.message)
        log(f"Found {len(paths)} QTI resource(s) in manifest")

        payloads: List[str] = []
        for href in paths:
            content = get_file_content(workdir, href)
            if content is None:
                return _fail(FailureReason.MISSING_RESOURCE_FILE, href)
            try:
                payloads.append(decode_payload(content))
            except UnicodeDecodeError as e:
                return _fail(FailureReason.XML_FORMAT_ERROR, f"{href} is not valid UTF-8: {e}")

        log(f"Read {len(payloads)} question file(s)")
        return payloads
