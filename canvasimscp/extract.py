#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

extract.py

Zip extraction for uploaded content packages.

SECURITY:
- Validates member names to prevent path traversal
- Enforces size limits to prevent zip bombs
- Checks compression ratios for suspicious files
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Optional, Union

from canvasimscp.config import Settings
from canvasimscp.icons import WARNING


def is_safe_member_name(member: str) -> bool:
    """
    Validate zip member name for path traversal attempts.

    SECURITY: Prevents malicious packages from writing outside target directory.

    Blocks:
        - Absolute paths (/, C:, etc.)
        - Parent directory references (..)
        - Dangerous characters (\\0, <, >, |, ?, *)
    """
    if not member:
        return False

    # Reject absolute paths
    if member.startswith('/') or member.startswith('\\'):
        return False

    # Reject drive letters (Windows: C:, D:, etc.)
    if len(member) >= 2 and member[1] == ':':
        return False

    parts = member.replace('\\', '/').split('/')
    if '..' in parts:
        return False

    dangerous_chars = ['\0', '<', '>', '|', '?', '*']
    if any(char in member for char in dangerous_chars):
        return False

    return True


def _extract_members(zf: zipfile.ZipFile, dest: Path, settings: Settings) -> None:
    infos = zf.infolist()

    # SECURITY: Check number of files
    if len(infos) > settings.max_files:
        raise RuntimeError(f"Archive contains too many files: {len(infos)}")

    # SECURITY: Check total uncompressed size
    total_size = sum(info.file_size for info in infos)
    if total_size > settings.max_total_size:
        raise RuntimeError(
            f"Archive too large: {total_size / (1024*1024):.1f} MB "
            f"(max {settings.max_total_size / (1024*1024):.0f} MB)"
        )

    root = dest.resolve()
    extracted_size = 0

    for info in infos:
        member = info.filename

        if info.file_size > settings.max_file_size:
            print(f"[import:warn] {WARNING} Skipping large file: {member} ({info.file_size / (1024*1024):.1f} MB)")
            continue

        # SECURITY: Check compression ratio (zip bomb detection)
        if info.file_size > 0 and info.compress_size > 0:
            ratio = info.file_size / info.compress_size
            if ratio > settings.max_compression_ratio:
                print(f"[import:warn] {WARNING} Suspicious compression: {member} ({ratio:.0f}x)")
                continue

        if not is_safe_member_name(member):
            print(f"[import:warn] {WARNING} Skipping unsafe member name: {member}")
            continue

        member_path = (root / member).resolve()
        try:
            member_path.relative_to(root)
        except ValueError:
            print(f"[import:warn] {WARNING} Path escapes working directory: {member}")
            continue

        zf.extract(info, root)

        extracted_size += info.file_size
        if extracted_size > settings.max_total_size:
            raise RuntimeError("Extracted size exceeds limit during extraction")


def extract_to_pathname(
    archive_path: Union[str, Path],
    dest_dir: Union[str, Path],
    settings: Optional[Settings] = None,
) -> bool:
    """
    Extract a zip archive into dest_dir.

    Returns:
        True on success, False if the archive is not a readable zip or
        breaks one of the safety limits. Never raises for bad input.
    """
    settings = settings or Settings()
    dest = Path(dest_dir)

    try:
        with zipfile.ZipFile(archive_path, 'r') as zf:
            _extract_members(zf, dest, settings)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, RuntimeError, OSError, ValueError) as e:
        print(f"[import:warn] {WARNING} Failed to extract {Path(archive_path).name}: {e}")
        return False

    return True
