#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

html_to_markdown.py

Convert the HTML that Canvas stores in QTI <mattext> elements to markdown.

This module handles:
1. Unwrapping Canvas content divs
2. Turning <pre><code class="language-x"> blocks into fenced code
3. Converting the rest with html2text
4. Cleaning up html2text artifacts

Usage:
    from canvasimscp.html_to_markdown import html_to_markdown

    markdown = html_to_markdown('<div class="user_content"><p>Hello</p></div>')
"""

from __future__ import annotations

import html
import re

import html2text
from bs4 import BeautifulSoup

from canvasimscp.errors import HTMLConversionError
from canvasimscp.icons import WARNING


def configure_html2text() -> html2text.HTML2Text:
    """
    Configure html2text converter for question text.

    Returns:
        Configured HTML2Text instance
    """
    h = html2text.HTML2Text()

    h.body_width = 0  # Don't wrap lines
    h.unicode_snob = True
    h.ignore_links = False
    h.ignore_images = False
    h.ignore_emphasis = False

    h.skip_internal_links = False
    h.inline_links = True
    h.protect_links = True
    h.wrap_links = False
    h.mark_code = True

    h.ul_item_mark = '-'
    h.emphasis_mark = '*'
    h.strong_mark = '**'

    # Keep [blank] placeholders and * _ as written
    h.escape_snob = False

    return h


def extract_canvas_content(html_text: str) -> str:
    """
    Extract the main content from Canvas wrapper divs.

    Example:
        >>> extract_canvas_content('<div class="user_content"><p>Hello</p></div>')
        '<div class="user_content"><p>Hello</p></div>'
    """
    if not html_text or not html_text.strip():
        return ""

    soup = BeautifulSoup(html_text, 'html.parser')

    for selector in ['.user_content', '.show-content', 'article']:
        content = soup.select_one(selector)
        if content:
            return str(content)

    body = soup.find('body')
    if body:
        return str(body)

    return html_text


def preserve_code_language_hints(html_text: str) -> str:
    """
    Convert <pre><code class="language-python"> blocks to fenced code
    before markdown conversion, so the language survives.
    """
    pattern1 = r'<pre[^>]*>\s*<code\s+class="[^"]*language-(\w+)[^"]*"[^>]*>(.*?)</code>\s*</pre>'
    pattern2 = r'<pre[^>]*>\s*<code\s+class="(\w+)"[^>]*>(.*?)</code>\s*</pre>'

    def replace_code_block(match):
        language = match.group(1)
        code = html.unescape(match.group(2))
        if language and language not in ['codehilite', 'highlight']:
            return f'```{language}\n{code}\n```'
        return f'```\n{code}\n```'

    html_text = re.sub(pattern1, replace_code_block, html_text, flags=re.DOTALL)
    html_text = re.sub(pattern2, replace_code_block, html_text, flags=re.DOTALL)
    return html_text


def convert_code_tags_to_fences(markdown_text: str) -> str:
    """html2text marks code as [code]...[/code]; use ``` fences instead."""

    def replace_with_fence(match):
        return f'```\n{match.group(1).strip()}\n```'

    return re.sub(r'\[code\](.*?)\[/code\]', replace_with_fence, markdown_text, flags=re.DOTALL)


def _cleanup_markdown(markdown: str) -> str:
    if not markdown:
        return ""

    markdown = markdown.replace('\r\n', '\n')
    markdown = re.sub(r'\n{3,}', '\n\n', markdown)
    markdown = '\n'.join(line.rstrip() for line in markdown.strip().split('\n'))
    return markdown


def convert_html_to_markdown(html_text: str) -> str:
    """
    Convert HTML to markdown.

    Raises:
        HTMLConversionError: If conversion fails
    """
    if not html_text or not html_text.strip():
        return ""

    try:
        html_text = extract_canvas_content(html_text)
        html_text = preserve_code_language_hints(html_text)
        markdown = configure_html2text().handle(html_text)
        markdown = convert_code_tags_to_fences(markdown)
        return _cleanup_markdown(markdown)
    except Exception as e:
        raise HTMLConversionError(
            "Failed to convert HTML to markdown",
            suggestion="Check that HTML is well-formed",
            context={"html_length": len(html_text), "html_preview": html_text[:200]},
            cause=e,
        )


def html_to_markdown(html_text: str) -> str:
    """Convert HTML to markdown; falls back to the original HTML on error."""
    try:
        return convert_html_to_markdown(html_text)
    except HTMLConversionError as e:
        print(f"[import:warn] {WARNING} {e}")
        return html_text.strip()
