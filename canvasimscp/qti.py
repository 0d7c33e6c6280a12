#!/usr/bin/env python3
"""
# canvasimscp
# Copyright (c) 2026 Dale Chapman
# Licensed under the MIT License. See LICENSE in the project root.

qti.py

Parse a Canvas QTI 1.2 document into question dicts.

Works for both quiz exports (<questestinterop><assessment><section><item>)
and question bank exports (<questestinterop><objectbank><item>). Every
<item> is one question; items are numbered 1..n in document order.

Question dict:

    {
        "number": 1,
        "ident": "g3f1...",
        "title": "Question",
        "type": "multiple_choice",
        "stem": "What is **2 + 2**?",
        "points": 1.0,
        "answers": [{"ident": "9501", "text": "4", "correct": True}, ...],
        "general_feedback": "...",   # only when present
    }
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from canvasimscp.errors import Failure, QtiParseError
from canvasimscp.html_to_markdown import html_to_markdown
from canvasimscp.icons import WARNING
from canvasimscp.xml_tree import Element, parse_xml


DEFAULT_POINTS = 1.0

# Common Cartridge profile names -> question type
CC_PROFILES = {
    "cc.multiple_choice.v0p1": "multiple_choice",
    "cc.multiple_response.v0p1": "multiple_answers",
    "cc.true_false.v0p1": "true_false",
    "cc.fib.v0p1": "short_answer",
    "cc.essay.v0p1": "essay",
    "cc.pattern_match.v0p1": "short_answer",
}


# ============================================================================
# Metadata
# ============================================================================

def parse_item_metadata(item: Element) -> Dict[str, str]:
    """Collect qtimetadatafield label -> entry pairs."""
    metadata: Dict[str, str] = {}
    for field in item.iter("qtimetadatafield"):
        label = field.first_child("fieldlabel")
        entry = field.first_child("fieldentry")
        if label is None or entry is None:
            continue
        key = label.text_content().strip()
        if key:
            metadata[key] = entry.text_content().strip()
    return metadata


def map_qti_type(qti_type: str) -> str:
    """Map a Canvas question_type or cc_profile value to a question type."""
    qti_lower = qti_type.strip().lower()

    if qti_lower in CC_PROFILES:
        return CC_PROFILES[qti_lower]

    if qti_lower.endswith("_question"):
        qti_lower = qti_lower[: -len("_question")]

    if "multiple_answer" in qti_lower:
        return "multiple_answers"
    elif "fill_in_multiple_blanks" in qti_lower:
        return "fill_in_multiple_blanks"
    elif "multiple_dropdowns" in qti_lower:
        return "multiple_dropdowns"
    elif "multiple_choice" in qti_lower:
        return "multiple_choice"
    elif "true_false" in qti_lower:
        return "true_false"
    elif "short_answer" in qti_lower or "fill_in" in qti_lower:
        return "short_answer"
    elif "numerical" in qti_lower:
        return "numerical"
    elif "calculated" in qti_lower:
        return "calculated"
    elif "matching" in qti_lower:
        return "matching"
    elif "essay" in qti_lower:
        return "essay"
    elif "file_upload" in qti_lower:
        return "file_upload"
    elif "text_only" in qti_lower:
        return "text_only"
    else:
        return "multiple_choice"


def infer_question_type(item: Element) -> str:
    """Guess the type from the response elements when metadata is silent."""
    presentation = item.find("presentation")
    if presentation is None:
        return "text_only"

    response_lid = presentation.find("response_lid")
    if response_lid is not None:
        if response_lid.attr("rcardinality", "Single") == "Multiple":
            return "multiple_answers"
        return "multiple_choice"

    if presentation.find("response_num") is not None:
        return "numerical"
    if presentation.find("response_str") is not None:
        return "short_answer"
    return "text_only"


def parse_points(metadata: Dict[str, str]) -> float:
    for key in ("points_possible", "cc_weighting"):
        value = metadata.get(key)
        if value:
            try:
                return float(value)
            except ValueError:
                pass
    return DEFAULT_POINTS


# ============================================================================
# Text
# ============================================================================

def mattext_to_markdown(mattext: Optional[Element]) -> str:
    """Text of a <mattext>, converted from HTML when texttype says so."""
    if mattext is None:
        return ""
    raw = mattext.text_content()
    if "html" in (mattext.attr("texttype") or "").lower():
        return html_to_markdown(raw)
    return raw.strip()


def material_text(parent: Optional[Element]) -> str:
    """Text of the first <material> directly under parent."""
    if parent is None:
        return ""
    material = parent.first_child("material")
    if material is None:
        return ""
    return mattext_to_markdown(material.find("mattext"))


def parse_feedback(item: Element) -> Dict[str, str]:
    """itemfeedback ident -> markdown text"""
    feedback: Dict[str, str] = {}
    for fb in item.children_named("itemfeedback"):
        ident = fb.attr("ident")
        text = mattext_to_markdown(fb.find("mattext"))
        if ident and text:
            feedback[ident] = text
    return feedback


# ============================================================================
# Response processing
# ============================================================================

def _scored_conditions(item: Element) -> List[Element]:
    """respcondition elements that award points."""
    resprocessing = item.first_child("resprocessing")
    if resprocessing is None:
        return []

    scored = []
    for respcondition in resprocessing.children_named("respcondition"):
        setvar = respcondition.first_child("setvar")
        if setvar is None:
            continue
        try:
            score = float(setvar.text_content().strip())
        except ValueError:
            continue
        if score > 0:
            scored.append(respcondition)
    return scored


def _positive_conditions(node: Element, tag: str) -> List[Element]:
    """Descendants named tag that are not negated by an enclosing <not>."""
    found = []
    for child in node.children:
        if child.tag == "not":
            continue
        if child.tag == tag:
            found.append(child)
        found.extend(_positive_conditions(child, tag))
    return found


def correct_response_ids(item: Element) -> Dict[str, set]:
    """response ident -> set of answer idents that score."""
    correct: Dict[str, set] = {}
    for respcondition in _scored_conditions(item):
        for varequal in _positive_conditions(respcondition, "varequal"):
            respident = varequal.attr("respident", "")
            correct.setdefault(respident, set()).add(varequal.text_content().strip())
    return correct


def parse_choice_answers(item: Element, feedback: Dict[str, str]) -> List[Dict[str, Any]]:
    """Answers for single and multiple choice (and true/false) items."""
    answers = []
    correct = correct_response_ids(item)
    all_correct = set().union(*correct.values()) if correct else set()

    for label in item.iter("response_label"):
        answer_id = label.attr("ident", "")
        text = material_text(label)
        if not text:
            continue

        answer = {
            "ident": answer_id,
            "text": text,
            "correct": answer_id in all_correct,
        }
        if f"{answer_id}_fb" in feedback:
            answer["feedback"] = feedback[f"{answer_id}_fb"]
        answers.append(answer)

    return answers


def parse_blank_answers(item: Element) -> List[Dict[str, Any]]:
    """Answers for fill-in-multiple-blanks and dropdown items, tagged by blank."""
    answers = []
    correct = correct_response_ids(item)

    for response_lid in item.iter("response_lid"):
        response_id = response_lid.attr("ident", "")
        blank = material_text(response_lid) or response_id
        for label in response_lid.iter("response_label"):
            answer_id = label.attr("ident", "")
            answers.append({
                "blank": blank,
                "ident": answer_id,
                "text": material_text(label),
                "correct": answer_id in correct.get(response_id, set()),
            })

    return answers


def parse_matching_answers(item: Element) -> List[Dict[str, Any]]:
    """Left/right pairs for matching items."""
    pairs = []
    correct = correct_response_ids(item)

    for response_lid in item.iter("response_lid"):
        response_id = response_lid.attr("ident", "")
        options = {
            label.attr("ident", ""): material_text(label)
            for label in response_lid.iter("response_label")
        }
        right = ""
        for answer_id in sorted(correct.get(response_id, set())):
            if answer_id in options:
                right = options[answer_id]
                break
        pairs.append({"left": material_text(response_lid), "right": right})

    return pairs


def parse_short_answers(item: Element) -> List[Dict[str, Any]]:
    """Accepted responses for short answer items."""
    answers = []
    for respcondition in _scored_conditions(item):
        for varequal in _positive_conditions(respcondition, "varequal"):
            text = varequal.text_content().strip()
            if text:
                answers.append({"text": text, "correct": True})
    return answers


def _float_or_none(elem: Optional[Element]) -> Optional[float]:
    if elem is None:
        return None
    try:
        return float(elem.text_content().strip())
    except ValueError:
        return None


def parse_numerical_answers(item: Element) -> List[Dict[str, Any]]:
    """Exact values or [min, max] ranges for numerical items."""
    answers = []
    for respcondition in _scored_conditions(item):
        conditionvar = respcondition.first_child("conditionvar")
        if conditionvar is None:
            continue

        exact = _float_or_none(conditionvar.find("varequal"))
        low = _float_or_none(conditionvar.find("vargte"))
        high = _float_or_none(conditionvar.find("varlte"))

        if exact is not None:
            answer: Dict[str, Any] = {"exact": exact}
            if low is not None and high is not None:
                answer["margin"] = max(exact - low, high - exact)
            answers.append(answer)
        elif low is not None or high is not None:
            answers.append({"min": low, "max": high})

    return answers


# ============================================================================
# Items
# ============================================================================

def parse_qti_item(item: Element, number: int) -> Optional[Dict[str, Any]]:
    """Parse a single QTI item; None if it has no question text."""
    metadata = parse_item_metadata(item)

    qtype_name = metadata.get("question_type") or metadata.get("cc_profile")
    qtype = map_qti_type(qtype_name) if qtype_name else infer_question_type(item)

    stem = material_text(item.first_child("presentation"))
    if not stem:
        return None

    feedback = parse_feedback(item)

    answers: List[Dict[str, Any]] = []
    if qtype in ("multiple_choice", "multiple_answers", "true_false"):
        answers = parse_choice_answers(item, feedback)
    elif qtype in ("fill_in_multiple_blanks", "multiple_dropdowns"):
        answers = parse_blank_answers(item)
    elif qtype == "matching":
        answers = parse_matching_answers(item)
    elif qtype == "short_answer":
        answers = parse_short_answers(item)
    elif qtype in ("numerical", "calculated"):
        answers = parse_numerical_answers(item)

    question: Dict[str, Any] = {
        "number": number,
        "ident": item.attr("ident", ""),
        "title": item.attr("title", f"Question {number}"),
        "type": qtype,
        "stem": stem,
        "points": parse_points(metadata),
        "answers": answers,
    }
    if "general_fb" in feedback:
        question["general_feedback"] = feedback["general_fb"]

    return question


def parse_qti_document(root: Element) -> Tuple[List[Dict[str, Any]], int]:
    """Return (questions, skipped item count)."""
    questions = []
    skipped = 0
    for item in root.iter("item"):
        question = parse_qti_item(item, len(questions) + 1)
        if question is None:
            skipped += 1
            ident = item.attr("ident", "?")
            print(f"[import:warn] {WARNING} Skipping item without question text: {ident}")
            continue
        questions.append(question)
    return questions, skipped


def parse_qti_questions(xml_text: str) -> List[Dict[str, Any]]:
    """
    Parse one QTI XML document into question dicts.

    Raises:
        QtiParseError: If the document is not well-formed XML
    """
    root = parse_xml(xml_text, preserve_whitespace=True, encoding="UTF-8")
    if isinstance(root, Failure):
        raise QtiParseError(
            f"Malformed QTI document: {root.message}",
            context={"detail": root.message},
        )

    questions, _ = parse_qti_document(root)
    return questions
