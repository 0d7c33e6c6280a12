"""
aggregate.py - Merge per-file question lists into one.
"""

from typing import Any, Callable, Iterable, List, Sequence

QtiParser = Callable[[str], Sequence[Any]]


def aggregate(payloads: Iterable[str], qti_parser: QtiParser) -> List[Any]:
    """
    Parse each payload and concatenate the results in payload order.

    A file that yields no questions contributes nothing; the records
    themselves are never inspected, reordered or deduplicated.
    """
    questions: List[Any] = []
    for payload in payloads:
        questions.extend(qti_parser(payload))
    return questions
