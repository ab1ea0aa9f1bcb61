import json
import logging
from collections.abc import Sequence
from typing import Any, Dict, List, Optional


class QuestionCatalog(Sequence):
    """Ordered, read-only question bank loaded once at startup."""

    def __init__(self, questions: Optional[List[Dict[str, Any]]] = None, source: Optional[str] = None):
        self._questions = tuple(questions or ())
        self.source = source

    def __getitem__(self, index):
        return self._questions[index]

    def __len__(self):
        return len(self._questions)

    def get(self, index: int) -> Optional[Dict[str, Any]]:
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return None

    def to_list(self) -> List[Dict[str, Any]]:
        return list(self._questions)

    @classmethod
    def from_file(cls, path: str, logger: Optional[logging.Logger] = None) -> 'QuestionCatalog':
        """Load ``{"questions": [...]}`` (or a bare list) from ``path``.

        Any failure degrades to an empty catalog with a warning: rounds can
        still start but no question is ever shown.
        """
        log = logger or logging.getLogger(__name__)
        try:
            with open(path, 'r', encoding='utf-8') as fh:
                content = json.load(fh)
        except (OSError, ValueError) as exc:
            log.warning(f"[catalog] no questions loaded from {path}: {exc}")
            return cls([], source=path)

        questions = content.get('questions') if isinstance(content, dict) else content
        if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
            log.warning(f"[catalog] {path} does not contain a list of question objects")
            return cls([], source=path)

        log.info(f"[catalog] loaded {len(questions)} questions from {path}")
        return cls(questions, source=path)
