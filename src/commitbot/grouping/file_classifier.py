"""
Classification of staged files by intent.

Interactive classification is modelled as an explicit state machine: a
:class:`FileClassifier` holds the files still ``Pending`` and is advanced
one step per operator answer via :meth:`FileClassifier.advance`. The
terminal UI (or a test) drives it by feeding answers, so cancellation and
synthetic input need no special handling. Automatic classification marks
every file ``Main`` without any interaction.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence

from commitbot.errors import UserAborted
from commitbot.grouping.group_model import Classification, StagedFile


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


_ANSWERS: Dict[str, Classification] = {
    "1": Classification.MAIN,
    "m": Classification.MAIN,
    "main": Classification.MAIN,
    "2": Classification.SUPPORTING,
    "s": Classification.SUPPORTING,
    "supporting": Classification.SUPPORTING,
    "3": Classification.CONSEQUENTIAL,
    "c": Classification.CONSEQUENTIAL,
    "consequential": Classification.CONSEQUENTIAL,
    "consequence": Classification.CONSEQUENTIAL,
    "4": Classification.IGNORED,
    "i": Classification.IGNORED,
    "ignore": Classification.IGNORED,
    "ignored": Classification.IGNORED,
}

CANCEL_ANSWERS = frozenset({"q", "quit", "abort"})

#: Choices shown to the operator, in menu order.
MENU = (
    ("1", "Main purpose"),
    ("2", "Supporting change"),
    ("3", "Consequence / ripple"),
    ("4", "Ignore / unrelated cleanup"),
)

AskFunc = Callable[[StagedFile, int, int], Optional[str]]


def parse_answer(answer: str) -> Optional[Classification]:
    """Map an operator answer to a classification, or ``None`` if invalid."""
    return _ANSWERS.get(answer.strip().lower())


class FileClassifier:
    """Per-run classification state machine.

    Each file starts ``Pending`` and moves to ``Classified(kind)`` when a
    valid answer is fed for it. Files are visited in their original order.
    Once aborted the machine accepts no further input.
    """

    def __init__(self, files: Sequence[StagedFile]) -> None:
        self._pending: List[StagedFile] = list(files)
        self._classified: List[StagedFile] = []
        self._total = len(self._pending)
        self._aborted = False

    @property
    def total(self) -> int:
        return self._total

    @property
    def position(self) -> int:
        """Zero-based index of the file awaiting an answer."""
        return len(self._classified)

    @property
    def current(self) -> Optional[StagedFile]:
        """The file awaiting an answer, or ``None`` when complete."""
        if self._aborted or not self._pending:
            return None
        return self._pending[0]

    @property
    def is_complete(self) -> bool:
        return not self._aborted and not self._pending

    @property
    def aborted(self) -> bool:
        return self._aborted

    def assign(self, kind: Classification) -> StagedFile:
        """Classify the current file as ``kind`` and move to the next one."""
        if self._aborted:
            raise UserAborted()
        if not self._pending:
            raise RuntimeError("All files are already classified")
        classified = replace(self._pending.pop(0), classification=kind)
        self._classified.append(classified)
        logger.debug("Classified %s as %s", classified.path, kind.value)
        return classified

    def advance(self, answer: Optional[str]) -> bool:
        """Feed one operator answer for the current file.

        Returns
        -------
        bool
            True if the file was classified, False if the answer was
            invalid and the same file should be asked again.

        Raises
        ------
        UserAborted
            If ``answer`` is ``None`` (end of input) or a cancel word.
        """
        if answer is None or answer.strip().lower() in CANCEL_ANSWERS:
            self.cancel()
        kind = parse_answer(answer)
        if kind is None:
            logger.debug("Invalid classification answer %r", answer)
            return False
        self.assign(kind)
        return True

    def cancel(self) -> None:
        """Abort the run; no classification result will be produced."""
        self._aborted = True
        self._pending.clear()
        logger.info("Classification aborted after %d of %d file(s)", len(self._classified), self._total)
        raise UserAborted()

    def results(self) -> List[StagedFile]:
        """Return the classified files in their original order."""
        if self._aborted:
            raise UserAborted()
        if self._pending:
            raise RuntimeError(f"{len(self._pending)} file(s) still pending classification")
        return list(self._classified)


def classify_automatically(files: Sequence[StagedFile]) -> List[StagedFile]:
    """Classify every file as ``Main``; the quick, non-interactive path."""
    classifier = FileClassifier(files)
    while not classifier.is_complete:
        classifier.assign(Classification.MAIN)
    return classifier.results()


def classify_interactively(
    files: Sequence[StagedFile],
    ask: AskFunc,
    on_invalid: Optional[Callable[[str], None]] = None,
) -> List[StagedFile]:
    """Drive a :class:`FileClassifier` with answers obtained from ``ask``.

    Parameters
    ----------
    files : Sequence[StagedFile]
        Files to classify, in display order.
    ask : callable
        Called as ``ask(file, index, total)`` with a one-based index; returns
        the operator's answer or ``None`` to cancel.
    on_invalid : callable, optional
        Called with the rejected answer before the same file is asked again.

    Raises
    ------
    UserAborted
        If the operator cancels at any point.
    """
    classifier = FileClassifier(files)
    while not classifier.is_complete:
        current = classifier.current
        assert current is not None
        answer = ask(current, classifier.position + 1, classifier.total)
        if not classifier.advance(answer) and on_invalid is not None:
            on_invalid(answer or "")
    return classifier.results()
