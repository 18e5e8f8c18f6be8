"""Bounded accumulation buffer shared by the scanners.

Every name, value and path segment is accumulated through a
:class:`ScratchBuffer`, which checks its capacity before each write and fails
with ``BUFFER_OVERFLOW`` instead of growing without limit.
"""

from typing import Callable, Dict, List, Optional

from restricted_xml_parser.shared import DiagnosticReporter, ErrorKind


class ScratchBuffer:
    """Accumulate characters up to a fixed capacity.

    Args:
        capacity: Maximum number of characters the buffer may hold
        label: What is being accumulated, used in the overflow message
        reporter: Reporter recording the overflow diagnostic
        locate: Callable returning the current source location
    """

    def __init__(
        self,
        capacity: int,
        label: str,
        reporter: DiagnosticReporter,
        locate: Optional[Callable[[], Dict[str, int]]] = None,
    ) -> None:
        self.capacity = capacity
        self.label = label
        self._reporter = reporter
        self._locate = locate
        self._chars: List[str] = []

    def __len__(self) -> int:
        return len(self._chars)

    def __bool__(self) -> bool:
        return bool(self._chars)

    def append(self, char: str) -> None:
        if len(self._chars) >= self.capacity:
            position = self._locate() if self._locate else None
            raise self._reporter.failure(
                ErrorKind.BUFFER_OVERFLOW,
                f"{self.label} exceeds the scratch capacity of {self.capacity} characters",
                position,
            )
        self._chars.append(char)

    def getvalue(self) -> str:
        return "".join(self._chars)
