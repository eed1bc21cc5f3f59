"""Shared subprocess result dataclass.

Used by the executor for every git invocation, sync or async.
"""

from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class SubprocessResult:
    """Result of a git invocation. Internal transport only.

    ``stdout`` and ``stderr`` are already trimmed of trailing line terminators.
    Both are empty when the invocation ran with its streams ignored or inherited.
    """

    returncode: int
    stdout: str
    stderr: str
    args: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.returncode == 0
