"""Logger port: persists request/outcome records."""

from collections.abc import Sequence
from typing import Protocol


class LoggerPort(Protocol):
    """Protocol for writing and reading request log artifacts.

    ``write`` must never raise: storage failures degrade to a warning and
    a ``None`` artifact id.
    """

    def write(self, folder: str, contents: Sequence[object]) -> str | None:
        """Write one artifact pairing a request with its outcome.

        Args:
            folder: Caller-chosen folder, typically encoding an entity id.
            contents: Objects to stringify, in order.

        Returns:
            The artifact id (file name within the folder), or None on failure.
        """
        ...

    def read(self, folder: str, artifact_id: str) -> str:
        """Read an artifact back.

        Args:
            folder: Folder the artifact was written to.
            artifact_id: Id returned by ``write``.

        Returns:
            The artifact contents.
        """
        ...
