"""Write request/outcome log artifacts to a folder tree.

Each artifact is one file named by its ISO-8601 timestamp (microsecond
precision) inside a caller-chosen folder. Choosing folders that encode
entity ids makes artifacts easy to list and retrieve later by path prefix
and pattern.
"""

import json
import re
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import BaseModel

from src.envelope import ResponseEnvelope
from src.errors import ApiRequestError
from src.logfile.redact import redact_headers, redact_url
from src.transport.models import PreparedRequest


logger = structlog.get_logger()


class NoLogArtifactError(LookupError):
    """Raised when a request instance has not written any log artifact."""


def artifact_name(moment: datetime) -> str:
    """File name for an artifact written at ``moment``.

    Args:
        moment: Timezone-aware write instant.

    Returns:
        ISO-8601 timestamp with microseconds, e.g.
        ``2024-01-01T00:00:00.000000+00:00``.
    """
    return moment.isoformat(timespec="microseconds")


def beautify_if_json(text: str) -> str:
    """Pretty-print a string if it is JSON, pass it through otherwise."""
    try:
        return json.dumps(json.loads(text), indent=4)
    except ValueError:
        return text


class LogFile:
    """Filesystem implementation of ``LoggerPort``.

    Stringifies prepared requests, response envelopes and request errors in
    a readable form and falls back to JSON for everything else. Sensitive
    request headers are redacted before they reach disk.
    """

    def __init__(
        self,
        root: Path | str,
        interesting_headers: Sequence[str] = ("x-ciq-request-id",),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the log file writer.

        Args:
            root: Root folder for all artifacts.
            interesting_headers: Response headers worth copying into artifacts.
            clock: Source of the current time, defaults to UTC now.
        """
        self._root = Path(root)
        self._interesting = {header.lower() for header in interesting_headers}
        self._clock = clock or (lambda: datetime.now(UTC))
        self._log = logger.bind(component="logfile", root=str(self._root))

    @property
    def root(self) -> Path:
        """Get the root folder."""
        return self._root

    def write(self, folder: str, contents: Sequence[object]) -> str | None:
        """Write a new artifact into ``folder``.

        An error in the log storage must never halt normal operations, so
        every failure is logged and reported as ``None``.

        Args:
            folder: Folder relative to the root.
            contents: Objects to stringify, separated by blank lines.

        Returns:
            Generated artifact name, or None if the write failed.
        """
        filename = artifact_name(self._clock())
        try:
            body = "\n\n".join(self.stringify(item) for item in contents) + "\n"
            target = self._root / folder / filename
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(body, encoding="utf-8")
        except Exception as e:  # noqa: BLE001
            self._log.error("log_write_failed", folder=folder, error=str(e))
            return None

        self._log.debug("log_written", folder=folder, artifact=filename)
        return filename

    def read(self, folder: str, artifact_id: str) -> str:
        """Read an artifact's contents.

        Args:
            folder: Folder relative to the root.
            artifact_id: Artifact name returned by ``write``.

        Returns:
            Artifact contents.
        """
        return (self._root / folder / artifact_id).read_text(encoding="utf-8")

    def files_like(self, path: str, pattern: str) -> list[str]:
        """List artifacts below ``path`` whose relative path matches a regex.

        This walks the whole subtree, so keep ``path`` as narrow as possible.

        Args:
            path: Literal folder prefix relative to the root ("" for all).
            pattern: Regular expression searched in the root-relative path.

        Returns:
            Sorted root-relative paths of matching artifacts.
        """
        base = self._root / path
        if not base.is_dir():
            return []
        regex = re.compile(pattern)
        relative = (
            candidate.relative_to(self._root).as_posix()
            for candidate in base.rglob("*")
            if candidate.is_file()
        )
        return sorted(name for name in relative if regex.search(name))

    def files_in_folder(self, folder: str) -> list[str]:
        """List artifact names directly inside ``folder``.

        Args:
            folder: Folder relative to the root.

        Returns:
            Sorted artifact names, oldest first.
        """
        base = self._root / folder
        if not base.is_dir():
            return []
        return sorted(entry.name for entry in base.iterdir() if entry.is_file())

    def stringify(self, item: object) -> str:
        """Render one item of an artifact as text."""
        if isinstance(item, str):
            return item
        if isinstance(item, PreparedRequest):
            return self._stringify_request(item)
        if isinstance(item, ResponseEnvelope):
            return self._stringify_response(item)
        if isinstance(item, ApiRequestError):
            text = f"Request Exception: {item.message}"
            if item.response is not None:
                text += "\n\n" + self._stringify_response(item.response)
            return text
        if isinstance(item, BaseException):
            return f"Exception {type(item).__name__}: {item}"
        if isinstance(item, BaseModel):
            return item.model_dump_json(indent=4)
        return json.dumps(item, default=str)

    def _stringify_request(self, request: PreparedRequest) -> str:
        text = f"{request.method.value} {redact_url(request.url)}"
        headers = redact_headers(request.headers)
        if headers:
            text += "\n" + "\n".join(f"{key}: {value}" for key, value in headers.items())
        if request.body:
            text += "\n\n" + beautify_if_json(
                request.body.decode("utf-8", errors="replace")
            )
        return text

    def _stringify_response(self, response: ResponseEnvelope) -> str:
        text = f"Response Status Code {response.status_code}\n\n"
        interesting = [
            (key, value)
            for key, values in response.headers.items()
            if key.lower() in self._interesting
            for value in values
        ]
        if interesting:
            text += "Response headers include:\n"
            text += "".join(f"{key}: {value}\n" for key, value in interesting)
            text += "\n"
        if not response.body:
            return text + "Empty Response Body"
        return text + beautify_if_json(response.text)
