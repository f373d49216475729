"""Error taxonomy for recording finalization and the catalog."""


class RecordingError(Exception):
    """Base class for all recording pipeline and catalog errors."""


class InputError(RecordingError):
    """Caller supplied bad or missing data."""


class MissingInputError(InputError):
    """A required input stream was not supplied."""


class NotFoundError(RecordingError):
    """Unknown recording id or track."""


class StorageError(RecordingError):
    """Filesystem or index failure."""


class TranscodeError(RecordingError):
    """The external encoder failed, timed out or could not be started."""

    def __init__(
        self,
        message: str,
        *,
        codec: str | None = None,
        returncode: int | None = None,
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.codec = codec
        self.returncode = returncode
        self.stderr = stderr
        self.timed_out = timed_out

    def __str__(self) -> str:
        details = []
        if self.codec:
            details.append(f"codec={self.codec}")
        if self.returncode is not None:
            details.append(f"exit={self.returncode}")
        if self.timed_out:
            details.append("timed out")
        base = super().__str__()
        return f"{base} ({', '.join(details)})" if details else base
