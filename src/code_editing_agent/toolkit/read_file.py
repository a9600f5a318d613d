"""Built-in ``read_file`` tool."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from code_editing_agent.exceptions import ToolExecutionError, ToolInputError
from code_editing_agent.toolkit.models import ToolDefinition


class ReadFileInput(BaseModel):
    """Arguments accepted by ``read_file``."""

    path: str = Field(
        description="The relative path of a file in the working directory."
    )


def read_file(raw_arguments: str | bytes) -> str:
    """Return the full contents of the file named in ``raw_arguments``.

    Bytes are decoded as UTF-8 with no newline translation, so CRLF and
    lone CR line endings come back unchanged.

    Raises:
        ToolInputError: If the payload is not valid JSON or ``path`` is
            missing or not a string.
        ToolExecutionError: If the file does not exist, is a directory,
            or cannot be read.
    """
    try:
        params = ReadFileInput.model_validate_json(raw_arguments)
    except ValidationError as exc:
        raise ToolInputError(f"failed to parse input: {exc}") from exc

    # Path("") is the working directory itself.
    try:
        data = Path(params.path).read_bytes()
    except OSError as exc:
        reason = exc.strerror or str(exc)
        raise ToolExecutionError(
            f"failed to read file {params.path}: {reason}"
        ) from exc
    return data.decode("utf-8", errors="replace")


READ_FILE = ToolDefinition(
    name="read_file",
    description=(
        "Read the contents of a given relative file path. Use this when you "
        "want to see what's inside a file. Do not use this with directory names."
    ),
    input_model=ReadFileInput,
    handler=read_file,
)
