"""Turn raw log file content into lines for evaluation."""

from pathlib import Path


def split_lines(content: str) -> list[str]:
    """Split log content on newline boundaries.

    Unlike ``str.splitlines``, a trailing newline produces a final empty
    line, and empty content produces a single empty line. Line content,
    including any carriage return from a CRLF ending, is left untouched.

    Args:
        content: The whole file content.

    Returns:
        List of lines, without the newline separators.
    """
    return content.split("\n")


def read_log_file(path: Path) -> str:
    """Read a log file from disk.

    Undecodable bytes are replaced rather than rejected. Line endings are
    returned untranslated.

    Raises:
        OSError: If the file can't be read.
    """
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        return f.read()
