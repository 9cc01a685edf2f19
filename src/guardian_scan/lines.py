"""Line splitting shared by the scanner and the health calculator."""


def split_lines(text: str) -> list[str]:
    """Split source text into lines.

    Empty text has no lines. Lines are separated by ``\\n``; a single trailing
    newline ends the last line instead of starting a new empty one, and a
    trailing ``\\r`` is dropped from each line so CRLF input numbers the same
    as LF input.

    Both line numbers in findings and ``total_lines`` in metrics come from
    this function, so the two always agree.
    """
    if not text:
        return []

    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()

    return [line[:-1] if line.endswith("\r") else line for line in lines]
