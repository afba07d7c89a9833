"""Parse git conflict markers into structured data."""

from dataclasses import dataclass

OURS_MARKER = "<<<<<<<"
BASE_MARKER = "|||||||"
SEPARATOR = "======="
THEIRS_MARKER = ">>>>>>>"


@dataclass
class MarkerBlock:
    """One conflict hunk from a file with merge markers.

    Section text keeps its line terminators. Line numbers are
    1-based and point at the opening and closing marker lines.
    """

    ours: str
    theirs: str
    base: str | None
    ours_ref: str
    theirs_ref: str
    start_line: int
    end_line: int


def has_markers(file_content: str) -> bool:
    """Return True if the text has both an opening and closing marker."""
    lines = file_content.splitlines()
    return (
        any(line.startswith(OURS_MARKER) for line in lines)
        and any(line.startswith(THEIRS_MARKER) for line in lines)
    )


def parse(file_content: str) -> list[MarkerBlock]:
    """Parse git conflict markers from file content.

    Handles both the standard two-way format and diff3 format
    (with a ||||||| base section).

    Args:
        file_content: Full file content with conflict markers

    Returns:
        List of MarkerBlock objects (one per conflict hunk in file)

    Raises:
        ValueError: If conflict markers are malformed
    """
    blocks = []
    lines = file_content.splitlines(keepends=True)
    i = 0

    while i < len(lines):
        if not lines[i].startswith(OURS_MARKER):
            i += 1
            continue

        ours_ref = lines[i][len(OURS_MARKER):].strip()

        # diff3 puts the base section between ours and the separator
        base_idx = None
        for j in range(i + 1, len(lines)):
            if lines[j].startswith(BASE_MARKER):
                base_idx = j
                break
            if lines[j].startswith(SEPARATOR):
                break

        separator_idx = None
        start = base_idx if base_idx is not None else i
        for j in range(start + 1, len(lines)):
            if lines[j].startswith(SEPARATOR):
                separator_idx = j
                break

        if separator_idx is None:
            raise ValueError(
                f"Malformed conflict at line {i + 1}: no separator found"
            )

        end_idx = None
        theirs_ref = ""
        for j in range(separator_idx + 1, len(lines)):
            if lines[j].startswith(THEIRS_MARKER):
                end_idx = j
                theirs_ref = lines[j][len(THEIRS_MARKER):].strip()
                break

        if end_idx is None:
            raise ValueError(
                f"Malformed conflict at line {i + 1}: no end marker found"
            )

        if base_idx is not None:
            ours = "".join(lines[i + 1:base_idx])
            base = "".join(lines[base_idx + 1:separator_idx])
        else:
            ours = "".join(lines[i + 1:separator_idx])
            base = None
        theirs = "".join(lines[separator_idx + 1:end_idx])

        blocks.append(MarkerBlock(
            ours=ours,
            theirs=theirs,
            base=base,
            ours_ref=ours_ref,
            theirs_ref=theirs_ref,
            start_line=i + 1,
            end_line=end_idx + 1,
        ))
        i = end_idx + 1

    return blocks
