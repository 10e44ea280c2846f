from lsprotocol.types import Position, Range


def extract_prefix(full_text: str, range: Range, cursor: Position) -> str:
    """
    Return the part of a name already typed before the cursor.

    Only a cursor on the name's first line and strictly right of its
    start column produces a prefix; anything else means "show all".
    A cursor past the end of the name yields the whole name.

    Example:
        name "getName" starting at column 4, cursor at column 7 -> "get"
    """
    if cursor.line != range.start.line:
        return ""
    if cursor.character <= range.start.character:
        return ""

    length = cursor.character - range.start.character
    length = max(0, min(length, len(full_text)))
    return full_text[:length]
