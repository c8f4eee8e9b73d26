"""
Parsing and formatting of human-friendly context sizes such as ``8k`` or ``1M``.
"""
from ollama_ctx.errors import SizeParseError

KIB = 1024
MIB = 1024 * 1024

SIZE_SUFFIXES = {
    "k": KIB,
    "m": MIB,
}

THOUSANDS_SEPARATORS = ".,"

def parse_size(token):
    """
    Convert a size token into an integer count.

    Thousands separators ('.' and ',') are stripped first, then the token is
    case-folded and an optional trailing 'k' (x1024) or 'm' (x1024^2) suffix
    is applied to the leading digits.

    Args:
        token (str): Size token, e.g. "8k", "1M", "131072" or "131,072"

    Returns:
        int: The parsed count

    Raises:
        SizeParseError: If no digits remain or non-digit characters are present
    """
    if token is None:
        raise SizeParseError("Size value is missing")

    cleaned = str(token).strip()
    for separator in THOUSANDS_SEPARATORS:
        cleaned = cleaned.replace(separator, "")
    cleaned = cleaned.lower()

    multiplier = 1
    if cleaned and cleaned[-1] in SIZE_SUFFIXES:
        multiplier = SIZE_SUFFIXES[cleaned[-1]]
        cleaned = cleaned[:-1]

    # str.isdigit() accepts superscripts and other unicode digits
    if not cleaned or not all(c in "0123456789" for c in cleaned):
        raise SizeParseError(f"Invalid size value: '{token}'")

    return int(cleaned) * multiplier

def format_size_tag(count):
    """
    Format a count as a compact tag used in generated model names.

    Args:
        count (int): Positive count, e.g. 131072

    Returns:
        str: "128k", "1m" or the raw digits when not a multiple of 1024
    """
    if count > 0 and count % MIB == 0:
        return f"{count // MIB}m"
    if count > 0 and count % KIB == 0:
        return f"{count // KIB}k"
    return str(count)
