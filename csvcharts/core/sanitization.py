"""
Sanitization of user-provided filenames and column names.
"""
import re

_CONTROL_CHARS = re.compile(r'[\x00-\x1f\x7f-\x9f]')


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Strip path components and control characters from an uploaded filename.

    Returns "unknown" when nothing usable is left.
    """
    if not filename:
        return "unknown"

    filename = filename.split('/')[-1].split('\\')[-1]
    filename = _CONTROL_CHARS.sub('', filename)
    filename = filename.strip('. ')

    return filename[:max_length] or "unknown"


def sanitize_for_logging(value: str, max_length: int = 500) -> str:
    """Make a value safe to interpolate into a log line."""
    if not value:
        return ""

    value = re.sub(r'[\r\n]', ' ', value)
    value = _CONTROL_CHARS.sub('', value)

    if len(value) > max_length:
        value = value[:max_length] + "..."

    return value


def clean_column_name(name: str) -> str:
    """Collapse newlines and repeated whitespace inside a header cell."""
    name = name.replace('\n', ' ').replace('\r', ' ')
    return ' '.join(name.split())


def validate_column_name(name: str) -> bool:
    """
    Validate that a column name is safe.

    Blocks control characters (other than tab/newline), path traversal and
    reserved Windows device names.
    """
    if not name or len(name) > 1000:
        return False

    dangerous_patterns = [
        r'\.\.',
        r'[\x00-\x08\x0b\x0c\x0e-\x1f]',
        r'^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])$',
    ]

    return not any(re.search(pattern, name, re.IGNORECASE) for pattern in dangerous_patterns)
