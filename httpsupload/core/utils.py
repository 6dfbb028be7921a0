"""Text and size helpers used when reporting upload results."""
from decimal import Decimal, ROUND_HALF_UP
from http import HTTPStatus
from typing import Optional

_KB = Decimal(1024)
_MB = Decimal(1024 * 1024)
_GB = Decimal(1024 * 1024 * 1024)

# Tags that start a new line when converted to plain text
_LINE_BREAK_TAGS = frozenset({'br', 'p', 'h1', 'h2', 'h3'})


def format_size(size: int) -> str:
    """
    Format a byte count for humans.
    
    Examples:
        >>> format_size(1)
        '1 byte'
        >>> format_size(1536)
        '2 KB'
        >>> format_size(5 * 1024 * 1024)
        '5.0 MB'
    """
    if size < 1024:
        return "1 byte" if size == 1 else f"{size} bytes"
    value = Decimal(size)
    if size < 1024 * 1024:
        return f"{(value / _KB).quantize(Decimal('1'), rounding=ROUND_HALF_UP)} KB"
    if size < 1024 * 1024 * 1024:
        return f"{(value / _MB).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)} MB"
    return f"{(value / _GB).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)} GB"


def strip_html(text: Optional[str]) -> Optional[str]:
    """
    Convert an HTML reply into plain text.
    
    Tags are removed, <br>, <p>, <h1>, <h2> and <h3> become line breaks and
    the contents of <style> elements are dropped. This is not an HTML parser;
    it is only meant to make error pages from web servers readable.
    
    Args:
        text: HTML text (None is passed through)
        
    Returns:
        Plain text
    """
    if not text:
        return text
    
    in_tag = False
    tag_ended = False
    ignore_contents = False
    tag_name = []
    output = []
    
    for ch in text:
        if not in_tag and ch == '<':
            # The tag name follows immediately after '<'
            in_tag = True
            tag_ended = False
            continue
        
        if in_tag:
            if ch in '/ >':
                tag_ended = True
            if not tag_ended:
                tag_name.append(ch)
            if ch == '>':
                in_tag = False
                name = ''.join(tag_name).lower()
                if name in _LINE_BREAK_TAGS:
                    output.append('\n')
                ignore_contents = name == 'style'
                tag_name.clear()
            continue
        
        if not ignore_contents:
            output.append(ch)
    
    return ''.join(output)


def status_text(status_code: int) -> str:
    """
    Describe an HTTP status code, e.g. '404 Not Found'.
    
    Unknown codes are reported as '<code> <unknown status code>'.
    """
    try:
        return f"{status_code} {HTTPStatus(status_code).phrase}"
    except ValueError:
        return f"{status_code} <unknown status code>"
