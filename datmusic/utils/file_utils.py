"""
File Utilities
Safe download names
"""
import re


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """
    Create a safe filename for a Content-Disposition header

    Args:
        filename: Original filename (usually "Artist - Title.mp3")
        max_length: Maximum filename length (default 255)

    Returns:
        Sanitized filename
    """
    # Windows: < > : " / \ | ? * plus control characters
    invalid_chars = r'[<>:"/\\|?*\x00-\x1f]'
    safe = re.sub(invalid_chars, '_', filename)
    safe = re.sub(r'\s+', ' ', safe)

    safe = safe.strip('. ')

    reserved = {
        'CON', 'PRN', 'AUX', 'NUL',
        'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
        'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
    }

    name_parts = safe.rsplit('.', 1)
    base_name = name_parts[0].upper()

    if base_name in reserved:
        safe = f"_{safe}"

    # Truncate if too long (preserve extension if possible)
    if len(safe) > max_length:
        if len(name_parts) > 1:
            ext = name_parts[1]
            safe = name_parts[0][:max_length - len(ext) - 1] + '.' + ext
        else:
            safe = safe[:max_length]

    return safe or 'unnamed'


def audio_filename(artist: str, title: str, extension: str = "mp3") -> str:
    """Human readable download name: "Artist - Title.mp3"."""
    stem = sanitize_filename(f"{artist} - {title}".strip(" -"), max_length=250 - len(extension))
    return f"{stem}.{extension}"
