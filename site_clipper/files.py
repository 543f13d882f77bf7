"""Safe file names and writing clippings to disk."""

import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

INVALID_CHARS = re.compile(r'[/\\?%*:|"<>]')
MAX_STEM_LENGTH = 200


def sanitize_filename(title: str) -> str:
    """Create a sanitized markdown file name from a title."""
    name = INVALID_CHARS.sub('-', title or '')
    name = re.sub(r'\s+', '-', name)
    name = re.sub(r'-+', '-', name).strip('-')
    name = name[:MAX_STEM_LENGTH].rstrip('-')
    return f"{name or 'untitled'}.md"


def persist(path: Union[str, Path], content: str) -> Path:
    """Write content to path, creating parent directories and overwriting any existing file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding='utf-8')
    logger.info(f"Saved to: {path}")
    return path
