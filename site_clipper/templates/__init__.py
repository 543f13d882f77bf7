"""Clipping templates: the bundled default, loading and placeholder rendering."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from ..extraction import Metadata

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / 'default.md'

# Used when the bundled default.md cannot be read
FALLBACK_TEMPLATE = """---
title: "{{title}}"
source: {{url}}
author: {{author}}
published: {{date}}
description: "{{description}}"
---

# {{title}}

{{content}}
"""


@lru_cache(maxsize=None)
def get_default_template() -> str:
    """Load the bundled default template once per process."""
    try:
        return DEFAULT_TEMPLATE_PATH.read_text(encoding='utf-8')
    except OSError as e:
        logger.warning(f"Could not load default template from {DEFAULT_TEMPLATE_PATH}: {e}. "
                       "Using built-in default.")
        return FALLBACK_TEMPLATE


def load_template(path: Optional[Union[str, Path]]) -> str:
    """Read a template file, falling back to the default on any read error."""
    if not path:
        return get_default_template()
    try:
        return Path(path).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Error loading template file {path}: {e}. Using default template.")
        return get_default_template()


def render_template(template: Optional[str], metadata: Metadata, content: str) -> str:
    """Substitute the six placeholders; everything else passes through verbatim."""
    if template is None:
        template = get_default_template()
    replacements = [
        ('{{title}}', metadata.title),
        ('{{url}}', metadata.url),
        ('{{author}}', metadata.author or 'Unknown'),
        ('{{date}}', metadata.date),
        ('{{description}}', metadata.description or ''),
    ]
    for placeholder, value in replacements:
        template = template.replace(placeholder, value)
    # Content last so placeholder-like text inside the page survives
    return template.replace('{{content}}', content)
