"""Post-serialization text passes: inline replacements, reference links, link syntax check"""

import logging
import re

from markdown_it.common.utils import normalizeReference

from mdguide.core.context import Context


logger = logging.getLogger(__name__)

# `:block_id:` (directives such as `def:key` have no leading colon)
REPLACEMENT_RE = re.compile(r':([a-z0-9_]+):')
REFERENCE_LINK_RE = re.compile(r'\[([^[]+)\]\[(\w+)\]')
# `[text] (url)`, `[text] [ref]`, and `[text] <a href...` once a shortcut ref has been rendered
INVALID_LINK_RE = re.compile(r'\[[^\[\]\n]+\]\s+(?:\([^)\n]*\)|\[[^\]\n]*\]|<a href)')


def translate_text_replacements(context: Context, md: str) -> str:
    """Replace `:block_id:` markers with the block text for the context language."""
    def repl(m: re.Match) -> str:
        block_id = m.group(1)
        if context.is_base:
            text = context.get_base_block_text(block_id)
        else:
            text = context.get_translated_block_text(block_id)
            if text is None:
                logger.warning("No translation found for lang=%s id=%s", context.lang, block_id)
                text = context.get_base_block_text(block_id)
        if text is None:
            raise context.error(f"Unknown replacement for id={block_id}")
        return text

    return REPLACEMENT_RE.sub(repl, md)


def resolve_reference_links(context: Context, md: str, links: dict[str, dict]) -> str:
    """Rewrite leftover `[text][id]` links to inline form using the page link table.

    The lexer resolves references in base-language text, so anything left over
    is either a typo in the source or a translation referring to a link id the
    page no longer defines.
    """
    def repl(m: re.Match) -> str:
        link = links.get(normalizeReference(m.group(2)))
        if link is None:
            raise context.error(
                f"Unresolved reference-style link found for lang={context.lang} link={m.group(0)}"
            )
        return f"[{m.group(1)}]({link['href']})"

    return REFERENCE_LINK_RE.sub(repl, md)


def check_link_syntax(context: Context, html: str) -> None:
    """Fail when rendered HTML still shows link syntax broken by a space."""
    fragments = INVALID_LINK_RE.findall(html)
    if not fragments:
        return
    msg = "Detected invalid Markdown link syntax in the generated HTML:\n"
    msg += "".join(f"{f}\n" for f in fragments)
    msg += (
        "To fix, ensure there are no spaces between link text and link url/reference, "
        "for example: [text](url) or [text][ref]"
    )
    raise context.error(msg)
