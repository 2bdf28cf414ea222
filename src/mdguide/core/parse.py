"""Per-page pipeline: frontmatter, directive processing, and Markdown regeneration"""

import re
from pathlib import Path
from typing import Any

import yaml

from mdguide.core.context import Context
from mdguide.core.emit import markdown_from_tokens
from mdguide.core.lexer import lex_page
from mdguide.core.links import resolve_reference_links, translate_text_replacements
from mdguide.core.models import MarkdownPage
from mdguide.core.process import ProcessState, process_tokens


FRONTMATTER_RE = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)
GLOSSARY_DEF_RE = re.compile(r'glossary__(\w+)__def')


def _strip_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter_dict, body) with YAML header removed."""
    m = FRONTMATTER_RE.match(text)
    if m:
        try:
            fm = yaml.safe_load(m.group(1)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML frontmatter: {e}") from e
        if not isinstance(fm, dict):
            raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
        return fm, text[m.end():]
    return {}, text


def _glossary_refs(context: Context) -> list[str]:
    """Reference definitions that let pages write `[text][glossary_term]`."""
    refs = []
    for block_id in context.blocks.ids():
        if m := GLOSSARY_DEF_RE.search(block_id):
            refs.append(f"[glossary_{m.group(1)}]: glossary:{m.group(1)}")
    return refs


def parse_markdown_page_content(context: Context, rel_path: str, content: str) -> MarkdownPage:
    """Run one page through the directive pipeline for the context language.

    English pages register their blocks; other languages substitute the
    translated blocks. The returned Markdown has all directives removed and
    all references resolved.
    """
    context.set_current_page(rel_path)
    try:
        try:
            frontmatter, body = _strip_frontmatter(content)
        except ValueError as e:
            raise context.error(str(e)) from e

        markdown = body + '\n\n' + '\n'.join(_glossary_refs(context))
        page = lex_page(markdown, context.settings.parser_config)

        state = ProcessState(mode='add' if context.is_base else 'translate')
        tokens = process_tokens(context, state, page.tokens)

        md = markdown_from_tokens(tokens, context.lang, context.error)
        md = translate_text_replacements(context, md)
        md = resolve_reference_links(context, md, page.links)
    finally:
        context.set_current_page(None)

    return MarkdownPage(raw=md, frontmatter=frontmatter)


def parse_markdown_page(context: Context, project_dir: Path, rel_path: str) -> MarkdownPage:
    """Read a page from the project directory and parse it."""
    content = (Path(project_dir) / rel_path).read_text(encoding='utf-8')
    return parse_markdown_page_content(context, rel_path, content)
