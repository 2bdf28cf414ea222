"""HTML generation: footnotes, TOC sections, glossary links, and page files"""

import re
import traceback
from pathlib import Path, PurePosixPath
from typing import Optional

from markdown_it import MarkdownIt

from mdguide.config import BASE_LANG
from mdguide.core.context import Context
from mdguide.core.emit import plain_text_from_tokens
from mdguide.core.lexer import lex_blocks
from mdguide.core.links import check_link_syntax
from mdguide.core.models import HtmlPage, MarkdownPage, TokenKind
from mdguide.core.search import ANCHOR_NAME_RE
from mdguide.core.templates import make_environment
from mdguide.core.toc import TocPage, TocSection, TocSeparator
from mdguide.core.utils.fs import write_output_file


FOOTNOTE_RE = re.compile(r'(\s*)(footnote|footnote-ref):([a-z0-9_]+)')
GLOSSARY_HREF_RE = re.compile(r'^glossary:(\w+)')
SECTION_NUMBER_RE = re.compile(r'^(\d+\.)\s+(.*)')
EXTERNAL_HREF_RE = re.compile(r'(href="http[^"]*")')
IFRAME_RE = re.compile(r'<iframe.*/iframe>')
PAGE_LINK_RE = re.compile(r'href="((?!http)[^"]*\.html)(#\w+)"')

# Left out of the combined (print) document
COMPLETE_EXCLUDED = ('changelog',)

LANG_ENDONYMS = {
    'en': 'English',
    'cs': 'Čeština',
    'de': 'Deutsch',
    'es': 'Español',
    'it': 'Italiano',
    'nb': 'Norsk&nbsp;Bokmål',
    'pt': 'Português',
}


def html_rel_path(md_rel_path: str) -> str:
    return re.sub(r'\.md$', '.html', md_rel_path)


def generate_html(context: Context, md_rel_path: str, md_page: MarkdownPage) -> HtmlPage:
    """Convert a page's final Markdown to HTML.

    Also registers the page (and its `##` sections) in the TOC and feeds the
    Markdown to the language's search index.
    """
    base_name = PurePosixPath(md_rel_path).stem
    rel_path = html_rel_path(md_rel_path)

    context.set_current_page(md_rel_path)
    try:
        md = convert_footnotes(context, base_name, md_page.raw)

        sections = []
        for token in lex_blocks(md, preset=context.settings.parser_config):
            if token.kind is TokenKind.heading and token.depth == 2:
                m = ANCHOR_NAME_RE.search(token.raw)
                anchor = f"#{m.group(1)}" if m else ''
                sections.append(TocSection(plain_text_from_tokens(token.children), f"{rel_path}{anchor}"))

        title = context.get_block_text(f"{base_name}__title") or base_name
        context.toc.add_page(rel_path, base_name, title, sections)
        context.search_index.add_markdown_page(md, rel_path)

        body = render_markdown(context, md)
        check_link_syntax(context, body)
    finally:
        context.set_current_page(None)

    return HtmlPage(base_name=base_name, rel_path=rel_path, body=body)


def convert_footnotes(context: Context, base_name: str, md: str) -> str:
    """Turn `footnote-ref:key` / `footnote:key` markers into numbered links to each other."""
    ref_keys: list[str] = []
    note_keys: list[str] = []

    def repl(m: re.Match) -> str:
        ws, cmd, key = m.groups()
        note_name = f"{base_name}__footnote_{key}"
        ref_name = f"{base_name}__footnote_ref_{key}"
        if cmd == 'footnote-ref':
            if key in ref_keys:
                raise context.error(f"Footnote ref already defined for {key}")
            ref_keys.append(key)
            # Leading whitespace is dropped so the number follows the sentence directly
            return f'<a name="{ref_name}"></a>[<sup>{len(ref_keys)}</sup>](#{note_name}) '
        if key in note_keys:
            raise context.error(f"Footnote already defined for {key}")
        note_keys.append(key)
        return f'{ws}<a name="{note_name}"></a>[[{len(note_keys)}](#{ref_name})]:'

    md = FOOTNOTE_RE.sub(repl, md)

    for key in ref_keys:
        if key not in note_keys:
            raise context.error(f"Footnote ref references unknown footnote: id={key}")
    for key in note_keys:
        if key not in ref_keys:
            raise context.error(f"Footnote references unknown footnote ref: id={key}")
    return md


def render_markdown(context: Context, md: str) -> str:
    """Render page Markdown with glossary tooltips and scrollable tables."""
    parser = MarkdownIt(context.settings.parser_config, options_update={"linkify": False})

    def link_open(self, tokens, idx, options, env):
        token = tokens[idx]
        m = GLOSSARY_HREF_RE.match(token.attrGet('href') or '')
        if not m:
            return self.renderToken(tokens, idx, options, env)
        term = m.group(1)
        tooltip = context.get_block_text(f"glossary__{term}__def")
        if tooltip is None:
            raise context.error(f"No glossary definition found for key={term}")
        env['glossary_tooltip'] = parser.renderInline(tooltip).replace('\n', '<br/>')
        token.attrSet('href', f"./glossary.html#glossary__{term}")
        token.attrSet('class', 'glossary-link')
        return self.renderToken(tokens, idx, options, env)

    def link_close(self, tokens, idx, options, env):
        tooltip = env.pop('glossary_tooltip', None)
        if tooltip is None:
            return self.renderToken(tokens, idx, options, env)
        return f'<span class="tooltip"><span class="tooltip-arrow"> </span>{tooltip}</span></a>'

    def table_open(self, tokens, idx, options, env):
        return '<div class="table-container">\n' + self.renderToken(tokens, idx, options, env)

    def table_close(self, tokens, idx, options, env):
        return self.renderToken(tokens, idx, options, env) + '</div>\n'

    parser.add_render_rule("link_open", link_open)
    parser.add_render_rule("link_close", link_close)
    parser.add_render_rule("table_open", table_open)
    parser.add_render_rule("table_close", table_close)
    return parser.render(md, {})


# --- page files ---

def _base_path(rel_path: str) -> str:
    depth = rel_path.count('/')
    return '/'.join(['..'] * depth) if depth else '.'


def _sidebar(context: Context, current_rel_path: str) -> list[dict]:
    items = []
    for item in context.toc.items:
        if isinstance(item, TocSeparator):
            items.append({'separator': True})
            continue
        current = item.rel_path == current_rel_path
        sections = []
        if current:
            for section in item.sections:
                m = SECTION_NUMBER_RE.match(section.title)
                bullet, title = (m.group(1), m.group(2)) if m else ('&bull;', section.title)
                sections.append({'rel_path': section.rel_path, 'bullet': bullet, 'title': title})
        items.append({
            'separator': False, 'current': current,
            'rel_path': item.rel_path, 'title': item.title, 'sections': sections,
        })
    return items


def _neighbors(context: Context, rel_path: str) -> tuple[Optional[TocPage], Optional[TocPage]]:
    pages = context.toc.pages
    index = next((i for i, page in enumerate(pages) if page.rel_path == rel_path), None)
    if index is None:
        return None, None
    prev_page = pages[index - 1] if index > 0 else None
    next_page = pages[index + 1] if index < len(pages) - 1 else None
    return prev_page, next_page


def _lang_links(context: Context, base_path: str, rel_path: str) -> list[dict]:
    if not context.settings.langs:
        return []
    return [
        {
            'current': code == context.lang,
            'href': f"{base_path}/../../{code}/latest/{rel_path}",
            'name': LANG_ENDONYMS.get(code, code),
        }
        for code in [BASE_LANG, *context.settings.lang_codes]
    ]


def write_html_file(context: Context, project_dir: Path, html_page: HtmlPage, template_name: str = 'default') -> Path:
    """Render a page through its template into <out_dir>/<lang>/latest."""
    base_path = _base_path(html_page.rel_path)
    body = EXTERNAL_HREF_RE.sub(r'target="_blank" rel="noopener noreferrer" \1', html_page.body)

    top_level_title = context.get_block_text('index__title') or context.settings.app_name
    page_title = context.get_block_text(f"{html_page.base_name}__title") or top_level_title
    if page_title != top_level_title:
        page_title = f"{page_title} &mdash; {top_level_title}"

    prev_page, next_page = _neighbors(context, html_page.rel_path)
    template = make_environment(project_dir).get_template(f"{template_name}.html")
    html = template.render(
        lang=context.lang,
        base_name=html_page.base_name,
        base_path=base_path,
        page_title=page_title,
        top_level_title=top_level_title,
        search_index_path=f"search_index_{context.lang}.js",
        search_placeholder=context.get_block_text('search_placeholder') or 'Search',
        search_results_title=context.get_block_text('search_results_title') or 'Search results',
        search_results_empty_message=context.get_block_text('search_results_empty_message') or 'No results',
        sidebar=_sidebar(context, html_page.rel_path),
        lang_title=context.get_block_text('sidebar_language') or 'Language',
        lang_links=_lang_links(context, base_path, html_page.rel_path),
        prev_page=prev_page,
        next_page=next_page,
        prev_label=context.get_block_text('pagination_previous') or 'Previous',
        next_label=context.get_block_text('pagination_next') or 'Next',
        body=body,
    )
    out_path = context.out_dir(project_dir) / html_page.rel_path
    write_output_file(out_path, html)
    return out_path


def complete_body_pages(context: Context, html_pages: list[HtmlPage]) -> list[dict]:
    """Title page, TOC page, then every page with links rewritten to in-document anchors."""
    title = context.get_block_text('index__title') or context.settings.app_name
    title_page = (
        '<div style="width: 100%; margin: 420px 0 300px 0;">\n'
        f'<p style="text-align: center; font-weight: 700; font-size: 3em;">{title}</p>\n'
    )
    if context.settings.author:
        title_page += f'<p style="text-align: center; font-size: 1.5em;">{context.settings.author}</p>\n'
    title_page += '</div>'

    toc_lines = []
    for item in context.toc.items:
        if isinstance(item, TocSeparator):
            toc_lines.append('<div class="toc-spacer"></div>')
        elif item.base_name not in COMPLETE_EXCLUDED:
            page_title = context.get_block_text('pdf_introduction') if item.base_name == 'index' else item.title
            if page_title is not None:
                toc_lines.append(f'<a href="#{item.base_name}">{page_title}</a>')
    toc_title = context.get_block_text('pdf_table_of_contents') or 'Contents'
    toc_page = f'<h1 style="margin-top: 80px;">{toc_title}</h1>\n<div style="margin-left: 20px;">\n'
    toc_page += ''.join(f"{line}\n<br/>\n" for line in toc_lines)
    toc_page += '</div>'

    pages = [{'base_name': '_title', 'body': title_page}, {'base_name': '_toc', 'body': toc_page}]
    for html_page in html_pages:
        if html_page.base_name in COMPLETE_EXCLUDED:
            continue
        body = IFRAME_RE.sub('', html_page.body)
        body = PAGE_LINK_RE.sub(r'href="\2"', body)
        pages.append({'base_name': html_page.base_name, 'body': body})
    return pages


def write_complete_html_file(context: Context, project_dir: Path, html_pages: list[HtmlPage]) -> Path:
    """Write complete.html, all pages in one document for printing."""
    template = make_environment(project_dir).get_template('complete.html')
    html = template.render(
        lang=context.lang,
        title=context.get_block_text('index__title') or context.settings.app_name,
        pages=complete_body_pages(context, html_pages),
    )
    out_path = context.out_dir(project_dir) / 'complete.html'
    write_output_file(out_path, html)
    return out_path


def write_error_html_file(context: Context, project_dir: Path, md_rel_path: str, error: BaseException) -> Path:
    """Write an error report in place of a page (development builds only)."""
    template = make_environment(project_dir).get_template('error.html')
    html = template.render(
        message=str(error),
        stack=''.join(traceback.format_exception(type(error), error, error.__traceback__)),
    )
    out_path = context.out_dir(project_dir) / html_rel_path(md_rel_path)
    write_output_file(out_path, html)
    return out_path
