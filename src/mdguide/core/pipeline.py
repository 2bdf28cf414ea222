"""Build orchestration: base strings, per-language pages, saved translations, error pages"""

import logging
import re
from pathlib import Path

from mdguide.config import BASE_LANG, LangConfig, Settings
from mdguide.core.context import Context
from mdguide.core.html import generate_html, write_complete_html_file, write_error_html_file, write_html_file
from mdguide.core.models import HtmlPage, MarkdownPage
from mdguide.core.parse import parse_markdown_page
from mdguide.core.translation import read_po_file, write_base_po_file
from mdguide.core.utils.fs import prepare_out_dir, read_text_file, write_output_file


logger = logging.getLogger(__name__)

LOCALIZATION_DIR = 'localization'
PO_FILE = 'docs.po'
SAVED_FILE = 'saved.md'
TOC_SEPARATOR = '-'

SAVED_PAGE_RE = re.compile(r'<!-- BEGIN-PAGE\[([A-Za-z\-_./]+?)\] -->([\s\S]*?)<!-- END-PAGE -->')


def _version_tuple(version: str) -> tuple[int, ...]:
    """'25.1.0' -> (25, 1, 0); non-numeric parts count as 0."""
    return tuple(int(p) if p.isdigit() else 0 for p in version.split('.'))


def is_version_older(version: str, base_version: str) -> bool:
    a, b = _version_tuple(version), _version_tuple(base_version)
    width = max(len(a), len(b))
    return a + (0,) * (width - len(a)) < b + (0,) * (width - len(b))


def lang_dir(project_dir: Path, lang: str) -> Path:
    return Path(project_dir) / LOCALIZATION_DIR / lang


def parse_defs(context: Context, project_dir: Path) -> None:
    """Register the shared string definitions in the English context."""
    for def_path in context.settings.defs:
        parse_markdown_page(context, project_dir, def_path)


def build_docs(settings: Settings, project_dir: Path) -> list[Path]:
    """Build every language; returns the written HTML files."""
    project_dir = Path(project_dir)
    en_context = Context(settings, BASE_LANG)
    try:
        parse_defs(en_context, project_dir)
        return build_langs(en_context, project_dir)
    except (ValueError, OSError) as e:
        handle_error(en_context, project_dir, e)
        return []


def build_langs(en_context: Context, project_dir: Path) -> list[Path]:
    """Build English first (it populates the base blocks), then each configured language."""
    settings = en_context.settings
    written: list[Path] = []
    for lang_config in [LangConfig(code=BASE_LANG, version=settings.version), *settings.langs]:
        lang = lang_config.code
        po_path = lang_dir(project_dir, lang) / PO_FILE
        if lang == BASE_LANG:
            context = en_context
        else:
            context = en_context.derive(lang, read_po_file(po_path))

        logger.info("Building lang=%s version=%s", lang, lang_config.version)
        written.extend(build_lang(context, lang_config, project_dir))

        if lang == BASE_LANG and settings.langs:
            write_base_po_file(po_path, context.blocks)
    return written


def build_lang(context: Context, lang_config: LangConfig, project_dir: Path) -> list[Path]:
    """Build all pages, the search index, and complete.html for one language."""
    settings = context.settings
    use_saved = is_version_older(lang_config.version, settings.version)
    if use_saved:
        logger.info(
            "Translation for lang=%s (%s) lags base version %s; using saved content",
            context.lang, lang_config.version, settings.version,
        )

    out_dir = context.out_dir(project_dir)
    prepare_out_dir(out_dir)

    # All pages are parsed before any HTML is written since every page
    # carries the complete TOC.
    saved_pages = read_saved_markdown(context, project_dir) if use_saved else {}
    md_pages: dict[str, MarkdownPage] = {}
    html_pages: list[HtmlPage] = []
    for md_path in settings.pages:
        if md_path == TOC_SEPARATOR:
            context.toc.add_separator()
            continue

        if use_saved and md_path not in settings.untranslated:
            md_page = saved_pages.get(md_path)
            if md_page is None:
                # Page is newer than the saved translation
                logger.info("Skipping page=%s for lang=%s (not in saved content)", md_path, context.lang)
                continue
        else:
            md_page = parse_markdown_page(context, project_dir, md_path)

        md_pages[md_path] = md_page
        html_pages.append(generate_html(context, md_path, md_page))

    write_output_file(out_dir / f"search_index_{context.lang}.js", context.search_index.get_index_js_content())

    written = [write_html_file(context, project_dir, page) for page in html_pages]
    written.append(write_complete_html_file(context, project_dir, html_pages))

    if not context.is_base and not use_saved:
        write_saved_markdown(context, project_dir, md_pages)
    return written


def read_saved_markdown(context: Context, project_dir: Path) -> dict[str, MarkdownPage]:
    """Read the frozen translated pages from localization/<lang>/saved.md."""
    content = read_text_file(lang_dir(project_dir, context.lang) / SAVED_FILE)
    return {m.group(1): MarkdownPage(raw=m.group(2)) for m in SAVED_PAGE_RE.finditer(content)}


def write_saved_markdown(context: Context, project_dir: Path, md_pages: dict[str, MarkdownPage]) -> Path:
    """Freeze the translated pages so an older translation can be rebuilt later."""
    parts = []
    for md_path, md_page in md_pages.items():
        # Untranslated pages always come from the current English source
        if md_path in context.settings.untranslated:
            continue
        parts.append(f"<!-- BEGIN-PAGE[{md_path}] -->\n\n{md_page.raw.strip()}\n\n<!-- END-PAGE -->\n\n")
    path = lang_dir(project_dir, context.lang) / SAVED_FILE
    write_output_file(path, ''.join(parts))
    return path


def handle_error(en_context: Context, project_dir: Path, error: Exception) -> None:
    """Write the error into every page in development mode; re-raise in production."""
    settings = en_context.settings
    if settings.mode != 'development':
        raise error

    logger.error("Build failed: %s", error, exc_info=error)
    for lang in [BASE_LANG, *settings.lang_codes]:
        context = en_context if lang == BASE_LANG else en_context.derive(lang, {})
        prepare_out_dir(context.out_dir(project_dir))
        for md_path in settings.pages:
            if md_path != TOC_SEPARATOR:
                write_error_html_file(context, project_dir, md_path, error)


def write_strings(settings: Settings, project_dir: Path) -> tuple[Path, int]:
    """Parse every page in English and write the base catalog. Returns (path, block count)."""
    project_dir = Path(project_dir)
    context = Context(settings, BASE_LANG)
    parse_defs(context, project_dir)
    for md_path in settings.pages:
        if md_path != TOC_SEPARATOR:
            parse_markdown_page(context, project_dir, md_path)
    po_path = lang_dir(project_dir, BASE_LANG) / PO_FILE
    write_base_po_file(po_path, context.blocks)
    return po_path, len(context.blocks)
