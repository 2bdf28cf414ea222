"""Built-in jinja2 page templates; a project can override any of them in <project>/templates"""

from pathlib import Path

from jinja2 import ChoiceLoader, DictLoader, Environment, FileSystemLoader, StrictUndefined


PROJECT_TEMPLATE_DIR = "templates"

DEFAULT_TEMPLATE = """\
<!DOCTYPE html>
<html lang="{{ lang }}">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{ page_title }}</title>
<script src="{{ base_path }}/{{ search_index_path }}"></script>
</head>
<body class="{{ base_name }}">
<div id="sidebar">
<a class="sidebar-title" href="{{ base_path }}/index.html">{{ top_level_title }}</a>
<input id="search-field" type="search" placeholder="{{ search_placeholder }}">
{%- for item in sidebar %}
{%- if item.separator %}
<hr class="separator"/>
{%- else %}
<a {% if item.current %}class="current" {% endif %}href="{{ base_path }}/{{ item.rel_path }}">{{ item.title }}</a>
{%- for section in item.sections %}
<a class="section" href="{{ base_path }}/{{ section.rel_path }}"><span class="bullet">{{ section.bullet }}</span><span class="link-text">{{ section.title }}</span></a>
{%- endfor %}
{%- endif %}
{%- endfor %}
{%- if lang_links %}
<div class="sidebar-footer">
<div class="sidebar-footer-title">{{ lang_title }}</div>
{%- for link in lang_links %}
<a {% if link.current %}class="current" {% endif %}href="{{ link.href }}">{{ link.name }}</a>
{%- endfor %}
</div>
{%- endif %}
</div>
<div id="search-results-container" style="display: none;">
<h1>{{ search_results_title }}</h1>
<div id="search-results-content"></div>
<div id="search-results-empty">{{ search_results_empty_message }}</div>
</div>
<div id="content">
{{ body }}
{%- if prev_page or next_page %}
<div class="pagination-controls">
{%- for kind, page, label in [("prev", prev_page, prev_label), ("next", next_page, next_label)] %}
{%- if page %}
<a class="pagination-link pagination-{{ kind }}" href="{{ base_path }}/{{ page.rel_path }}"><div class="pagination-sublabel">{{ label }}</div><div class="pagination-label-row"><div class="pagination-label">{{ page.title }}</div></div></a>
{%- else %}
<div class="spacer-flex"></div>
{%- endif %}
{%- endfor %}
</div>
{%- endif %}
</div>
</body>
</html>
"""

COMPLETE_TEMPLATE = """\
<!DOCTYPE html>
<html lang="{{ lang }}">
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body class="complete">
{%- for page in pages %}
<div class="page {{ page.base_name }}">
{{ page.body }}
</div>
<div class="page-break"></div>
{%- endfor %}
</body>
</html>
"""

ERROR_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Build error</title>
</head>
<body class="error">
<h1>Build error</h1>
<pre class="error-message">{{ message | e }}</pre>
<pre class="error-stack">{{ stack | e }}</pre>
</body>
</html>
"""

TEMPLATES = {
    "default.html": DEFAULT_TEMPLATE,
    "complete.html": COMPLETE_TEMPLATE,
    "error.html": ERROR_TEMPLATE,
}


def make_environment(project_dir: Path) -> Environment:
    """Templates from <project_dir>/templates take precedence over the built-in ones."""
    loader = ChoiceLoader([
        FileSystemLoader(str(Path(project_dir) / PROJECT_TEMPLATE_DIR)),
        DictLoader(TEMPLATES),
    ])
    return Environment(loader=loader, undefined=StrictUndefined, keep_trailing_newline=True)
