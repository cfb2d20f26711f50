from urllib.parse import quote
from jinja2 import Environment, select_autoescape
from gitserve.repo.object_model import *

# Renders the HTML directory listing of a tree.
# Utilizes jinja2 with autoescaping, so entry names and the url prefix are always HTML-escaped.
# Entry names are arbitrary bytes (decoded with 'surrogateescape'): links percent-encode those bytes,
# and the visible names replace whatever is not valid utf-8.

_LISTING_TEMPLATE = """<html>
<body>
<ul>
{%- for entry in entries %}
<li><a href="{{ prefix | url_path }}/{{ entry.name | url_segment }}{% if entry.kind == 'tree' %}/{% endif %}">{{ entry.name | display_name }}</a></li>
{%- endfor %}
</ul>
</body>
</html>
"""

def _to_bytes(value:str) -> bytes:
    return value.encode('utf-8', errors='surrogateescape')

def url_path(value:str) -> str:
    return quote(_to_bytes(value), safe="/")

def url_segment(value:str) -> str:
    return quote(_to_bytes(value), safe="")

def display_name(value:str) -> str:
    return _to_bytes(value).decode('utf-8', errors='replace')

env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))
env.filters["url_path"] = url_path
env.filters["url_segment"] = url_segment
env.filters["display_name"] = display_name
_template = env.from_string(_LISTING_TEMPLATE)

def render_listing(entries:Tree, url_prefix:str) -> bytes:
    """Returns an HTML page with one link per entry, links are '<url_prefix>/<name>' ('/' appended for trees)."""
    rendered = _template.render(entries=entries, prefix=url_prefix)
    return rendered.encode('utf-8')
