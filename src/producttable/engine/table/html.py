import logging
from jinja2 import Environment, BaseLoader, TemplateError

from .errors import TableEngineError
from .output import RenderedOutput

logger = logging.getLogger(__name__)

TABLE_TEMPLATE = """
{%- macro cell(content) -%}
{%- if content.type == "link" -%}
<a href="{{ content.url }}">{{ content.text }}</a>
{%- elif content.type == "image" -%}
{%- if content.data.link %}<a href="{{ content.data.link }}">{% endif -%}
<img src="{{ content.url }}" alt="{{ content.text }}" loading="lazy">
{%- if content.data.link %}</a>{% endif -%}
{%- elif content.type == "price" -%}
{%- if content.data.active -%}
<del>{{ content.data.regular }}</del> <ins>{{ content.data.sale }}</ins>
{%- else -%}
{{ content.text }}
{%- endif -%}
{%- elif content.type == "stock" -%}
<span class="producttable-stock producttable-stock--{{ content.data.status }}">{{ content.text }}</span>
{%- elif content.type == "list" -%}
{%- for child in content.children -%}
{{ cell(child) }}{% if not loop.last %}{{ content.data.separator }}{% endif %}
{%- endfor -%}
{%- elif content.type == "composite" -%}
<div class="producttable-combined producttable-combined--{{ content.data.layout }}">
{%- for child in content.children %}<span>{{ cell(child) }}</span>{% endfor -%}
</div>
{%- elif content.type == "action" -%}
{%- if content.data.eligible and not content.data.requires_options -%}
{%- if content.data.quantity_selector %}<input type="number" class="producttable-qty" min="1" value="1">{% endif -%}
<button type="button" class="producttable-button" data-product-id="{{ content.data.item_id }}" data-method="{{ content.data.method }}" data-ajax="{{ content.data.ajax | lower }}">{{ content.text }}</button>
{%- elif content.url -%}
<a class="producttable-button" href="{{ content.url }}">{{ content.text }}</a>
{%- else -%}
<span class="producttable-unavailable">{{ content.text }}</span>
{%- endif -%}
{%- else -%}
{{ content.text }}
{%- endif -%}
{%- endmacro -%}
{%- set bulk = output.features.bulkSelect -%}
{%- set show_bulk = bulk and bulk.enabled -%}
<div class="producttable-wrapper producttable-responsive-{{ output.presentation.responsive_mode }}" id="{{ wrapper_id }}">
<style>{{ css }}</style>
{%- if output.features.search %}
<div class="producttable-search"><input type="search" class="producttable-search-input" placeholder="Search products"></div>
{%- endif %}
<table class="producttable">
<thead><tr>
{%- if show_bulk and bulk.position == "first" %}<th class="producttable-select"></th>{% endif -%}
{%- for col in output.columns -%}
<th class="producttable-col-{{ col.type }}{% if col.visibility_class %} {{ col.visibility_class }}{% endif %}"{% if col.width %} style="width: {{ col.width }}"{% endif %}>{% if col.show_heading %}{{ col.heading }}{% endif %}</th>
{%- endfor -%}
{%- if show_bulk and bulk.position == "last" %}<th class="producttable-select"></th>{% endif -%}
</tr></thead>
<tbody>
{%- for row in output.rows %}
<tr data-product-id="{{ row.item_id }}">
{%- if show_bulk and bulk.position == "first" %}<td class="producttable-select">{% if row.selectable %}<input type="checkbox" value="{{ row.item_id }}">{% endif %}</td>{% endif -%}
{%- for c in row.cells -%}
<td class="producttable-col-{{ columns_by_id[c.column_id].type }}{% if columns_by_id[c.column_id].visibility_class %} {{ columns_by_id[c.column_id].visibility_class }}{% endif %}">{{ cell(c.content) }}</td>
{%- endfor -%}
{%- if show_bulk and bulk.position == "last" %}<td class="producttable-select">{% if row.selectable %}<input type="checkbox" value="{{ row.item_id }}">{% endif %}</td>{% endif -%}
</tr>
{%- else %}
<tr><td colspan="{{ colspan }}">No products found.</td></tr>
{%- endfor %}
</tbody>
</table>
{%- if output.features.pagination and output.pagination.total_pages > 1 %}
<nav class="producttable-pagination producttable-pagination--{{ output.pagination.position }}">
{%- for p in range(1, output.pagination.total_pages + 1) -%}
{% if p == output.pagination.page %}<span class="current">{{ p }}</span>{% else %}<a href="#" data-page="{{ p }}">{{ p }}</a>{% endif %}
{%- endfor -%}
</nav>
{%- endif %}
</div>
"""

class HtmlRenderer:
    """Renders an embed/preview output as an HTML fragment."""
    def __init__(self):
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.template = self.env.from_string(TABLE_TEMPLATE)

    def render(self, output: RenderedOutput) -> str:
        if output.columns is None or output.presentation is None:
            raise TableEngineError("HTML rendering requires the header and presentation of the output.")

        wrapper_id = f"producttable-{output.table_id}" if output.table_id is not None else "producttable-preview"
        bulk = output.features.get("bulkSelect") or {}
        colspan = len(output.columns) + (1 if bulk.get("enabled") else 0)

        try:
            return self.template.render(
                output=output,
                wrapper_id=wrapper_id,
                css=output.presentation.to_css(f"#{wrapper_id}"),
                columns_by_id={col.id: col for col in output.columns},
                colspan=max(colspan, 1),
            ).strip()
        except TemplateError as e:
            logger.error(f"Table template rendering failed: {e}", exc_info=True)
            raise TableEngineError(f"Template rendering error: {e}")
