"""
Standalone SVG snapshot of a view (no script, no transitions).
"""
from flask import render_template_string

SVG_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="{{ v.width }}" height="{{ v.height }}" viewBox="0 0 {{ v.width }} {{ v.height }}" font-family="sans-serif">
  <defs>
    <marker id="arrowhead" viewBox="0 -5 10 10" refX="8" refY="0" markerWidth="6" markerHeight="6" orient="auto">
      <path d="M0,-5L10,0L0,5" fill="{{ t.point }}"/>
    </marker>
  </defs>
  <rect width="100%" height="100%" fill="{{ t.background }}"/>
  <g transform="translate({{ v.margin.left }}, {{ v.margin.top }})">
    <g class="grid x" stroke="{{ t.grid }}" stroke-dasharray="3,3">
      {% for tick in v.x_axis.ticks %}<line x1="{{ tick.pos }}" x2="{{ tick.pos }}" y1="0" y2="{{ v.inner_height }}"/>{% endfor %}
    </g>
    <g class="grid y" stroke="{{ t.grid }}" stroke-dasharray="3,3">
      {% for tick in v.y_axis.ticks %}<line x1="0" x2="{{ v.inner_width }}" y1="{{ tick.pos }}" y2="{{ tick.pos }}"/>{% endfor %}
    </g>
    <g class="x-axis" fill="{{ t.text }}" font-size="10" text-anchor="middle">
      <line x1="0" x2="{{ v.inner_width }}" y1="{{ v.inner_height }}" y2="{{ v.inner_height }}" stroke="{{ t.text }}"/>
      {% for tick in v.x_axis.ticks %}<text x="{{ tick.pos }}" y="{{ v.inner_height + 18 }}">{{ tick.label }}</text>{% endfor %}
    </g>
    <g class="y-axis" fill="{{ t.text }}" font-size="10" text-anchor="end">
      <line x1="0" x2="0" y1="0" y2="{{ v.inner_height }}" stroke="{{ t.text }}"/>
      {% for tick in v.y_axis.ticks %}<text x="-9" y="{{ tick.pos }}" dy="0.32em">{{ tick.label }}</text>{% endfor %}
    </g>
    <text x="{{ v.inner_width / 2 }}" y="{{ v.inner_height + 40 }}" text-anchor="middle" fill="{{ t.text }}">{{ v.x_axis.title }}</text>
    <text transform="rotate(-90)" x="{{ -v.inner_height / 2 }}" y="-60" text-anchor="middle" fill="{{ t.text }}">{{ v.y_axis.title }}</text>
    <g class="links" fill="none" stroke="{{ t.point }}" stroke-width="1" opacity="0.3">
      {% for link in v.links %}<path class="link" d="{{ link.d }}" marker-end="url(#arrowhead)"><title>{{ link.source_display }} → {{ link.target_display }}: {{ link.value }}</title></path>
      {% endfor %}
    </g>
    {% for p in v.points if p.visible %}
    <g class="point-group" transform="translate({{ p.x }},{{ p.y }})">
      <circle r="{{ p.r }}" fill="{{ t.focal if p.focal else t.point }}" opacity="0.2"/>
      <circle r="{{ v.dot_radius }}" fill="{{ t.focal if p.focal else t.point }}"/>
    </g>
    <text class="label" x="{{ p.x }}" y="{{ p.label_y }}" text-anchor="middle" font-size="10" fill="{{ t.text }}">{{ p.displayName }}</text>
    {% endfor %}
  </g>
</svg>
"""


def render_svg(view: dict) -> str:
    return render_template_string(SVG_TEMPLATE, v=view, t=view["theme"])
