"""
Routes: the visualization page and the JSON endpoints its script calls.
"""
import logging

from flask import Response, jsonify, render_template_string, request

from .catalog import SOURCES, UnknownDatasetError, get_source
from .export import render_svg
from .focal import search_entities
from .loader import DatasetLoadError
from .state import AppState, InvalidActionError, initial_state, parse_action, reduce
from .view import build_view

logger = logging.getLogger(__name__)


PAGE_BODY = """
<style>
  .chart-wrap{position:relative}
  #chart svg{overflow:visible}
  .controls{position:absolute; right:40px; top:40px; max-height:80vh; width:400px; overflow-y:auto;
            padding:10px; border:1px solid var(--border); background:var(--bg); color:var(--fg);
            box-shadow:0 2px 5px rgba(0,0,0,.1); z-index:1000}
  .controls .section{padding:10px; border-bottom:1px solid var(--border)}
  .controls label{display:block; margin-bottom:5px}
  .controls input[type=range]{width:100%}
  .bubbles{display:flex; flex-wrap:wrap; gap:8px}
  .dataset-bubble{padding:5px 15px; border:2px solid var(--fg); border-radius:20px; cursor:pointer; transition:all .2s ease}
  .dataset-bubble:hover{background:var(--hover)}
  .dataset-bubble.selected{background:steelblue; color:white}
  .search-results{position:absolute; background:white; color:black; border:1px solid #ccc; max-height:150px;
                  overflow-y:auto; width:180px; z-index:1000}
  .search-results div{padding:5px; cursor:pointer}
  .search-results div:hover{background:#f0f0f0}
  .entity-list-header{cursor:pointer; user-select:none}
  .entity-control{margin:5px}
  .tooltip{position:absolute; background:white; color:black; padding:5px; border:1px solid #ccc;
           border-radius:3px; pointer-events:none}
  .load-error{padding:10px; color:#b91c1c}
</style>

<div class="chart-wrap">
  <div id="chart"></div>
  <div class="controls" id="controls">
    <div class="section">
      <label>Dataset:</label>
      <div class="bubbles" id="dataset-bubbles">
        {% for s in sources %}
          <div class="dataset-bubble" data-value="{{ s.key }}">{{ s.label }}</div>
        {% endfor %}
      </div>
    </div>
    <div class="section">
      <label for="darkModeToggle">Dark Mode:</label>
      <input type="checkbox" id="darkModeToggle" />
      <button type="button" id="export-svg" style="margin-left:10px">Download SVG</button>
    </div>
    <div class="section">
      <label>Line Threshold: <span id="threshold-value"></span></label>
      <input type="range" id="threshold" />
    </div>
    <div class="section">
      <div style="margin-bottom:10px">Select Focal Point</div>
      <div style="margin-bottom:15px">
        <input type="text" id="search" placeholder="Search..." style="width:100%;padding:5px;margin-bottom:5px" />
        <div class="search-results" id="search-results" style="display:none"></div>
      </div>
      <div style="margin-bottom:15px">
        <label>Number of Incoming References: <span id="incoming-value"></span></label>
        <input type="range" id="incoming" />
      </div>
      <div style="margin-bottom:15px">
        <label>Number of Outgoing References: <span id="outgoing-value"></span></label>
        <input type="range" id="outgoing" />
      </div>
    </div>
    <div class="section entity-list-header" id="entity-list-header">
      <span>Select Entities: </span><span id="collapse-arrow" style="font-size:.8em;margin-left:5px">▼</span>
    </div>
    <div id="entity-list"></div>
  </div>
</div>

<script src="https://d3js.org/d3.v7.min.js"></script>
<script>
  // ----- Data from server -----
  let state = {{ state | tojson }};
  const initialView = {{ view | tojson }};
  const initialError = {{ error | tojson }};

  let searchSeq = 0;
  let pending = Promise.resolve();
  let theme = initialView ? initialView.theme : null;
  let shownFocal = null;
  let svg = null, g = null, linksGroup = null;

  // Actions go out one at a time so each starts from the state the previous one produced.
  function dispatch(action) {
    pending = pending.then(() => send(action));
    return pending;
  }

  function send(action) {
    return fetch("{{ url_for('api_view') }}", {
      method: "POST",
      headers: { "Content-Type": "application/json" },
      body: JSON.stringify({ state, action })
    }).then(r => r.json().then(body => ({ ok: r.ok, body })))
      .then(({ ok, body }) => {
        if (!ok) { console.error("Error loading the view:", body.error); return; }
        const datasetChanged = body.state.dataset !== state.dataset;
        state = body.state;
        if (datasetChanged) { d3.select("#chart").selectAll("*").remove(); svg = null; }
        render(body.view);
      })
      .catch(err => console.error("Error loading the view:", err));
  }

  function showTooltip(event, html) {
    d3.selectAll(".tooltip").remove();
    d3.select("body").append("div").attr("class", "tooltip")
      .style("left", (event.pageX + 10) + "px").style("top", (event.pageY - 10) + "px")
      .style("opacity", 0).html(html)
      .transition().duration(200).style("opacity", 1);
  }

  function moveTooltip(event) {
    d3.select(".tooltip").style("left", (event.pageX + 10) + "px").style("top", (event.pageY - 10) + "px");
  }

  function hideTooltip() { d3.selectAll(".tooltip").remove(); }

  function ensureSvg(view) {
    if (svg) return;
    svg = d3.select("#chart").append("svg").attr("width", view.width).attr("height", view.height);
    svg.append("defs").append("marker").attr("id", "arrowhead")
      .attr("viewBox", "0 -5 10 10").attr("refX", 8).attr("refY", 0)
      .attr("markerWidth", 6).attr("markerHeight", 6).attr("orient", "auto")
      .append("path").attr("d", "M0,-5L10,0L0,5");
    g = svg.append("g").attr("transform", `translate(${view.margin.left}, ${view.margin.top})`);
    g.append("g").attr("class", "grid x").attr("transform", `translate(0, ${view.inner_height})`).style("stroke-dasharray", "3,3");
    g.append("g").attr("class", "grid y").style("stroke-dasharray", "3,3");
    g.append("g").attr("class", "x-axis").attr("transform", `translate(0, ${view.inner_height})`);
    g.append("g").attr("class", "y-axis");
    g.append("text").attr("class", "axis-title").attr("x", view.inner_width / 2).attr("y", view.inner_height + 40)
      .attr("text-anchor", "middle").text(view.x_axis.title);
    g.append("text").attr("class", "axis-title").attr("transform", "rotate(-90)")
      .attr("x", -view.inner_height / 2).attr("y", -60).attr("text-anchor", "middle").text(view.y_axis.title);
    linksGroup = g.append("g").attr("class", "links");
  }

  function scaleFrom(axis, range) {
    return d3.scaleLinear().domain(axis.domain).range(range);
  }

  function renderAxes(view, t) {
    const x = scaleFrom(view.x_axis, [0, view.inner_width]);
    const y = scaleFrom(view.y_axis, [view.inner_height, 0]);
    const xValues = view.x_axis.ticks.map(d => d.value);
    const yValues = view.y_axis.ticks.map(d => d.value);
    const xLabels = new Map(view.x_axis.ticks.map(d => [d.value, d.label]));
    const yLabels = new Map(view.y_axis.ticks.map(d => [d.value, d.label]));
    const ms = view.transition_ms;

    g.select(".grid.x").style("color", t.grid).transition().duration(ms)
      .call(d3.axisBottom(x).tickValues(xValues).tickSize(-view.inner_height).tickFormat(""));
    g.select(".grid.y").style("color", t.grid).transition().duration(ms)
      .call(d3.axisLeft(y).tickValues(yValues).tickSize(-view.inner_width).tickFormat(""));
    g.select(".x-axis").style("color", t.text).transition().duration(ms)
      .call(d3.axisBottom(x).tickValues(xValues).tickFormat(d => xLabels.get(d)));
    g.select(".y-axis").style("color", t.text).transition().duration(ms)
      .call(d3.axisLeft(y).tickValues(yValues).tickFormat(d => yLabels.get(d)));
    g.selectAll(".axis-title").style("fill", t.text);
  }

  function renderPoints(view, t) {
    const ms = view.transition_ms;
    const groups = g.selectAll(".point-group").data(view.points, d => d.name);
    const entered = groups.enter().append("g").attr("class", "point-group")
      .attr("transform", d => `translate(${d.x},${d.y})`)
      .on("mouseover", function (event, d) {
        d3.select(this).selectAll("circle").style("stroke", theme.text).style("stroke-width", "1px");
        showTooltip(event, `${d.displayName}<br>Incoming References: ${d.incomingRefs}`);
      })
      .on("mouseout", function () {
        d3.select(this).selectAll("circle").style("stroke", null).style("stroke-width", null);
        hideTooltip();
      })
      .on("dblclick", (event, d) => dispatch({ type: "hide_entity", name: d.name }));
    entered.append("circle").attr("class", "halo").style("opacity", 0.2);
    entered.append("circle").attr("class", "dot").attr("r", view.dot_radius);

    const all = entered.merge(groups);
    all.style("display", d => d.visible ? null : "none")
      .transition().duration(ms).attr("transform", d => `translate(${d.x},${d.y})`);
    all.select(".halo").style("fill", d => d.focal ? t.focal : t.point)
      .transition().duration(ms).attr("r", d => d.r);
    all.select(".dot").style("fill", d => d.focal ? t.focal : t.point);

    const labels = g.selectAll("text.label").data(view.points, d => d.name);
    labels.enter().append("text").attr("class", "label").attr("text-anchor", "middle")
      .style("font-size", "10px").attr("x", d => d.x).attr("y", d => d.label_y).text(d => d.displayName)
      .merge(labels)
      .style("fill", t.text)
      .style("display", d => d.visible ? null : "none")
      .transition().duration(ms).attr("x", d => d.x).attr("y", d => d.label_y);
  }

  function renderLinks(view, t) {
    svg.select("#arrowhead path").attr("fill", t.point);
    const links = linksGroup.selectAll(".link").data(view.links, d => d.id);
    links.exit().remove();
    links.enter().append("path").attr("class", "link")
      .attr("fill", "none").attr("stroke-width", 1).attr("marker-end", "url(#arrowhead)")
      .style("opacity", 0.3)
      .on("mouseover", function (event, d) {
        d3.select(this).style("opacity", 1).attr("stroke-width", 2);
        showTooltip(event, `${d.source_display} → ${d.target_display}<br>References: ${d.value}`);
      })
      .on("mousemove", moveTooltip)
      .on("mouseout", function () {
        d3.select(this).style("opacity", 0.3).attr("stroke-width", 1);
        hideTooltip();
      })
      .merge(links)
      .attr("stroke", t.point)
      .transition().duration(view.transition_ms).attr("d", d => d.d);
  }

  function renderControls(view, t) {
    const c = view.controls;
    d3.select("body").style("background-color", t.background).style("color", t.text);
    const root = document.documentElement.style;
    root.setProperty("--bg", t.background);
    root.setProperty("--fg", t.text);
    root.setProperty("--border", t.border);
    root.setProperty("--hover", t.hover);

    d3.selectAll(".dataset-bubble").classed("selected", function () { return this.dataset.value === state.dataset; });
    d3.select("#darkModeToggle").property("checked", state.dark_mode);

    for (const [id, spec] of [["threshold", c.threshold], ["incoming", c.incoming], ["outgoing", c.outgoing]]) {
      d3.select("#" + id).attr("min", spec.min).attr("max", spec.max).property("value", spec.value);
      d3.select(`#${id}-value`).text(spec.value);
    }
    const focalName = c.focal ? c.focal.name : null;
    if (focalName !== shownFocal) {
      d3.select("#search").property("value", c.focal ? c.focal.displayName : "");
      shownFocal = focalName;
    }

    d3.select("#entity-list").style("display", c.show_entity_list ? "block" : "none");
    d3.select("#collapse-arrow").text(c.show_entity_list ? "▼" : "▶");
    const rows = d3.select("#entity-list").selectAll("div.entity-control").data(c.entities, d => d.name);
    rows.exit().remove();
    const entered = rows.enter().append("div").attr("class", "entity-control");
    entered.append("input").attr("type", "checkbox").attr("id", d => "entity-" + d.name)
      .on("change", function (event, d) { dispatch({ type: "toggle_entity", name: d.name, checked: this.checked }); });
    entered.append("label").attr("for", d => "entity-" + d.name).style("display", "inline")
      .style("margin-left", "5px").text(d => d.displayName);
    entered.merge(rows).select("input").property("checked", d => d.checked);
  }

  function render(view) {
    const t = view.theme;
    theme = t;
    ensureSvg(view);
    svg.style("background-color", t.background);
    renderAxes(view, t);
    renderLinks(view, t);
    renderPoints(view, t);
    renderControls(view, t);
  }

  // ----- Control wiring -----
  d3.selectAll(".dataset-bubble").on("click", function () {
    if (this.dataset.value !== state.dataset) dispatch({ type: "select_dataset", dataset: this.dataset.value });
  });
  d3.select("#darkModeToggle").on("change", function () { dispatch({ type: "set_dark_mode", enabled: this.checked }); });
  d3.select("#threshold").on("input", function () {
    d3.select("#threshold-value").text(this.value);
    dispatch({ type: "set_threshold", value: +this.value });
  });
  d3.select("#incoming").on("input", function () {
    d3.select("#incoming-value").text(this.value);
    dispatch({ type: "set_incoming_count", value: +this.value });
  });
  d3.select("#outgoing").on("input", function () {
    d3.select("#outgoing-value").text(this.value);
    dispatch({ type: "set_outgoing_count", value: +this.value });
  });
  d3.select("#entity-list-header").on("click", () => dispatch({ type: "toggle_entity_list" }));
  d3.select("#export-svg").on("click", () => {
    fetch("{{ url_for('api_export_svg') }}", {
      method: "POST",
      headers: { "Content-Type": "application/json" },
      body: JSON.stringify({ state })
    }).then(r => r.blob()).then(blob => {
      const a = document.createElement("a");
      a.href = URL.createObjectURL(blob);
      a.download = state.dataset + ".svg";
      a.click();
      URL.revokeObjectURL(a.href);
    }).catch(err => console.error("Export failed:", err));
  });

  const results = d3.select("#search-results");
  d3.select("#search").on("input", function () {
    const term = this.value;
    const seq = ++searchSeq;
    if (!term) { results.style("display", "none"); return; }
    const url = "{{ url_for('api_search') }}?" + new URLSearchParams({ dataset: state.dataset, q: term });
    fetch(url).then(r => r.json()).then(body => {
      // an answer for an older term
      if (seq !== searchSeq) return;
      const matches = body.results || [];
      results.style("display", matches.length ? "block" : "none")
        .selectAll("div").data(matches).join("div")
        .text(d => d.displayName)
        .on("click", (event, d) => {
          d3.select("#search").property("value", d.displayName);
          results.style("display", "none");
          dispatch({ type: "set_focal", name: d.name });
        });
    }).catch(err => console.error("Search failed:", err));
  });

  if (initialError) {
    console.error("Error loading the CSV files:", initialError);
  } else if (initialView) {
    render(initialView);
  }
</script>
"""


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def register_routes(app, store, render_page, default_dataset: str):
    """Register the page, /api/view, /api/search, /api/datasets and /api/export.svg."""

    @app.route("/")
    def index():
        key = request.args.get("dataset") or default_dataset
        try:
            get_source(key)
        except UnknownDatasetError:
            key = default_dataset
        state, view, error = AppState(dataset=key), None, None
        try:
            dataset = store.get(key)
            state = initial_state(dataset)
            view = build_view(dataset, state)
        except DatasetLoadError as e:
            error = str(e)
        body = render_template_string(
            PAGE_BODY,
            sources=SOURCES,
            state=state.to_dict(),
            view=view,
            error=error,
        )
        return render_page(body, subtitle="Who references whom, by birth year")

    @app.route("/api/datasets")
    def api_datasets():
        return jsonify({
            "datasets": [{"value": s.key, "text": s.label} for s in SOURCES],
            "default": default_dataset,
        })

    @app.route("/api/view", methods=["POST"])
    def api_view():
        """Apply one action to the posted state; respond with the next state and its view."""
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return _error("body must be an object", 400)
        try:
            action = parse_action(payload.get("action"))
            raw = payload.get("state") or {"dataset": default_dataset}
            if not isinstance(raw, dict):
                raise InvalidActionError("state must be an object")
            current = store.get(raw.get("dataset") or default_dataset)
            state = AppState.from_dict(raw, current)
            if "checked" not in raw:
                state = initial_state(current, dark_mode=state.dark_mode)
            new_state = reduce(state, action, store.get)
            view = build_view(store.get(new_state.dataset), new_state)
        except UnknownDatasetError as e:
            return _error(f"unknown dataset: {e.args[0]}", 400)
        except InvalidActionError as e:
            logger.warning("Rejected action: %s", e)
            return _error(str(e), 400)
        except DatasetLoadError as e:
            return _error(str(e), 502)
        return jsonify({"state": new_state.to_dict(), "view": view})

    @app.route("/api/search")
    def api_search():
        key = request.args.get("dataset") or default_dataset
        term = request.args.get("q", "")
        try:
            dataset = store.get(key)
        except UnknownDatasetError:
            return _error(f"unknown dataset: {key}", 400)
        except DatasetLoadError as e:
            return _error(str(e), 502)
        return jsonify({
            "results": [
                {"name": e.name, "displayName": e.display_name}
                for e in search_entities(dataset, term)
            ]
        })

    @app.route("/api/export.svg", methods=["POST"])
    def api_export_svg():
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return _error("body must be an object", 400)
        raw = payload.get("state") or {"dataset": default_dataset}
        try:
            if not isinstance(raw, dict):
                raise InvalidActionError("state must be an object")
            dataset = store.get(raw.get("dataset") or default_dataset)
            state = AppState.from_dict(raw, dataset)
            svg = render_svg(build_view(dataset, state))
        except UnknownDatasetError as e:
            return _error(f"unknown dataset: {e.args[0]}", 400)
        except InvalidActionError as e:
            return _error(str(e), 400)
        except DatasetLoadError as e:
            return _error(str(e), 502)
        return Response(svg, mimetype="image/svg+xml")
