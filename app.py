import logging

from flask import Flask, render_template_string

from refmap import config
from refmap.loader import DatasetStore
from refmap.routes import register_routes

APP_TITLE = "Reference Networks"

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


# -----------------------------
# UI (single-template approach)
# -----------------------------
BASE_HTML = """
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width,initial-scale=1" />
  <title>{{ title }}</title>
  <style>
    :root{ --bg:white; --fg:black; --border:#ccc; --hover:#f0f0f0; }
    *{box-sizing:border-box}
    body{margin:0; background:var(--bg); color:var(--fg); font-family: ui-sans-serif,system-ui,-apple-system,Segoe UI,Roboto,Helvetica,Arial;}
    .wrap{padding:22px;}
    .topbar{margin-bottom:18px}
    .h1{font-size:18px;font-weight:700;letter-spacing:.2px}
    .sub{font-size:13px;opacity:.7}
  </style>
</head>
<body>
  <div class="wrap">
    <div class="topbar">
      <div class="h1">{{ title }}</div>
      <div class="sub">{{ subtitle }}</div>
    </div>
    {{ body|safe }}
  </div>
</body>
</html>
"""


def render_page(body_html, subtitle=""):
    return render_template_string(
        BASE_HTML,
        title=APP_TITLE,
        subtitle=subtitle,
        body=body_html
    )


def create_app(store=None):
    """Build the Flask app; tests pass their own DatasetStore."""
    app = Flask(__name__)
    app.config["DATASET_STORE"] = store or DatasetStore()
    register_routes(app, app.config["DATASET_STORE"], render_page, config.DEFAULT_DATASET)
    return app


app = create_app()


if __name__ == "__main__":
    app.run(host='0.0.0.0', port=5000, debug=True)
