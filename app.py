"""
GitScore API (Flask)

What it does:
- Accepts a GitHub username
- Fetches followers, repositories (stars), commit search totals and the
  contribution calendar from the GitHub REST + GraphQL APIs
- Computes a 0-10 "GitScore" from six weighted sub-scores
- Matches the score against a table of football player ratings
- Suggests usernames while typing and proxies avatar images for the frontend

Run:
  export GITHUB_TOKEN="github_pat_..."   # required for the contribution calendar
  python app.py
  open http://localhost:3000

Endpoints:
  GET /                        -> renders templates/index.html (if present), else fallback page
  GET /api/stats/<username>    -> score + player match as JSON
  GET /api/search/<query>      -> up to 5 username suggestions
  GET /api/image-proxy?url=    -> streams a remote image
  GET /healthz                 -> liveness + configuration summary
"""

from __future__ import annotations

import datetime as dt
import logging
import random
import re
from typing import Any, Dict
from urllib.parse import urlparse

import requests
from flask import Flask, Response, jsonify, render_template, request, stream_with_context
from jinja2 import TemplateNotFound
from markupsafe import escape

import config
import github_api
from logger import setup_logger
from profiles import find_override
from ratings import load_rating_table, match_rating
from scoring import InvalidInput, ScoreBreakdown, compute_score

setup_logger()
logger = logging.getLogger(__name__)

# -----------------------------
# Flask app
# -----------------------------
app = Flask(__name__)
app.config.update(
    RATING_TABLE=load_rating_table(config.RATINGS_PATH),
    RATING_RNG=random.Random(),
    CLOCK=lambda: dt.datetime.now(dt.timezone.utc),
)

# Username validation (GitHub allows alnum and hyphen; max length 39)
USERNAME_RE = re.compile(r"^[A-Za-z0-9-]{1,39}$")

PROXY_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


@app.after_request
def _cors(resp: Response) -> Response:
    resp.headers.setdefault("Access-Control-Allow-Origin", config.CORS_ORIGINS)
    return resp


def _score_payload(profile: Dict[str, Any], breakdown: ScoreBreakdown, data_mode: str) -> Dict[str, Any]:
    return {
        **profile,
        "yearsOnGitHub": breakdown.years_text,
        "finalScore": breakdown.final_score_text,
        "breakdown": breakdown.subscores(),
        "sofascoreMatch": match_rating(
            app.config["RATING_TABLE"], breakdown.final_score_text, app.config["RATING_RNG"]
        ),
        "dataMode": data_mode,
    }


# -----------------------------
# Flask routes
# -----------------------------
def _api_routes():
    rows = []
    for rule in sorted(app.url_map.iter_rules(), key=lambda r: r.rule):
        if rule.endpoint == "static" or rule.rule == "/":
            continue
        view = app.view_functions[rule.endpoint]
        summary = (view.__doc__ or "").strip().splitlines()
        rows.append((rule.rule, summary[0] if summary else ""))
    return rows


@app.route("/", methods=["GET"])
def home():
    try:
        return render_template("index.html")
    except TemplateNotFound:
        items = "".join(
            f"<li><code>{escape(path)}</code> {escape(summary)}</li>" for path, summary in _api_routes()
        )
        page = (
            "<!doctype html><html><head><meta charset=\"utf-8\"><title>GitScore</title></head>"
            "<body style=\"font-family: system-ui, sans-serif; padding: 24px;\">"
            f"<h2>GitScore API</h2><p>Ratings loaded: {len(app.config['RATING_TABLE'])}</p>"
            f"<ul>{items}</ul></body></html>"
        )
        return page, 200, {"Content-Type": "text/html; charset=utf-8"}


@app.route("/api/stats/<path:username>", methods=["GET"])
def api_stats(username: str):
    """Score a GitHub user and match the score to a player."""
    override = find_override(username)
    if override:
        logger.info("Profile override hit: %s", username.strip().lower())
        return jsonify(_score_payload(override.profile_fields(), override.breakdown, "override"))

    username = username.strip()
    if not USERNAME_RE.match(username):
        return jsonify({"message": "Invalid GitHub username format."}), 400

    try:
        stats = github_api.fetch_user_stats(username)
        breakdown = compute_score(stats.metrics, now=app.config["CLOCK"]())
    except github_api.GitHubNotFound:
        return jsonify({"message": "User not found"}), 404
    except github_api.GitHubAPIError as e:
        logger.error("GitHub lookup failed for %s: %s", username, e)
        return jsonify({"message": "Error fetching data from GitHub"}), 502
    except InvalidInput as e:
        logger.error("GitHub returned unusable metrics for %s: %s", username, e)
        return jsonify({"message": "Error computing score"}), 500
    except Exception:
        logger.exception("Unexpected error while scoring %s", username)
        return jsonify({"message": "Unexpected server error"}), 500

    m = stats.metrics
    profile = {
        **stats.profile,
        "followers": m.followers,
        "public_repos": m.public_repos,
        "totalStars": m.total_stars,
        "totalCommits": m.total_commits,
        "activeDays": m.active_days,
    }
    return jsonify(_score_payload(profile, breakdown, stats.data_mode))


@app.route("/api/search/", defaults={"query": ""}, methods=["GET"])
@app.route("/api/search/<path:query>", methods=["GET"])
def api_search(query: str):
    """Up to 5 username suggestions."""
    query = query.strip()
    if not query:
        return jsonify([])

    try:
        return jsonify(github_api.search_users(query))
    except github_api.GitHubAPIError as e:
        logger.error("User search failed for %r: %s", query, e)
        return jsonify({"message": "Error fetching suggestions"}), 500


@app.route("/api/image-proxy", methods=["GET"])
def image_proxy():
    """Stream a remote image through this server."""
    image_url = (request.args.get("url") or "").strip()
    if not image_url:
        return "Image URL not provided", 400
    if urlparse(image_url).scheme not in ("http", "https"):
        return "Image URL must be http(s)", 400

    try:
        upstream = requests.get(
            image_url,
            headers={"User-Agent": PROXY_USER_AGENT},
            stream=True,
            timeout=config.REQUEST_TIMEOUT,
            verify=config.IMAGE_PROXY_VERIFY_TLS,
        )
    except requests.RequestException as e:
        logger.error("Image proxy failed for %s: %s", image_url, e)
        return "Failed to fetch image", 500

    if upstream.status_code >= 400:
        upstream.close()
        logger.error("Image proxy got HTTP %s for %s", upstream.status_code, image_url)
        return "Failed to fetch image", 500

    def _body():
        try:
            yield from upstream.iter_content(chunk_size=8192)
        finally:
            upstream.close()

    content_type = upstream.headers.get("Content-Type", "application/octet-stream")
    return Response(stream_with_context(_body()), content_type=content_type)


@app.route("/healthz", methods=["GET"])
def healthz():
    """Liveness and configuration summary."""
    return jsonify({
        "ok": True,
        "token_configured": bool(config.GITHUB_TOKEN),
        "ratings_loaded": len(app.config["RATING_TABLE"]),
    })


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=config.PORT, debug=True)
