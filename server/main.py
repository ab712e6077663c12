import logging
import os
import socket
import sys

from dotenv import load_dotenv
from flask import Flask, Response, redirect, render_template, request, send_from_directory
from flask_cors import CORS
from jinja2 import TemplateError

from components.card_templates import get_template, is_renderable, resolve_template
from components.errors import InviteError
from components.renderer import render_invite
from components.token_codec import decode_token, encode_token, strip_image_suffix

# --- Load environment first ---
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("invite")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

HOST = os.getenv("HOST", "")
PORT = int(os.getenv("PORT", "8080"))
BIND_ADDRESS = os.getenv("BIND_ADDRESS", "0.0.0.0")
LANDING_URL = os.getenv("LANDING_URL", "https://huyentrang.manhtai.com")
ASSET_DIR = os.getenv("ASSET_DIR") or os.path.join(BASE_DIR, "components", "tpl")
IMAGE_MAX_AGE = int(os.getenv("IMAGE_MAX_AGE", "3600"))
DEBUG = os.getenv("FLASK_DEBUG", "0").strip() not in {"", "0", "false", "False"}

# --- App setup ---
# Pages, backgrounds, font and loose static files all live in ASSET_DIR.
app = Flask(__name__, template_folder=ASSET_DIR, static_folder=None)
app.config.update(
    HOST=HOST,
    LANDING_URL=LANDING_URL,
    ASSET_DIR=ASSET_DIR,
    IMAGE_MAX_AGE=IMAGE_MAX_AGE,
)

# Cards get hot-linked from chat apps and other sites
CORS(app, resources={r"/i/*": {"origins": "*"}, r"/to/*": {"origins": "*"}})


# --------------------------------------------------------------------------------------
# Utilities
# --------------------------------------------------------------------------------------


def render_page(page: str, **context) -> str:
    """Render an HTML page; a broken template yields an empty body rather than a 500."""
    try:
        return render_template(page, host=app.config["HOST"], **context)
    except TemplateError as e:
        logger.error("Failed to render %s: %s", page, e)
        return ""


def share_page(code: str) -> str:
    """Render the share page for a token. Raises InvalidToken on a bad token."""
    selector, text = decode_token(code)
    tp = resolve_template(selector)
    return render_page(
        "page.html",
        img_hash=encode_token(tp, text),
        text=text,
        tpl=tp,
        # shared links are judged on the template they resolve to, not the raw selector
        ok=is_renderable(tp, text),
    )


def serve_image(selector: str, text: str):
    try:
        template = get_template(resolve_template(selector))
        data = render_invite(template, text, app.config["ASSET_DIR"])
    except InviteError as e:
        logger.warning("Could not render card for %r: %s", selector, e)
        return redirect("/", code=307)

    return Response(
        data,
        status=200,
        mimetype="image/jpeg",
        headers={"Cache-Control": f"max-age={app.config['IMAGE_MAX_AGE']}"},
    )


# --------------------------------------------------------------------------------------
# Routes
# --------------------------------------------------------------------------------------


@app.route("/tao", methods=["GET"])
def create():
    tp = request.args.get("tpl", "")
    text = request.args.get("text", "")
    return render_page(
        "create.html",
        img_hash=encode_token(tp, text),
        text=text,
        tpl=tp,
        ok=is_renderable(tp, text),
    )


@app.route("/t/<code>", methods=["GET"])
def share(code):
    try:
        return share_page(code)
    except InviteError as e:
        logger.warning("Rejected share token: %s", e)
        return redirect("/", code=307)


@app.route("/i/<code>", methods=["GET"])
def image(code):
    try:
        selector, text = decode_token(strip_image_suffix(code))
    except InviteError as e:
        logger.warning("Rejected image token: %s", e)
        return redirect("/", code=307)
    return serve_image(selector, text)


@app.route("/to/<tpl>/", methods=["GET"], defaults={"text": ""})
@app.route("/to/<tpl>/<path:text>", methods=["GET"])
def image_direct(tpl, text):
    return serve_image(tpl, text)


@app.route("/", methods=["GET"])
def index():
    return redirect(app.config["LANDING_URL"], code=307)


@app.route("/<code>", methods=["GET"])
def share_or_file(code):
    """Bare tokens open the share page; anything else is looked up as an asset file."""
    try:
        return share_page(code)
    except InviteError:
        return send_from_directory(app.config["ASSET_DIR"], code)


# --- Error Handlers ---
@app.errorhandler(404)
def not_found(_e):
    return "Not found", 404


@app.errorhandler(500)
def server_error(e):
    logger.error("Unhandled error: %s", e)
    return "Server error", 500


def ensure_port_free(host: str, port: int):
    """Raise OSError if (host, port) cannot be bound right now."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.create_server((host, port), family=family):
        pass


def main():
    # Werkzeug exits on its own when bind fails, so check the port first.
    # The reloader child inherits the parent's socket and must skip this.
    if not os.environ.get("WERKZEUG_RUN_MAIN"):
        try:
            ensure_port_free(BIND_ADDRESS, PORT)
        except OSError as e:
            logger.critical("Could not bind %s:%s: %s", BIND_ADDRESS, PORT, e)
            sys.exit(1)

    logger.info("Listening on %s:%s", BIND_ADDRESS, PORT)
    app.run(host=BIND_ADDRESS, port=PORT, debug=DEBUG)


if __name__ == "__main__":
    main()
