import logging
import os
import sys

from flask import Flask, request
from waitress import create_server

from .config import parse_address, parse_args
from .counter import VisitCounter
from .shutdown import ShutdownCoordinator
from .storage import PeriodicFlusher, SnapshotFile

DEFAULT_TEMPLATE = os.path.join(os.path.dirname(__file__), "example.html")

COLOR_TOKEN = "{{COLOR}}"
COUNT_TOKEN = "{{VISIT_COUNT}}"


def render_template_text(template, color):
    return template.replace(COLOR_TOKEN, color)


def load_template(path, color):
    with open(path or DEFAULT_TEMPLATE, encoding="utf-8") as f:
        return render_template_text(f.read(), color)


def create_app(counter, template):
    app = Flask(__name__)

    @app.route("/", defaults={"path": ""})
    @app.route("/<path:path>")
    def visit(path):
        referer = request.headers.get("Referer")
        if not referer:
            return "", 400

        logging.debug("Accepted referer: %r", referer)
        count = counter.increment_and_get(referer)
        html = template.replace(COUNT_TOKEN, str(count))
        return html, 200, {
            "Content-Type": "text/html; charset=utf-8",
            "Cache-Control": "no-store",
        }

    return app


def run(args):
    template = load_template(args.template, args.color)
    host, port = parse_address(args.ip)

    storage = SnapshotFile(args.storage)
    counter = VisitCounter(storage.load())
    logging.info("Loaded %d sites from %s", len(counter), args.storage)

    app = create_app(counter, template)
    server = create_server(app, host=host, port=port, threads=args.threads)
    logging.info("Listening on %s", args.ip)

    flusher = PeriodicFlusher(counter, storage, args.flush_interval)
    coordinator = ShutdownCoordinator()
    coordinator.install()
    flusher.start()
    try:
        coordinator.serve(server)
    finally:
        flusher.stop()

    visits = counter.snapshot()
    logging.info("Saving %d sites to %s", len(visits), args.storage)
    storage.flush(visits)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s [COUNTER] %(levelname)s - %(message)s",
    )
    try:
        run(args)
    except (OSError, ValueError):
        logging.exception("Counter stopped with an error, visits may be lost")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
