import argparse
import os

DEFAULT_ADDR = "127.0.0.1:32069"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def parse_address(value):
    """Split ``host:port`` (or ``[v6-host]:port``) into a (host, port) pair."""
    host, sep, port = value.rpartition(":")
    if not sep or not host:
        raise ValueError(f"expected host:port, got {value!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    if not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"invalid port in {value!r}")
    return host, int(port)


def positive_float(value):
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def log_level(value):
    level = value.upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(f"must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level


def build_parser():
    parser = argparse.ArgumentParser(
        prog="iframe-counter",
        description="An iframe-based website traffic counter.",
    )
    parser.add_argument(
        "template",
        nargs="?",
        default=os.environ.get("COUNTER_TEMPLATE"),
        help="Path to the HTML template served in the iframe (default: built-in example.html)",
    )
    parser.add_argument(
        "--ip",
        default=os.environ.get("COUNTER_ADDR", DEFAULT_ADDR),
        help="The address the server will bind to (default: %(default)s)",
    )
    parser.add_argument(
        "--color",
        default=os.environ.get("COUNTER_COLOR", "white"),
        help="Color of the text, in CSS color (default: %(default)s)",
    )
    parser.add_argument(
        "--storage",
        default=os.environ.get("COUNTER_FILE", "visits.txt"),
        help="Path to the visits storage file (default: %(default)s)",
    )
    parser.add_argument(
        "--flush-interval",
        type=positive_float,
        default=os.environ.get("FLUSH_INTERVAL", "60"),
        help="Seconds between periodic saves (default: %(default)s)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=int(os.environ.get("COUNTER_THREADS", "20")),
        help="Number of waitress worker threads (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        type=log_level,
        default=os.environ.get("LOG_LEVEL", "DEBUG"),
        help="Logging level (default: %(default)s)",
    )
    return parser


def parse_args(argv=None):
    return build_parser().parse_args(argv)
