"""Plain-text snapshot format: one ``<key> <count>`` record per line."""
import logging


def encode(visits):
    return "".join(f"{key} {count}\n" for key, count in sorted(visits.items()))


def decode(text):
    """Parse a snapshot, skipping any line that is not a valid record."""
    visits = {}
    for line in text.split("\n"):
        if not line:
            continue
        key, sep, rest = line.partition(" ")
        rest = rest.rstrip("\r")
        if not sep or not key or not (rest.isascii() and rest.isdigit()):
            logging.debug("Skipping malformed snapshot line: %r", line)
            continue
        visits[key] = int(rest)
    return visits
