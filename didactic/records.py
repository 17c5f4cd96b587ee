"""Parser for record files.

A record is a list of fields separated by lines consisting of ``---``::

    title: Hello World
    ---
    date: 2024-01-02
    ---
    body:

    The body spans multiple lines.

A value that needs a line of three or more dashes escapes it with one
extra leading dash.
"""


def _is_dashes(line):
    line = line.strip()
    return len(line) >= 3 and line == "-" * len(line)


def _finish_value(buf):
    lines = [line[1:] if _is_dashes(line) else line for line in buf]
    if lines and lines[-1].endswith("\n"):
        lines[-1] = lines[-1][:-1]
    return "".join(lines)


def parse_record(lines):
    """Parses an iterable of text lines into a dict of field values."""
    fields = {}
    key = None
    buf = []
    want_newline = False

    for line in lines:
        line = line.rstrip("\r\n") + "\n"

        if line.rstrip() == "---":
            if key is not None:
                fields[key] = _finish_value(buf)
            key = None
            buf = []
            want_newline = False
        elif key is not None:
            if want_newline:
                want_newline = False
                if not line.strip():
                    continue
            buf.append(line)
        else:
            name, sep, value = line.partition(":")
            if not sep:
                continue
            key = name.strip()
            value = value.strip("\t ")
            if value.strip():
                buf = [value]
            else:
                buf = []
                want_newline = True

    if key is not None:
        fields[key] = _finish_value(buf)
    return fields


def read_record(filename):
    with open(filename, "r", encoding="utf-8") as f:
        return parse_record(f)
