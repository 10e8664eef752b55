"""Runtime for Mustache templates compiled by mustc's native backend.

This file is shipped verbatim next to generated code, so it depends on the
standard library only. One-letter method names keep generated code small:

    l(text)                 append literal text
    v(name, raw=0)          append a resolved value (escaped unless raw)
    s(inverted, name, body) run a section body according to the value
    d(key, body)            register a recursive partial body
    p(key)                  invoke a registered partial body
    get()                   finalize and return the output
"""

from collections.abc import Mapping

SELF_NAME = "."

_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})
_MISSING = object()
_SCALARS = (str, bytes, int, float, list, tuple)


def xml_escape(text):
    return text.translate(_ESCAPES)


def to_text(value):
    """Textual form of a value; missing and None render as empty text."""
    if value is None or value is _MISSING:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_sequence(value):
    return isinstance(value, (list, tuple))


def is_falsey(value):
    """Missing, None, False, numeric zero, "" and empty lists are falsey."""
    if value is _MISSING or value is None or value is False:
        return True
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return value == ""
    if is_sequence(value):
        return len(value) == 0
    return False


def look_up_in_context(ctx, key):
    """Return ctx's value for key, or _MISSING when ctx does not define it.

    Mappings are looked up by key; other objects by public, non-callable
    attribute. Scalars and sequences define nothing.
    """
    if isinstance(ctx, Mapping):
        return ctx.get(key, _MISSING)
    if ctx is None or isinstance(ctx, _SCALARS) or key.startswith("_"):
        return _MISSING
    value = getattr(ctx, key, _MISSING)
    if callable(value):
        return _MISSING
    return value


class MustacheRuntime:
    """Context stack, partial registry and output buffer for one render."""

    def __init__(self, data):
        self.stack = [data]
        self.partials = {}
        self.buf = []
        self.finalized = False

    def l(self, text):  # noqa: E743
        self._buffer(text)

    def v(self, name, raw=0):
        text = to_text(self._look_up(name))
        self._buffer(text if raw else xml_escape(text))

    def s(self, inverted, name, body):
        value = self._look_up(name)
        falsey = is_falsey(value)

        if inverted or falsey:
            if inverted and falsey:
                self.stack.append(value)
                body()
                self.stack.pop()
            return

        # scalars and objects are a one-element sequence
        items = value if is_sequence(value) else (value,)
        for item in items:
            self.stack.append(item)
            body()
            self.stack.pop()

    def d(self, key, body):
        self.partials[key] = body

    def p(self, key):
        self.partials[key]()

    def get(self):
        self.finalized = True
        return "".join(self.buf)

    def _look_up(self, name):
        if name == SELF_NAME:
            return self.stack[-1]

        if is_sequence(name):
            # dotted: first segment through the stack, the rest strictly nested
            value = self._look_up_flat(name[0])
            for segment in name[1:]:
                if value is _MISSING:
                    break
                value = look_up_in_context(value, segment)
        else:
            value = self._look_up_flat(name)

        return "" if value is _MISSING else value

    def _look_up_flat(self, key):
        for ctx in reversed(self.stack):
            value = look_up_in_context(ctx, key)
            if value is not _MISSING:
                return value
        return _MISSING

    def _buffer(self, text):
        if self.finalized:
            raise RuntimeError("MustacheRuntime already finalized")
        self.buf.append(text)
