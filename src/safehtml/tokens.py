class Attribute:
    """One attribute of a tag, as written in the source.

    `raw` is the exact source text including the leading separator (`lead`),
    so unchanged attributes serialize byte for byte.
    """

    __slots__ = ("lead", "name", "quote", "raw", "raw_name", "value")

    def __init__(self, name, value=None, quote=None, lead=" ", raw_name=None, raw=None):
        self.raw_name = raw_name if raw_name is not None else name
        self.name = name.lower()
        self.value = value
        self.quote = quote
        self.lead = lead
        if raw is None:
            raw = lead + self.raw_name
            if value is not None:
                q = quote or ""
                raw += f"={q}{value}{q}"
        self.raw = raw

    def with_value(self, value):
        """Return a copy holding `value` double-quoted, keeping the name spelling."""
        return Attribute(self.raw_name, value, '"', self.lead, self.raw_name)

    def __repr__(self):
        return f"Attribute({self.name!r}, {self.value!r})"


class Tag:
    __slots__ = ("attrs", "kind", "name", "raw_name", "self_closing", "tail")

    START = 0
    END = 1

    def __init__(self, kind, name, attrs=None, self_closing=False, raw_name=None, tail=">"):
        self.kind = kind
        self.raw_name = raw_name if raw_name is not None else name
        self.name = name.lower()
        self.attrs = attrs if attrs is not None else []
        self.self_closing = bool(self_closing)
        self.tail = tail

    @property
    def is_start(self):
        return self.kind == Tag.START

    @property
    def is_end(self):
        return self.kind == Tag.END

    def replace_attrs(self, attrs):
        return Tag(self.kind, self.raw_name, attrs, self.self_closing, self.raw_name, self.tail)

    def to_html(self):
        slash = "/" if self.kind == Tag.END else ""
        return "<" + slash + self.raw_name + "".join(a.raw for a in self.attrs) + self.tail

    def __repr__(self):
        slash = "/" if self.kind == Tag.END else ""
        return f"Tag(<{slash}{self.name}>)"


class CharacterTokens:
    """A run of text. `raw` marks the body of a raw-text element (script, style...)."""

    __slots__ = ("data", "raw")

    def __init__(self, data, raw=False):
        self.data = data
        self.raw = bool(raw)

    def to_html(self):
        if self.raw:
            return self.data
        # A bare "<" never starts markup in the output, whatever gets removed around it.
        return self.data.replace("<", "&lt;")


class CommentToken:
    """A comment, including bogus comments such as `<!x>` and `<?x>`."""

    __slots__ = ("source",)

    def __init__(self, source):
        self.source = source

    def to_html(self):
        return self.source


class DoctypeToken:
    __slots__ = ("source",)

    def __init__(self, source):
        self.source = source

    def to_html(self):
        return self.source


class RemovedMarker:
    """Placeholder left where markup was removed; serializes to nothing."""

    __slots__ = ()

    def to_html(self):
        return ""


REMOVED = RemovedMarker()
