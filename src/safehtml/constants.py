"""HTML Element Constants

This module defines the element and attribute names the sanitizer reasons
about. Names are kept in lists to maintain consistent iteration order (the
order feeds reporting) and mirrored into frozensets for lookups.

Usage:
    from safehtml.constants import VOID_ELEMENTS, UNSAFE_ELEMENTS

References:
    - https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    - https://html.spec.whatwg.org/multipage/parsing.html#parsing-html-fragments
"""

# Elements that never have content or an end tag
VOID_ELEMENTS = [
    "area",
    "base",
    "basefont",
    "bgsound",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "keygen",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
]

# Void list used by the structure checker (the classic HTML4/5 set)
STRUCTURE_VOID_ELEMENTS = [
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
]

# Elements whose body is text up to the matching end tag (RAWTEXT/RCDATA).
# noscript is included because browsers with scripting enabled lex it this way.
RAWTEXT_ELEMENTS = [
    "title",
    "textarea",
    "style",
    "script",
    "xmp",
    "iframe",
    "noembed",
    "noframes",
    "noscript",
]

# The safety floor: always removed by remove_unsafe(), whatever the policy says
UNSAFE_ELEMENTS = ["script", "style", "iframe", "object", "embed"]

UNSAFE_ATTRIBUTES = [
    "onclick",
    "onload",
    "onerror",
    "onmouseover",
    "onmouseout",
    "onfocus",
    "onblur",
    "onchange",
    "onsubmit",
    "onkeydown",
    "onkeyup",
]

UNSAFE_URL_PREFIXES = ("javascript:", "data:")

# Attributes whose values are checked as URLs
URL_ATTRIBUTES = ["href", "src"]

DEFAULT_ALLOWED_ELEMENTS = [
    "p",
    "br",
    "strong",
    "em",
    "u",
    "b",
    "i",
    "span",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "ul",
    "ol",
    "li",
    "blockquote",
    "pre",
    "code",
    "a",
    "img",
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
]

DEFAULT_BLOCKED_ELEMENTS = [
    "script",
    "style",
    "iframe",
    "object",
    "embed",
    "form",
    "input",
    "textarea",
    "button",
    "select",
    "option",
]

DEFAULT_ALLOWED_ATTRIBUTES = [
    "href",
    "src",
    "alt",
    "title",
    "class",
    "id",
    "style",
    "width",
    "height",
    "colspan",
    "rowspan",
    "target",
]

DEFAULT_BLOCKED_ATTRIBUTES = list(UNSAFE_ATTRIBUTES)

DEFAULT_ALLOWED_PROTOCOLS = ["http:", "https:", "mailto:", "tel:"]

# Special URL schemes need a host to parse as absolute URLs
SPECIAL_SCHEMES = ["http", "https", "ws", "wss", "ftp"]

VOID_ELEMENT_SET = frozenset(VOID_ELEMENTS)
STRUCTURE_VOID_ELEMENT_SET = frozenset(STRUCTURE_VOID_ELEMENTS)
RAWTEXT_ELEMENT_SET = frozenset(RAWTEXT_ELEMENTS)
URL_ATTRIBUTE_SET = frozenset(URL_ATTRIBUTES)
