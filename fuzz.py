#!/usr/bin/env python3
"""
Random fuzzer for the safehtml sanitizer.
Generates malformed and hostile HTML and checks the sanitizer's properties:
no crashes, idempotence, and the safety floor of the default policy.
"""

import argparse
import random
import string
import sys
import time
import traceback

from safehtml import DEFAULT_POLICY, Sanitizer
from safehtml.constants import UNSAFE_ATTRIBUTES, UNSAFE_ELEMENTS
from safehtml.tokenizer import tokenize
from safehtml.tokens import Tag
from safehtml.urls import is_unsafe_url

TAGS = [
    "div", "span", "p", "a", "img", "table", "tr", "td", "ul", "li", "em", "strong",
    "form", "input", "button", "select", "option", "textarea", "script", "style",
    "title", "iframe", "object", "embed", "svg", "math", "noscript", "xmp", "template",
]

ATTRIBUTES = [
    "id", "class", "style", "href", "src", "alt", "title", "onclick", "onload",
    "onerror", "onmouseover", "onfocus", "data-x", "HREF", "SRC", "OnClick",
]

URLS = [
    "https://example.com", "http://example.com/a?b=c", "mailto:a@example.com",
    "tel:+123", "javascript:alert(1)", "JaVaScRiPt:alert(1)", " javascript:alert(1)",
    "java\tscript:alert(1)", "javascript&#58;alert(1)", "&#106;avascript:alert(1)",
    "data:text/html,<script>alert(1)</script>", "vbscript:x", "/relative", "#frag",
    "//evil.example", "https:", "http://", "", " ",
]

SPECIAL_CHARS = ["\x00", "\x0b", "\x0c", "\u00a0", "\u2028", "\ufeff"]


def random_string(min_len=0, max_len=20):
    """Generate random ASCII string."""
    length = random.randint(min_len, max_len)
    return "".join(random.choices(string.ascii_letters + string.digits, k=length))


def random_whitespace():
    ws = [" ", "\t", "\n", "\r", "\f", ""]
    return "".join(random.choices(ws, k=random.randint(0, 3)))


def fuzz_attribute():
    """Generate well-formed and malformed attributes."""
    name = random.choice(ATTRIBUTES) if random.random() < 0.8 else random_string(1, 8)
    value = random.choice(URLS) if name.lower() in {"href", "src"} else random_string(0, 12)
    styles = [
        f'{name}="{value}"',
        f"{name}='{value}'",
        f"{name}={value.replace(' ', '')}",
        f"{name} = \"{value}\"",
        name,
        f'{name}="{value}',  # Unclosed quote
    ]
    return random.choice(styles)


def fuzz_open_tag():
    tag = random.choice(TAGS)
    if random.random() < 0.2:
        tag = tag.upper()
    attrs = "".join(random.choice([" ", "/", "\n"]) + fuzz_attribute() for _ in range(random.randint(0, 4)))
    closing = random.choice([">", "/>", " >", "", ">>"])
    return f"<{tag}{attrs}{random_whitespace()}{closing}"


def fuzz_close_tag():
    tag = random.choice(TAGS)
    variants = [f"</{tag}>", f"</{tag.upper()}>", f"</ {tag}>", f"</{tag}", f"</{tag} x='>'>", "</>"]
    return random.choice(variants)


def fuzz_comment():
    content = random_string(0, 20)
    variants = [
        f"<!--{content}-->",
        f"<!--{content}",
        f"<!-->{content}",
        f"<!--{content}--!>",
        f"<!{content}>",
        f"<?{content}>",
        "<!DOCTYPE html>",
        "<!doctype html",
    ]
    return random.choice(variants)


def fuzz_text():
    strategies = [
        lambda: random_string(1, 30),
        lambda: "<" + random_string(1, 5),  # Incomplete tag
        lambda: "< " + random_string(1, 5),
        lambda: "&lt;" + random_string(1, 5) + "&gt;",
        lambda: random.choice(SPECIAL_CHARS),
        lambda: " " * random.randint(1, 10),
    ]
    return random.choice(strategies)()


def fuzz_splice():
    """Markup that only becomes dangerous if removal splices neighbours together."""
    variants = [
        "<<script></script>script>alert(1)<</script>/script>",
        "<scr<script>x</script>ipt>alert(1)</script>",
        "<a href=\"java<!-- -->script:alert(1)\">x</a>",
        "<img src=x on<style></style>error=alert(1)>",
        "<em><em>nested</em></em>",
        "<noscript><p title=\"</noscript><img src=x onerror=alert(1)>\"></noscript>",
    ]
    return random.choice(variants)


def fuzz_nested_structure(depth=0, max_depth=6):
    if depth >= max_depth or random.random() < 0.3:
        return fuzz_text()
    tag = random.choice(TAGS)
    children = "".join(fuzz_nested_structure(depth + 1, max_depth) for _ in range(random.randint(0, 3)))
    return f"<{tag}>{children}</{tag}>"


def generate_fuzzed_html():
    parts = []
    for _ in range(random.randint(1, 15)):
        element_type = random.choices(
            [fuzz_open_tag, fuzz_close_tag, fuzz_comment, fuzz_text, fuzz_splice, fuzz_nested_structure],
            weights=[20, 10, 5, 15, 3, 8],
        )[0]
        parts.append(element_type())
    return "".join(parts)


def unsafe_leftovers(html):
    """Names of floor-violating elements, attributes and URLs still present in `html`."""
    found = []
    for token in tokenize(html):
        if type(token) is not Tag:
            continue
        if token.name in UNSAFE_ELEMENTS:
            found.append(f"<{token.name}>")
        for attr in token.attrs:
            if attr.name in UNSAFE_ATTRIBUTES:
                found.append(attr.name)
            elif attr.name in {"href", "src"} and attr.value and is_unsafe_url(attr.value):
                found.append(f"{attr.name}={attr.value}")
    return found


def check_properties(sanitizer, html):
    """Return a list of violated properties for one input."""
    problems = []
    once = sanitizer.sanitize(html)
    if sanitizer.sanitize(once) != once:
        problems.append("sanitize is not idempotent")
    floor = sanitizer.remove_unsafe(html)
    if sanitizer.remove_unsafe(floor) != floor:
        problems.append("remove_unsafe is not idempotent")
    if sanitizer.remove_unsafe(once) != once:
        problems.append("sanitize output violates the safety floor")
    leftovers = unsafe_leftovers(floor)
    if leftovers:
        problems.append(f"remove_unsafe left {leftovers}")
    return problems


def run_fuzzer(num_tests, seed=None, verbose=False):
    """Run the fuzzer against the default policy."""
    if seed is not None:
        random.seed(seed)

    sanitizer = Sanitizer(DEFAULT_POLICY)
    failures = []
    successes = 0

    print(f"Fuzzing safehtml with {num_tests} test cases...")
    start_time = time.time()

    for i in range(num_tests):
        html = generate_fuzzed_html()
        if verbose and i % 100 == 0:
            print(f"  Test {i}/{num_tests}...")
        try:
            problems = check_properties(sanitizer, html)
        except Exception as e:
            problems = [f"crash: {e}\n{traceback.format_exc()}"]
        if problems:
            failures.append({"test_num": i, "html": html, "problems": problems})
            if verbose:
                print(f"  FAIL: Test {i}: {problems[0]}")
        else:
            successes += 1

    elapsed_total = time.time() - start_time

    print(f"\n{'='*60}")
    print("FUZZING RESULTS: safehtml")
    print(f"{'='*60}")
    print(f"Total tests:    {num_tests}")
    print(f"Successes:      {successes}")
    print(f"Failures:       {len(failures)}")
    print(f"Total time:     {elapsed_total:.2f}s")

    for failure in failures[:10]:
        print(f"\nTest #{failure['test_num']}:")
        print(f"  HTML: {failure['html'][:200]!r}")
        for problem in failure["problems"]:
            print(f"  {problem}")
    if len(failures) > 10:
        print(f"\n... and {len(failures) - 10} more failures")

    return not failures


def main():
    parser = argparse.ArgumentParser(description="Fuzz the safehtml sanitizer with hostile input")
    parser.add_argument(
        "--num-tests", "-n",
        type=int,
        default=1000,
        help="Number of test cases to generate (default: 1000)",
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--sample",
        type=int,
        metavar="N",
        help="Just print N sample fuzzed HTML fragments (no sanitizing)",
    )
    args = parser.parse_args()

    if args.sample:
        if args.seed:
            random.seed(args.seed)
        for i in range(args.sample):
            print(f"=== Sample {i+1} ===")
            print(generate_fuzzed_html())
            print()
        return

    success = run_fuzzer(args.num_tests, seed=args.seed, verbose=args.verbose)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
