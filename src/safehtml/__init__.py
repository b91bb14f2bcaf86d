from .policy import DEFAULT_CONFIG, DEFAULT_POLICY, Policy, SanitizerConfig
from .processor import (
    HTMLProcessor,
    SanitizationResult,
    ShadowRootProcessor,
    process_server_html,
    process_with_metadata,
)
from .sanitizer import (
    HTMLSink,
    Sanitizer,
    create_sanitizer,
    remove_unsafe,
    sanitize,
    set_html,
    set_html_unsafe,
)
from .validate import StructureReport, check_structure

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_POLICY",
    "HTMLProcessor",
    "HTMLSink",
    "Policy",
    "SanitizationResult",
    "Sanitizer",
    "SanitizerConfig",
    "ShadowRootProcessor",
    "StructureReport",
    "check_structure",
    "create_sanitizer",
    "process_server_html",
    "process_with_metadata",
    "remove_unsafe",
    "sanitize",
    "set_html",
    "set_html_unsafe",
]
