import re
import string
from typing import Any, Dict, List, Optional, Tuple, Union

from ._exceptions import CacheControlError, ParseError, ValidationError

## Grammar

HTAB = "\t"
SP = " "
obs_text = "".join(chr(i) for i in range(0x80, 0xFF + 1))  # 0x80-0xFF

tchar = "!#$%&'*+-.^_`|~0123456789" + string.ascii_letters
qdtext = "".join(
    [
        HTAB,
        SP,
        "\x21",
        "".join(chr(i) for i in range(0x23, 0x5B + 1)),  # 0x23-0x5b
        "".join(chr(i) for i in range(0x5D, 0x7E + 1)),  # 0x5D-0x7E
        obs_text,
    ]
)

# delta-seconds directives; RFC 5861 gives the two stale-* extensions a value as well
TIME_FIELDS = [
    "max_age",
    "max_stale",
    "min_fresh",
    "s_maxage",
    "stale_if_error",
    "stale_while_revalidate",
]

BOOLEAN_FIELDS = [
    "immutable",
    "must_revalidate",
    "must_understand",
    "no_store",
    "no_transform",
    "only_if_cached",
    "public",
    "proxy_revalidate",
]

LIST_FIELDS = ["no_cache", "private"]

# Accepts odd spacing and casing around the extension, which `parse_cache_control` rejects.
SWR_PATTERN = re.compile(r"stale-while-revalidate\s*=\s*(\d*)")

__all__ = (
    "CacheControl",
    "parse_cache_control",
    "parse_cache_control_leniently",
    "parse_stale_while_revalidate",
)


def strip_ows_around(text: str) -> str:
    return text.strip(" ").strip("\t")


def normalize_directive(text: str) -> str:
    return text.lower().replace("-", "_")


def split_directives(cache_control_value: str) -> List[str]:
    # Commas inside a quoted-string do not separate directives.
    directives: List[str] = []
    current = ""
    in_quotes = False
    escaped = False

    for char in cache_control_value:
        if escaped:
            escaped = False
        elif in_quotes and char == "\\":
            escaped = True
        elif char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            directives.append(current)
            current = ""
            continue
        current += char

    directives.append(current)
    return directives


def check_value(value: str) -> None:
    if not value:
        raise ParseError("The directive value cannot be left blank.")

    if value[0] == '"':
        if value[-1] != '"' or len(value) == 1:
            raise ParseError("Invalid quotes around the value.")
        for value_char in value[1:-1]:
            if value_char not in qdtext:
                raise ParseError(f"The character '{value_char!r}' is not permitted for the quoted values.")
        return

    for value_char in value:
        if value_char not in tchar:
            raise ParseError(f"The character '{value_char!r}' is not permitted for the unquoted values.")


def parse_directive(directive: str) -> Tuple[str, Optional[str]]:
    if not directive:
        raise ParseError("The directive should not be left blank.")

    directive = strip_ows_around(directive)

    if not directive:
        raise ParseError("The directive should not contain only whitespaces.")

    key, sep, value = directive.partition("=")

    for key_char in key:
        if key_char not in tchar:
            raise ParseError(f"The character '{key_char!r}' is not permitted in the directive name.")

    if not sep:
        return key, None

    check_value(value)
    return key, value


def parse_cache_control(cache_control_values: List[str]) -> "CacheControl":
    """
    Parses the values of one or more `Cache-Control` header fields.

    Unknown directives are ignored, malformed ones raise
    `ParseError` (syntax) or `ValidationError` (argument).
    """
    directives: Dict[str, Optional[str]] = {}

    for cache_control_value in cache_control_values:
        for directive in split_directives(cache_control_value):
            key, value = parse_directive(directive)
            directives[key] = value

    return CacheControl(**CacheControl.validate(directives))


def parse_cache_control_leniently(cache_control_values: List[str]) -> "CacheControl":
    """
    Like `parse_cache_control`, but skips the directives it cannot understand
    instead of rejecting the whole header.
    """
    validated_data: Dict[str, Any] = {}

    for cache_control_value in cache_control_values:
        for directive in split_directives(cache_control_value):
            try:
                key, value = parse_directive(directive)
                validated_data.update(CacheControl.validate({key: value}))
            except CacheControlError:
                continue

    return CacheControl(**validated_data)


def parse_stale_while_revalidate(cache_control: str) -> int:
    """
    Extracts the `stale-while-revalidate` seconds from raw header text.

    Returns 0 when the directive is missing or carries no digits.
    When the directive is repeated, the last one wins.
    """
    matches = SWR_PATTERN.findall(cache_control.lower())
    if not matches or not matches[-1]:
        return 0
    return int(matches[-1])


class CacheControl:
    def __init__(
        self,
        immutable: bool = False,  # [RFC8246]
        max_age: Optional[int] = None,  # [RFC9111, Section 5.2.1.1, 5.2.2.1]
        max_stale: Optional[int] = None,  # [RFC9111, Section 5.2.1.2]
        min_fresh: Optional[int] = None,  # [RFC9111, Section 5.2.1.3]
        must_revalidate: bool = False,  # [RFC9111, Section 5.2.2.2]
        must_understand: bool = False,  # [RFC9111, Section 5.2.2.3]
        no_cache: Union[bool, List[str]] = False,  # [RFC9111, Section 5.2.1.4, 5.2.2.4]
        no_store: bool = False,  # [RFC9111, Section 5.2.1.5, 5.2.2.5]
        no_transform: bool = False,  # [RFC9111, Section 5.2.1.6, 5.2.2.6]
        only_if_cached: bool = False,  # [RFC9111, Section 5.2.1.7]
        private: Union[bool, List[str]] = False,  # [RFC9111, Section 5.2.2.7]
        proxy_revalidate: bool = False,  # [RFC9111, Section 5.2.2.8]
        public: bool = False,  # [RFC9111, Section 5.2.2.9]
        s_maxage: Optional[int] = None,  # [RFC9111, Section 5.2.2.10]
        stale_if_error: Optional[int] = None,  # [RFC5861, Section 4]
        stale_while_revalidate: Optional[int] = None,  # [RFC5861, Section 3]
    ) -> None:
        self.immutable = immutable
        self.max_age = max_age
        self.max_stale = max_stale
        self.min_fresh = min_fresh
        self.must_revalidate = must_revalidate
        self.must_understand = must_understand
        self.no_cache = no_cache
        self.no_store = no_store
        self.no_transform = no_transform
        self.only_if_cached = only_if_cached
        self.private = private
        self.proxy_revalidate = proxy_revalidate
        self.public = public
        self.s_maxage = s_maxage
        self.stale_if_error = stale_if_error
        self.stale_while_revalidate = stale_while_revalidate

    @classmethod
    def validate(cls, directives: Dict[str, Optional[str]]) -> Dict[str, Any]:
        validated_data: Dict[str, Any] = {}

        for key, value in directives.items():
            key = normalize_directive(key)
            if key in TIME_FIELDS:
                if value is None:
                    raise ValidationError(f"The directive '{key}' necessitates a value.")

                if value[0] == '"' or value[-1] == '"':
                    raise ValidationError(f"The argument '{key}' should be an integer, but a quote was found.")

                try:
                    validated_data[key] = int(value)
                except ValueError:
                    raise ValidationError(f"The argument '{key}' should be an integer, but got '{value!r}'.")
            elif key in BOOLEAN_FIELDS:
                if value is not None:
                    raise ValidationError(f"The directive '{key}' should have no value, but it does.")
                validated_data[key] = True
            elif key in LIST_FIELDS:
                if value is None:
                    validated_data[key] = True
                    continue

                values = []
                for list_value in value[1:-1].split(","):
                    if not list_value:
                        raise ValidationError("The list value must not be empty.")
                    values.append(strip_ows_around(list_value))
                validated_data[key] = values

        return validated_data

    def __repr__(self) -> str:
        fields = [f"{key}={getattr(self, key)}" for key in TIME_FIELDS if getattr(self, key) is not None]
        fields.extend(key for key in BOOLEAN_FIELDS + LIST_FIELDS if getattr(self, key))

        return f"<{type(self).__name__} {', '.join(fields)}>"
