"""OpenGL enum bindings generator for Mojo.

Folds the `<enums>` scopes of the Khronos gl.xml registry into a
conflict-checked constant table and writes one API's constants as a
staged Mojo package (gl_enums.mojo + __init__.mojo).

Names are written without their GL_ prefix unless --keep-prefix is given.
A name that would then start with a digit (GL_2D, GL_3_BYTES) is written
with its prefix so that every declaration stays a valid Mojo identifier.

Usage:
    python glgen.py --api gl --gl-xml OpenGL-Registry/xml/gl.xml
"""

import argparse
import re
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from xml.parsers import expat

PROJECT_ROOT = Path(__file__).parent
DEFAULT_GL_XML = PROJECT_ROOT / "OpenGL-Registry" / "xml" / "gl.xml"
DEFAULT_OUTPUT_DIR = PROJECT_ROOT / "out" / "gl"
DEFAULT_PREFIX = "GL_"


# ===--- CLI config contracts ---=== #


@dataclass(frozen=True)
class GenerateConfig:
    api: str
    gl_xml: Path
    output_dir: Path
    strip_prefix: bool = True
    prefix: str = DEFAULT_PREFIX
    negative_radix: int = 10


@dataclass(frozen=True)
class DiscoveryConfig:
    command: str
    filter_text: str | None
    info_name: str | None
    gl_xml: Path
    negative_radix: int = 10


VALID_ERROR_CODES = {
    "INVALID_API",
    "MISSING_API",
    "INVALID_PREFIX",
    "INVALID_ENUM_NAME",
    "CONFLICT_GENERATE_DISCOVERY",
    "FILTER_WITHOUT_LIST",
    "PATH_NOT_FOUND",
}
VALID_APIS = ("gl", "gles1", "gles2", "glsc2")
VALID_NEGATIVE_RADIXES = (10, 16)
_ENUM_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_PREFIX_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*_$")


class ConfigError(Exception):
    def __init__(self, code: str, message: str, suggestion: str | None = None):
        if code not in VALID_ERROR_CODES:
            raise ValueError(f"Unknown config error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion


def parse_api(raw: str) -> str:
    if raw not in VALID_APIS:
        raise ConfigError(
            "INVALID_API",
            f"Unsupported API: {raw}",
            "Use one of: gl, gles1, gles2, glsc2.",
        )
    return raw


def validate_prefix(prefix: str) -> str:
    if _PREFIX_RE.match(prefix):
        return prefix
    raise ConfigError(
        "INVALID_PREFIX",
        f"Invalid namespace prefix: {prefix!r}",
        "Prefixes are an identifier followed by an underscore (for example GL_).",
    )


def validate_enum_name(name: str) -> str:
    if _ENUM_NAME_RE.match(name):
        return name
    raise ConfigError(
        "INVALID_ENUM_NAME",
        f"Invalid enum name: {name}",
        "Pass the full registry name, for example GL_TRIANGLES.",
    )


def validate_path_exists(
    path: Path | None, flag: str, suggestion: str | None = None
) -> Path:
    if path is None:
        raise ConfigError(
            "PATH_NOT_FOUND",
            f"{flag} is required: no path provided.",
            suggestion or f"Pass the path explicitly: {flag} /path/to/resource",
        )
    if path.exists():
        return path
    raise ConfigError(
        "PATH_NOT_FOUND",
        f"Path for {flag} does not exist: {path}",
        suggestion or "Provide an existing path for this flag.",
    )


_GL_XML_SUGGESTION = (
    "Clone OpenGL-Registry:\n"
    "  git clone https://github.com/KhronosGroup/OpenGL-Registry.git\n"
    "Or pass a custom path: --gl-xml /your/path/to/gl.xml"
)


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate OpenGL enums for Mojo")

    parser.add_argument("--api", type=str, default=None)
    parser.add_argument("--gl-xml", type=Path, default=DEFAULT_GL_XML)
    parser.add_argument("--output-dir", type=Path, default=DEFAULT_OUTPUT_DIR)
    parser.add_argument("--keep-prefix", action="store_true", default=False)
    parser.add_argument("--prefix", type=str, default=DEFAULT_PREFIX)
    parser.add_argument(
        "--negative-radix", type=int, choices=VALID_NEGATIVE_RADIXES, default=10
    )

    discovery_group = parser.add_mutually_exclusive_group()
    discovery_group.add_argument("--list-groups", action="store_true", default=False)
    discovery_group.add_argument("--info", type=str, default=None)

    parser.add_argument("--filter", type=str, default=None)

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_argument_parser()
    return parser.parse_args(argv)


def validate_config(args: argparse.Namespace) -> GenerateConfig | DiscoveryConfig:
    has_generate_input = bool(
        args.api or args.keep_prefix or args.prefix != DEFAULT_PREFIX
    )
    has_discovery_command = bool(args.list_groups or args.info)

    if args.filter and not args.list_groups:
        raise ConfigError(
            "FILTER_WITHOUT_LIST",
            "--filter requires --list-groups.",
            "Add --list-groups or remove --filter.",
        )

    if has_generate_input and has_discovery_command:
        raise ConfigError(
            "CONFLICT_GENERATE_DISCOVERY",
            "Generate flags cannot be combined with discovery flags.",
            "Choose either generate mode or one discovery command.",
        )

    if has_discovery_command:
        gl_xml = validate_path_exists(args.gl_xml, "--gl-xml", _GL_XML_SUGGESTION)
        command = "list-groups" if args.list_groups else "info"
        info_name = validate_enum_name(args.info) if args.info is not None else None
        return DiscoveryConfig(
            command=command,
            filter_text=args.filter,
            info_name=info_name,
            gl_xml=gl_xml,
            negative_radix=args.negative_radix,
        )

    if args.api is None:
        raise ConfigError(
            "MISSING_API",
            "Generate mode requires --api.",
            "Pass --api with one of: gl, gles1, gles2, glsc2.",
        )

    api = parse_api(args.api)
    prefix = validate_prefix(args.prefix)
    gl_xml = validate_path_exists(args.gl_xml, "--gl-xml", _GL_XML_SUGGESTION)

    return GenerateConfig(
        api=api,
        gl_xml=gl_xml,
        output_dir=args.output_dir,
        strip_prefix=not args.keep_prefix,
        prefix=prefix,
        negative_radix=args.negative_radix,
    )


def build_config(argv: list[str] | None = None) -> GenerateConfig | DiscoveryConfig:
    return validate_config(parse_args(argv))


# ===--- Registry errors ---=== #

REGISTRY_ERROR_CODES = {
    "MALFORMED_NUMBER",
    "UNRECOGNIZED_ATTRIBUTE",
    "MISSING_ATTRIBUTE",
    "CONFLICTING_REDEFINITION",
    "UNEXPECTED_TAG",
    "UNEXPECTED_END_OF_INPUT",
    "NAME_TOO_SHORT_FOR_PREFIX",
    "PREFIX_MISMATCH",
}


class RegistryError(Exception):
    """Base for every failure raised while folding or rendering the registry.

    None of these are recoverable: a malformed registry must halt generation
    rather than produce a partially-correct constant table.

    Attributes:
        code: One of REGISTRY_ERROR_CODES, fixed per subclass.
        message: Human-readable description without location.
        line: 1-based source line of the offending tag, when known.
    """

    code: str = ""

    def __init__(self, message: str, line: int | None = None):
        if self.code not in REGISTRY_ERROR_CODES:
            raise ValueError(f"Unknown registry error code: {self.code!r}")
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"


class MalformedNumber(RegistryError):
    code = "MALFORMED_NUMBER"

    def __init__(self, text: str, expected: str, line: int | None = None):
        super().__init__(f"Malformed {expected} value: {text!r}", line)
        self.text = text
        self.expected = expected


class UnrecognizedAttribute(RegistryError):
    code = "UNRECOGNIZED_ATTRIBUTE"

    def __init__(self, key: str, value: str, line: int | None = None):
        super().__init__(f"Unrecognized enum attribute: {key}={value!r}", line)
        self.key = key
        self.value = value


class MissingAttribute(RegistryError):
    code = "MISSING_ATTRIBUTE"

    def __init__(self, attribute: str, line: int | None = None):
        super().__init__(f"Enum entry is missing required attribute: {attribute}", line)
        self.attribute = attribute


class ConflictingRedefinition(RegistryError):
    code = "CONFLICTING_REDEFINITION"

    def __init__(self, key, old, new, line: int | None = None):
        super().__init__(
            f"Conflicting redefinition of {key}: old {old}, new {new}", line
        )
        self.key = key
        self.old = old
        self.new = new


class UnexpectedTag(RegistryError):
    code = "UNEXPECTED_TAG"

    def __init__(self, event, line: int | None = None):
        super().__init__(
            f"Unexpected {type(event).__name__} <{event.name}> inside <enums>",
            event.line if line is None else line,
        )
        self.event = event


class UnexpectedEndOfInput(RegistryError):
    code = "UNEXPECTED_END_OF_INPUT"

    def __init__(self, scope: str, line: int | None = None):
        super().__init__(f"Input ended before </{scope}> was seen", line)
        self.scope = scope


class NameTooShortForPrefix(RegistryError):
    code = "NAME_TOO_SHORT_FOR_PREFIX"

    def __init__(self, name: str, prefix: str):
        super().__init__(f"Cannot strip prefix {prefix!r} from name {name!r}")
        self.name = name
        self.prefix = prefix


class PrefixMismatch(RegistryError):
    code = "PREFIX_MISMATCH"

    def __init__(self, name: str, prefix: str):
        super().__init__(f"Name {name!r} does not start with prefix {prefix!r}")
        self.name = name
        self.prefix = prefix


# ===--- Enum data model ---=== #

U32_MAX = 0xFFFF_FFFF
U64_MAX = 0xFFFF_FFFF_FFFF_FFFF
I32_MIN = -(1 << 31)


@dataclass(frozen=True)
class EnumKey:
    """Identity of one constant.

    Most enums have api None, meaning one definition for every GL API. A few
    names take different values depending on the API, so the api is part of
    the key.
    """

    name: str
    api: str | None = None

    def __str__(self) -> str:
        if self.api is None:
            return self.name
        return f"{self.name} [api={self.api}]"


def _check_width(value: int, limit: int, kind: str) -> None:
    if not 0 <= value <= limit:
        raise ValueError(f"{kind} value out of range: {value}")


@dataclass(frozen=True)
class Enumerant:
    """A GLenum value."""

    value: int

    def __post_init__(self) -> None:
        _check_width(self.value, U32_MAX, "Enumerant")

    def __str__(self) -> str:
        return f"Enumerant(0x{self.value:X})"


@dataclass(frozen=True)
class Bitmask:
    """A GLbitfield value."""

    value: int

    def __post_init__(self) -> None:
        _check_width(self.value, U32_MAX, "Bitmask")

    def __str__(self) -> str:
        return f"Bitmask(0x{self.value:08X})"


@dataclass(frozen=True)
class Wide:
    """A 64-bit value, tagged type="ull" in the registry."""

    value: int

    def __post_init__(self) -> None:
        _check_width(self.value, U64_MAX, "Wide")

    def __str__(self) -> str:
        return f"Wide(0x{self.value:X})"


EnumValue = Enumerant | Bitmask | Wide


class EnumTable:
    """Every resolved constant seen so far, keyed by EnumKey.

    Entries are write-once: re-inserting a key is allowed only with an equal
    value. Iteration follows insertion order; use sorted_items() when output
    must be deterministic across registries.
    """

    def __init__(self) -> None:
        self._entries: dict[EnumKey, EnumValue] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[EnumKey]:
        return iter(self._entries)

    def get(self, key: EnumKey) -> EnumValue | None:
        return self._entries.get(key)

    def items(self) -> list[tuple[EnumKey, EnumValue]]:
        return list(self._entries.items())

    def sorted_items(self) -> list[tuple[EnumKey, EnumValue]]:
        return sorted(
            self._entries.items(), key=lambda item: (item[0].name, item[0].api or "")
        )

    def insert(self, key: EnumKey, value: EnumValue) -> bool:
        """Insert key -> value.

        Returns:
            True if the key was new, False if it was already present with an
            equal value.

        Raises:
            ConflictingRedefinition: The key is present with a different
                value. The stored value is left untouched.
        """
        old = self._entries.get(key)
        if old is None:
            self._entries[key] = value
            return True
        if old != value:
            raise ConflictingRedefinition(key, old, value)
        return False

    def merge(self, other: "EnumTable") -> int:
        """Fold another table into this one with the insert() conflict rule."""
        added = 0
        for key, value in other.items():
            if self.insert(key, value):
                added += 1
        return added


# ===--- Registry events ---=== #


@dataclass(frozen=True)
class StartTag:
    name: str
    attrs: tuple[str, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class EmptyTag:
    name: str
    attrs: tuple[str, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class EndTag:
    name: str
    line: int = 0


Event = StartTag | EmptyTag | EndTag


def split_attributes(blob: Iterable[str]) -> list[tuple[str, str]]:
    """Pair up a flat attribute blob (k1, v1, k2, v2, ...) in source order."""
    items = list(blob)
    if len(items) % 2:
        raise ValueError(f"Attribute blob has an odd number of items: {items!r}")
    return list(zip(items[0::2], items[1::2]))


def iter_registry_events(
    data: bytes | str, chunk_size: int = 64 * 1024
) -> Iterator[Event]:
    """Tokenize registry markup into tag events.

    An element whose end tag directly follows its start tag (no text, no
    children) is reported as a single EmptyTag, so `<enum/>` and
    `<enum></enum>` are the same event. Input that stops mid-document simply
    ends the stream; syntax errors raise expat.ExpatError.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    parser = expat.ParserCreate()
    parser.ordered_attributes = True
    # Expat >= 2.6 may defer tokens split across chunks until the final parse,
    # which is never issued here.
    if hasattr(parser, "SetReparseDeferralEnabled"):
        parser.SetReparseDeferralEnabled(False)
    ready: list[Event] = []
    held: StartTag | None = None

    def release() -> None:
        nonlocal held
        if held is not None:
            ready.append(held)
            held = None

    def on_start(name: str, attrs: list[str]) -> None:
        nonlocal held
        release()
        held = StartTag(name, tuple(attrs), parser.CurrentLineNumber)

    def on_end(name: str) -> None:
        nonlocal held
        if held is not None and held.name == name:
            ready.append(EmptyTag(held.name, held.attrs, held.line))
            held = None
            return
        release()
        ready.append(EndTag(name, parser.CurrentLineNumber))

    def on_text(_text: str) -> None:
        release()

    parser.StartElementHandler = on_start
    parser.EndElementHandler = on_end
    parser.CharacterDataHandler = on_text

    for offset in range(0, len(data), chunk_size):
        parser.Parse(data[offset : offset + chunk_size], False)
        yield from ready
        ready.clear()

    release()
    yield from ready


def read_registry_events(path: Path) -> Iterator[Event]:
    return iter_registry_events(Path(path).read_bytes())


# ===--- Value resolution ---=== #

_HEX_RE = re.compile(r"[0-9A-Fa-f]+")
_DEC_RE = re.compile(r"[0-9]+")
_NEGATIVE_RES = {
    10: re.compile(r"-[0-9]+"),
    16: re.compile(r"-[0-9A-Fa-f]+"),
}


def _strip_hex_prefix(text: str) -> str:
    if text[:2] not in ("0x", "0X"):
        raise MalformedNumber(text, "hexadecimal")
    return text[2:]


def _parse_unsigned(
    digits: str, radix: int, limit: int, text: str, expected: str
) -> int:
    pattern = _HEX_RE if radix == 16 else _DEC_RE
    if not pattern.fullmatch(digits):
        raise MalformedNumber(text, expected)
    value = int(digits, radix)
    if value > limit:
        raise MalformedNumber(text, expected)
    return value


def _parse_negative(text: str, radix: int) -> int:
    pattern = _NEGATIVE_RES.get(radix)
    if pattern is None:
        raise ValueError(f"Unsupported negative radix: {radix}")
    if not pattern.fullmatch(text):
        raise MalformedNumber(text, f"negative base-{radix}")
    value = int(text, radix)
    if value < I32_MIN:
        raise MalformedNumber(text, f"negative base-{radix}")
    return value & U32_MAX


def resolve_value(
    text: str,
    is_wide: bool = False,
    is_bitmask: bool = False,
    negative_radix: int = 10,
) -> EnumValue:
    """Turn one entry's raw value text into an EnumValue.

    Checked in order: the wide marker, a hex marker ('x' or 'X'), a minus
    sign, then plain decimal. Negative values keep their 32-bit two's
    complement bit pattern. negative_radix=16 reads their digits as hex, for
    bit-compatibility with output generated that way.

    Raises:
        MalformedNumber: The text does not parse in the selected format or
            does not fit its width.
    """
    if is_wide:
        digits = _strip_hex_prefix(text)
        return Wide(_parse_unsigned(digits, 16, U64_MAX, text, "64-bit hexadecimal"))

    variant = Bitmask if is_bitmask else Enumerant
    if "x" in text or "X" in text:
        digits = _strip_hex_prefix(text)
        return variant(_parse_unsigned(digits, 16, U32_MAX, text, "hexadecimal"))
    if "-" in text:
        return variant(_parse_negative(text, negative_radix))
    return variant(_parse_unsigned(text, 10, U32_MAX, text, "decimal"))


# ===--- Enums scope folding ---=== #

WIDE_TYPE_MARKER = "ull"
IGNORED_ENUM_ATTRIBUTES = frozenset({"alias", "comment"})


@dataclass(frozen=True)
class EnumEntry:
    name: str
    value: str
    api: str | None = None
    is_wide: bool = False


def read_enum_entry(blob: Iterable[str]) -> EnumEntry:
    name = None
    value = None
    api = None
    is_wide = False
    for key, text in split_attributes(blob):
        if key == "name":
            name = text
        elif key == "value":
            value = text
        elif key == "type":
            is_wide = text == WIDE_TYPE_MARKER
        elif key == "api":
            api = text
        elif key in IGNORED_ENUM_ATTRIBUTES:
            continue
        else:
            raise UnrecognizedAttribute(key, text)
    if not name:
        raise MissingAttribute("name")
    if value is None:
        raise MissingAttribute("value")
    return EnumEntry(name=name, value=value, api=api, is_wide=is_wide)


def fold_enums(
    events: Iterator[Event],
    table: EnumTable,
    is_bitmask: bool = False,
    group: set[str] | None = None,
    negative_radix: int = 10,
) -> int:
    """Fold one `<enums>` scope into the table.

    `events` must be positioned just after the scope's opening tag; it is
    consumed up to and including the matching `</enums>`. When `group` is
    given, the name of every newly inserted key is added to it.

    Args:
        events: Shared event iterator.
        table: Table to insert into.
        is_bitmask: Whether the scope is type="bitmask".
        group: Optional accumulator for the scope's group membership.
        negative_radix: Radix for values containing a minus sign.

    Returns:
        Number of keys newly inserted by this scope.

    Raises:
        RegistryError: Any entry failure, an unexpected tag, or end of input
            before `</enums>`. Entry errors carry the entry's source line.
    """
    inserted = 0
    for event in events:
        if isinstance(event, EndTag) and event.name == "enums":
            return inserted
        if isinstance(event, EmptyTag) and event.name == "enum":
            try:
                entry = read_enum_entry(event.attrs)
                value = resolve_value(
                    entry.value, entry.is_wide, is_bitmask, negative_radix
                )
                key = EnumKey(entry.name, entry.api)
                if table.insert(key, value):
                    inserted += 1
                    if group is not None:
                        group.add(key.name)
            except RegistryError as err:
                if err.line is None:
                    err.line = event.line
                raise
            continue
        if isinstance(event, EmptyTag) and event.name == "unused":
            continue
        raise UnexpectedTag(event)
    raise UnexpectedEndOfInput("enums")


# ===--- Rendering ---=== #

MOJO_ENUM_TYPE = "GLenum"
MOJO_BITMASK_TYPE = "GLbitfield"
MOJO_WIDE_TYPE = "UInt64"


def strip_name_prefix(name: str, prefix: str = DEFAULT_PREFIX) -> str:
    if len(name) < len(prefix):
        raise NameTooShortForPrefix(name, prefix)
    if not name.startswith(prefix):
        raise PrefixMismatch(name, prefix)
    return name[len(prefix) :]


def render_enum(
    key: EnumKey,
    value: EnumValue,
    strip_prefix: bool = False,
    prefix: str = DEFAULT_PREFIX,
) -> str:
    """Render one constant as a Mojo `comptime` declaration.

    GLenum values use minimal uppercase hex, GLbitfield values are padded to
    8 digits, and 64-bit values use minimal hex with a UInt64 type.

        comptime TRIANGLES: GLenum = 0x4
        comptime DEPTH_BUFFER_BIT: GLbitfield = 0x00000100
        comptime TIMEOUT_IGNORED: UInt64 = 0xFFFFFFFFFFFFFFFF
    """
    name = strip_name_prefix(key.name, prefix) if strip_prefix else key.name
    if isinstance(value, Bitmask):
        return f"comptime {name}: {MOJO_BITMASK_TYPE} = 0x{value.value:08X}"
    if isinstance(value, Wide):
        return f"comptime {name}: {MOJO_WIDE_TYPE} = 0x{value.value:X}"
    return f"comptime {name}: {MOJO_ENUM_TYPE} = 0x{value.value:X}"


# ===--- Registry driver ---=== #


@dataclass
class FoldedRegistry:
    """Everything collected from a registry's `<enums>` scopes.

    Attributes:
        table: Every resolved constant, across all API variants.
        groups: Group name -> names first defined in a scope of that group.
        scope_count: Number of `<enums>` scopes folded.
    """

    table: EnumTable = field(default_factory=EnumTable)
    groups: dict[str, set[str]] = field(default_factory=dict)
    scope_count: int = 0


def fold_registry(events: Iterable[Event], negative_radix: int = 10) -> FoldedRegistry:
    """Fold every `<enums>` scope of a registry event stream.

    Everything outside an `<enums>` scope (types, commands, features,
    extensions) is skipped.
    """
    folded = FoldedRegistry()
    it = iter(events)
    for event in it:
        if not (isinstance(event, StartTag) and event.name == "enums"):
            continue
        attrs = dict(split_attributes(event.attrs))
        group_name = attrs.get("group")
        group = folded.groups.setdefault(group_name, set()) if group_name else None
        fold_enums(
            it,
            folded.table,
            is_bitmask=attrs.get("type") == "bitmask",
            group=group,
            negative_radix=negative_radix,
        )
        folded.scope_count += 1
    return folded


def select_api(table: EnumTable, api: str) -> list[tuple[EnumKey, EnumValue]]:
    """Pick one value per name for a single API, sorted by name.

    An api-specific key wins over the unrestricted (api=None) key of the same
    name; keys tagged for other APIs are dropped.
    """
    chosen: dict[str, tuple[EnumKey, EnumValue]] = {}
    for key, value in table.items():
        if key.api is None:
            chosen.setdefault(key.name, (key, value))
        elif key.api == api:
            chosen[key.name] = (key, value)
    return [chosen[name] for name in sorted(chosen)]


def load_registry(gl_xml: Path, negative_radix: int = 10) -> FoldedRegistry:
    return fold_registry(read_registry_events(gl_xml), negative_radix)


# ===--- Discovery ---=== #


@dataclass(frozen=True)
class GroupSummary:
    name: str
    member_count: int


@dataclass(frozen=True)
class EnumVariant:
    api: str | None
    value: EnumValue


@dataclass(frozen=True)
class EnumDetail:
    """All registry facts about one constant name.

    Attributes:
        name: Full registry name, e.g. "GL_TRIANGLES".
        variants: One entry per API variant, unrestricted (api=None) first.
        groups: Sorted names of the groups the constant belongs to.
    """

    name: str
    variants: tuple[EnumVariant, ...]
    groups: tuple[str, ...]


def gather_group_summaries(folded: FoldedRegistry) -> list[GroupSummary]:
    return [
        GroupSummary(name=name, member_count=len(members))
        for name, members in sorted(folded.groups.items())
    ]


def filter_groups_by_text(
    summaries: list[GroupSummary], filter_text: str
) -> list[GroupSummary]:
    needle = filter_text.lower()
    return [s for s in summaries if needle in s.name.lower()]


def gather_enum_detail(folded: FoldedRegistry, name: str) -> EnumDetail | None:
    variants = [
        EnumVariant(api=key.api, value=value)
        for key, value in folded.table.sorted_items()
        if key.name == name
    ]
    if not variants:
        return None
    groups = sorted(g for g, members in folded.groups.items() if name in members)
    return EnumDetail(name=name, variants=tuple(variants), groups=tuple(groups))


def format_groups_table(summaries: list[GroupSummary], source_name: str) -> str:
    lines = [f"Enum groups in {source_name}:", ""]
    if not summaries:
        lines.append("  (no groups)")
    else:
        width = max(len(s.name) for s in summaries)
        for s in summaries:
            lines.append(f"  {s.name:<{width}}  {s.member_count:>5}")
    lines.append("")
    lines.append(f"  {len(summaries)} groups")
    return "\n".join(lines) + "\n"


def format_enum_detail(detail: EnumDetail) -> str:
    lines = [detail.name, ""]
    for variant in detail.variants:
        api = variant.api or "all"
        lines.append(f"  API {api:<6} {variant.value}")
    lines.append("")
    lines.append(f"  Groups: {', '.join(detail.groups) if detail.groups else '(none)'}")
    return "\n".join(lines) + "\n"


def run_discovery(config: DiscoveryConfig) -> None:
    """Execute the discovery command specified in config.

    dispatch table:
      "list-groups" -> gather_group_summaries -> [filter] -> format_groups_table
      "info"        -> gather_enum_detail -> [None check] -> format_enum_detail -> print

    Raises:
        SystemExit(1): When config.command == "info" and the name is not in
            the registry.
        RegistryError: Propagated from folding the registry.
    """
    folded = load_registry(config.gl_xml, config.negative_radix)
    source_name = config.gl_xml.name

    if config.command == "list-groups":
        summaries = gather_group_summaries(folded)
        if config.filter_text is not None:
            summaries = filter_groups_by_text(summaries, config.filter_text)
        print(format_groups_table(summaries, source_name), end="")

    elif config.command == "info":
        assert config.info_name is not None
        detail = gather_enum_detail(folded, config.info_name)
        if detail is None:
            print(
                f"Error: enum '{config.info_name}' not found in {source_name}",
                file=sys.stderr,
            )
            raise SystemExit(1)
        print(format_enum_detail(detail), end="")


# ===--- Package writer ---=== #

MODULE_ENUMS: str = "gl_enums"

BASE_TYPE_ALIASES: tuple[str, ...] = (
    f"comptime {MOJO_ENUM_TYPE} = UInt32",
    f"comptime {MOJO_BITMASK_TYPE} = UInt32",
)


@dataclass(frozen=True)
class WriteConfig:
    """Shared generation metadata embedded in every file preamble.

    Attributes:
        source_name: Registry file name, e.g. "gl.xml".
        api: Selected API variant, e.g. "gles2".
        strip_prefix: Whether emitted names drop the namespace prefix.
        prefix: Namespace prefix, e.g. "GL_".
    """

    source_name: str
    api: str
    strip_prefix: bool = True
    prefix: str = DEFAULT_PREFIX


@dataclass(frozen=True)
class FileWriteResult:
    """Result of writing a single generated file.

    Attributes:
        filename: Filename written, e.g. "gl_enums.mojo".
        path: Absolute path of the written file.
        line_count: Number of newline characters in the written content.
        byte_count: Number of bytes written (UTF-8 encoded).
    """

    filename: str
    path: Path
    line_count: int
    byte_count: int


@dataclass(frozen=True)
class PackageWriteResult:
    output_dir: Path
    files: tuple[FileWriteResult, ...]

    @property
    def total_lines(self) -> int:
        return sum(f.line_count for f in self.files)


_HEADER_BORDER: str = "# x-------------------------------------------x #"
_MOJO_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def format_file_header(config: WriteConfig) -> list[str]:
    """Return comment-block lines for a generated module file header.

    Output format:
        # x-------------------------------------------x #
        # | OpenGL gles2 enums for Mojo
        # | Generated by gl-enums-gen
        # | Source: gl.xml
        # | Names: GL_ prefix stripped
        # x-------------------------------------------x #

    Raises:
        ValueError: If config.source_name is empty.
    """
    if not config.source_name:
        raise ValueError("source_name must not be empty")

    names = (
        f"{config.prefix} prefix stripped" if config.strip_prefix else "registry names"
    )
    return [
        _HEADER_BORDER,
        f"# | OpenGL {config.api} enums for Mojo",
        "# | Generated by gl-enums-gen",
        f"# | Source: {config.source_name}",
        f"# | Names: {names}",
        _HEADER_BORDER,
    ]


def build_enum_module_lines(
    entries: list[tuple[EnumKey, EnumValue]], config: WriteConfig
) -> list[str]:
    """Render the body of gl_enums.mojo.

    An entry whose stripped name is not a Mojo identifier (GL_2D -> 2D) keeps
    its registry name.

    Raises:
        NameTooShortForPrefix, PrefixMismatch: Propagated from strip_name_prefix.
    """
    lines = list(BASE_TYPE_ALIASES)
    lines.append("")
    lines.append("# ========= ENUMS =========")
    lines.append("")
    for key, value in entries:
        strip = config.strip_prefix and bool(
            _MOJO_IDENTIFIER_RE.match(strip_name_prefix(key.name, config.prefix))
        )
        lines.append(render_enum(key, value, strip, config.prefix))
    return lines


def assemble_module_source(config: WriteConfig, content_lines: list[str]) -> str:
    parts = format_file_header(config)
    if content_lines:
        parts.append("")
        parts.extend(content_lines)
    return "\n".join(parts) + "\n"


def assemble_init_source(config: WriteConfig) -> str:
    docstring = f'"""OpenGL {config.api} enums for Mojo. Generated by gl-enums-gen."""'
    return "\n".join([docstring, "", f"from .{MODULE_ENUMS} import *"]) + "\n"


def _write_file(output_dir: Path, filename: str, content: str) -> FileWriteResult:
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    file_path = output_dir / filename
    file_path.write_text(content, encoding="utf-8")
    resolved = file_path.resolve()
    return FileWriteResult(
        filename=filename,
        path=resolved,
        line_count=content.count("\n"),
        byte_count=len(resolved.read_bytes()),
    )


def write_module(
    output_dir: Path, config: WriteConfig, content_lines: list[str]
) -> FileWriteResult:
    return _write_file(
        output_dir,
        f"{MODULE_ENUMS}.mojo",
        assemble_module_source(config, content_lines),
    )


def write_init_module(output_dir: Path, config: WriteConfig) -> FileWriteResult:
    return _write_file(output_dir, "__init__.mojo", assemble_init_source(config))


def write_package(
    output_dir: Path, config: WriteConfig, content_lines: list[str]
) -> PackageWriteResult:
    """Write gl_enums.mojo then __init__.mojo.

    content_lines must already be fully rendered: nothing is written when
    rendering fails.
    """
    files = (
        write_module(output_dir, config, content_lines),
        write_init_module(output_dir, config),
    )
    return PackageWriteResult(output_dir=Path(output_dir), files=files)


# ===--- Summary report ---=== #


@dataclass(frozen=True)
class EnumCounts:
    """Counts of emitted constants per value variant.

    Attributes:
        enums: GLenum constants emitted.
        bitmasks: GLbitfield constants emitted.
        wide: UInt64 constants emitted.
        dropped: Table keys not emitted because they belong to another API
            or were overridden by an api-specific variant.
        groups: Number of distinct groups seen in the registry.
    """

    enums: int
    bitmasks: int
    wide: int
    dropped: int
    groups: int

    @property
    def total(self) -> int:
        return self.enums + self.bitmasks + self.wide


@dataclass(frozen=True)
class GenerationSummary:
    target_label: str
    source_label: str
    output_dir: str
    counts: EnumCounts
    files: tuple[FileWriteResult, ...]


def build_enum_counts(
    folded: FoldedRegistry, entries: list[tuple[EnumKey, EnumValue]]
) -> EnumCounts:
    enums = sum(1 for _, v in entries if isinstance(v, Enumerant))
    bitmasks = sum(1 for _, v in entries if isinstance(v, Bitmask))
    wide = sum(1 for _, v in entries if isinstance(v, Wide))
    return EnumCounts(
        enums=enums,
        bitmasks=bitmasks,
        wide=wide,
        dropped=len(folded.table) - len(entries),
        groups=len(folded.groups),
    )


def build_generation_summary(
    write_config: WriteConfig,
    folded: FoldedRegistry,
    entries: list[tuple[EnumKey, EnumValue]],
    write_result: PackageWriteResult,
) -> GenerationSummary:
    return GenerationSummary(
        target_label=f"OpenGL {write_config.api}",
        source_label=write_config.source_name,
        output_dir=str(write_result.output_dir),
        counts=build_enum_counts(folded, entries),
        files=write_result.files,
    )


def format_generation_summary(summary: GenerationSummary) -> str:
    """Render a GenerationSummary to the multi-section console string.

    Line counts use thousands separators. Returns a string with exactly one
    trailing newline.
    """
    counts = summary.counts
    lines: list[str] = []
    lines.append(f"{summary.target_label} enums generated:")
    lines.append("")
    lines.append(f"  Target:     {summary.target_label}")
    lines.append(f"  Source:     {summary.source_label}")
    lines.append(f"  Output:     {summary.output_dir}")
    lines.append("")
    lines.append("  Constants generated:")
    lines.append(f"    {'GLenum:':<12}{counts.enums:>6}")
    lines.append(f"    {'GLbitfield:':<12}{counts.bitmasks:>6}")
    lines.append(f"    {'UInt64:':<12}{counts.wide:>6}")
    lines.append(f"    {'Dropped:':<12}{counts.dropped:>6}  (other API variants)")
    lines.append(f"    {'Groups:':<12}{counts.groups:>6}")
    lines.append("")
    lines.append("  Files written:")
    for file_result in summary.files:
        lines.append(
            f"    {file_result.filename:<28} {file_result.line_count:>6,} lines"
        )
    total_lines = sum(f.line_count for f in summary.files)
    lines.append("")
    lines.append(
        f"  Total: {counts.total:,} constants, {total_lines:,} lines"
        f" across {len(summary.files)} files"
    )
    lines.append("")
    return "\n".join(lines)


def print_generation_summary(summary: GenerationSummary) -> None:
    print(format_generation_summary(summary), end="")


# ===--- Main generation ---=== #


def run_generate(config: GenerateConfig) -> PackageWriteResult:
    """Execute the complete generation pipeline for a GenerateConfig.

    parse + fold -> select API -> render -> write -> summary.

    Raises:
        OSError: Registry not readable or filesystem write failure.
        expat.ExpatError: Malformed registry markup.
        RegistryError: Any folding or rendering failure. Raised before any
            file is written.
    """
    print(f"Parsing: {config.gl_xml}")
    folded = load_registry(config.gl_xml, config.negative_radix)
    print(
        f"  Folded: {folded.scope_count} enums scopes, "
        f"{len(folded.table)} constants, {len(folded.groups)} groups"
    )

    entries = select_api(folded.table, config.api)
    print(f"  Selected: {len(entries)} constants for api={config.api}")

    write_config = WriteConfig(
        source_name=config.gl_xml.name,
        api=config.api,
        strip_prefix=config.strip_prefix,
        prefix=config.prefix,
    )
    content_lines = build_enum_module_lines(entries, write_config)
    result = write_package(config.output_dir, write_config, content_lines)
    print(
        f"  Written: {len(result.files)} files, "
        f"{result.total_lines} lines to {result.output_dir}"
    )

    print_generation_summary(
        build_generation_summary(write_config, folded, entries, result)
    )
    return result


def main():
    try:
        config = build_config()
    except ConfigError as err:
        print(f"Config error [{err.code}]: {err.message}")
        if err.suggestion:
            print(f"Hint: {err.suggestion}")
        raise SystemExit(1) from err

    try:
        if isinstance(config, DiscoveryConfig):
            run_discovery(config)
        else:
            run_generate(config)
    except RegistryError as err:
        print(f"Registry error [{err.code}]: {err}")
        raise SystemExit(1) from err
    except (OSError, expat.ExpatError) as err:
        print(f"Error: {err}")
        raise SystemExit(1) from err


if __name__ == "__main__":
    main()
