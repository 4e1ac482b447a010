"""Tokenizer for the meta string that follows the language of a fenced block.

The meta string is a whitespace-separated list of options. Delimited values are
recognised first and blanked out of the input; what remains is split into
simple ``key=value`` pairs and bare words:

`"text"` / `'text'`
: String values. A backslash escapes the closing quote or another backslash.

`{1, 3-5}`
: Range values, kept as raw strings for the marker parser.

`/pattern/`
: Regular expressions. Append ``i`` for case-insensitive matching and a number
  to select a capture group, e.g. ``/foo(bar)/1``.

`key=value`
: Unquoted values; ``true``/``false``/missing values become booleans.

Every delimited value can carry a key (``mark={2}``, ``title="app.py"``). Keys
are compared case-insensitively. Malformed constructs never raise: they are
skipped and described in :attr:`MetaOptions.errors`.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
import re
from typing import Literal


MetaOptionKind = Literal["string", "range", "regexp", "boolean"]
MetaValue = str | bool | re.Pattern[str]

_DELIMITERS: tuple[tuple[str, str], ...] = (("'", "'"), ('"', '"'), ("/", "/"), ("{", "}"))
_KEY_VALUE_SEPARATOR = "="


def _build_delimited_pattern() -> re.Pattern[str]:
    excluded = "".join(re.escape(start) for start, _ in _DELIMITERS if len(start) == 1)
    excluded += re.escape(_KEY_VALUE_SEPARATOR)
    parts: list[str] = []
    for index, (start, end) in enumerate(_DELIMITERS):
        suffix = r"(?P<flags>i?)(?P<group>\d*)" if start == "/" else ""
        parts.append(
            rf"(?:\s|^)(?:(?P<k{index}>[^\s{excluded}]+)\s*{re.escape(_KEY_VALUE_SEPARATOR)}\s*)?"
            rf"{re.escape(start)}(?P<v{index}>(?:[^\\]|\\.)*?){re.escape(end)}{suffix}(?=\s|$)"
        )
    return re.compile("|".join(parts))


_DELIMITED = _build_delimited_pattern()
_SIMPLE = re.compile(
    rf"([^\s{re.escape(_KEY_VALUE_SEPARATOR)}]+)(?:\s*{re.escape(_KEY_VALUE_SEPARATOR)}\s*(\S+))?"
)


@dataclass(frozen=True, slots=True)
class MetaOption:
    """Single option parsed from a meta string."""

    index: int
    raw: str
    kind: MetaOptionKind
    key: str | None
    value: MetaValue
    value_start_delimiter: str = ""
    value_end_delimiter: str = ""
    group: int | None = None

    def has_key(self, key: str) -> bool:
        """Match ``key`` case-insensitively; an empty key selects keyless options."""
        if key == "":
            return not self.key
        return self.key is not None and self.key.lower() == key.lower()


class MetaOptions:
    """Parsed view of a meta string."""

    def __init__(self, meta: str = "") -> None:
        self.input = meta
        self.errors: list[str] = []
        self._options = self._parse(meta)

    def __repr__(self) -> str:
        return f"MetaOptions({self.input!r})"

    def __iter__(self) -> Iterator[MetaOption]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def select(
        self,
        keys: str | Iterable[str] | None = None,
        kind: MetaOptionKind | None = None,
    ) -> list[MetaOption]:
        """Return the options matching any of ``keys`` and ``kind`` in input order."""
        if isinstance(keys, str):
            selected_keys: tuple[str, ...] | None = (keys,)
        elif keys is None:
            selected_keys = None
        else:
            selected_keys = tuple(keys)

        result: list[MetaOption] = []
        for option in self._options:
            if kind is not None and option.kind != kind:
                continue
            if selected_keys is not None and not any(option.has_key(key) for key in selected_keys):
                continue
            result.append(option)
        return result

    def value(self, key: str, kind: MetaOptionKind | None = None) -> MetaValue | None:
        """Return the value of the last option named ``key``."""
        if not key:
            msg = "A non-empty key is required to look up a single meta value."
            raise ValueError(msg)
        matches = self.select(key, kind)
        return matches[-1].value if matches else None

    def get_string(self, key: str) -> str | None:
        value = self.value(key, "string")
        return value if isinstance(value, str) else None

    def get_strings(self, keys: str | Iterable[str] | None = None) -> list[str]:
        return [str(option.value) for option in self.select(keys, "string")]

    def get_range(self, key: str) -> str | None:
        value = self.value(key, "range")
        return value if isinstance(value, str) else None

    def get_ranges(self, keys: str | Iterable[str] | None = None) -> list[str]:
        return [str(option.value) for option in self.select(keys, "range")]

    def get_regex(self, key: str) -> re.Pattern[str] | None:
        value = self.value(key, "regexp")
        return value if isinstance(value, re.Pattern) else None

    def get_regexes(self, keys: str | Iterable[str] | None = None) -> list[re.Pattern[str]]:
        return [option.value for option in self.select(keys, "regexp")]  # type: ignore[misc]

    def get_boolean(self, key: str) -> bool | None:
        value = self.value(key, "boolean")
        return value if isinstance(value, bool) else None

    def get_integer(self, key: str) -> int | None:
        """Return the last value of ``key`` parsed as an integer, if possible."""
        value = self.value(key, "string")
        if not isinstance(value, str):
            return None
        try:
            return int(value)
        except ValueError:
            self.errors.append(f"Option `{key}` expects an integer, got `{value}`")
            return None

    def without(self, options: Iterable[MetaOption]) -> str:
        """Return the meta string with ``options`` removed."""
        characters = list(self.input)
        for option in options:
            characters[option.index : option.index + len(option.raw)] = " " * len(option.raw)
        return "".join(characters).strip()

    def _parse(self, meta: str) -> list[MetaOption]:
        options: list[MetaOption] = []
        remaining = list(meta)

        for match in _DELIMITED.finditer(meta):
            raw = match.group(0)
            index = match.start()
            remaining[index : match.end()] = " " * len(raw)

            position = next(
                pos for pos in range(len(_DELIMITERS)) if match.group(f"v{pos}") is not None
            )
            start, end = _DELIMITERS[position]
            key = match.group(f"k{position}")
            value = self._unescape(match.group(f"v{position}"), end)

            if start == "/":
                option = self._compile_regex(match, index, raw, key, value)
                if option is not None:
                    options.append(option)
                continue

            options.append(
                MetaOption(
                    index=index,
                    raw=raw,
                    kind="range" if start == "{" else "string",
                    key=key,
                    value=value,
                    value_start_delimiter=start,
                    value_end_delimiter=end,
                )
            )

        for match in _SIMPLE.finditer("".join(remaining)):
            key, value = match.group(1), match.group(2)
            if value is None or value in {"true", "false"}:
                options.append(
                    MetaOption(
                        index=match.start(),
                        raw=match.group(0),
                        kind="boolean",
                        key=key,
                        value=value != "false",
                    )
                )
            else:
                options.append(
                    MetaOption(
                        index=match.start(),
                        raw=match.group(0),
                        kind="string",
                        key=key,
                        value=value,
                    )
                )

        options.sort(key=lambda option: option.index)
        return options

    def _compile_regex(
        self, match: re.Match[str], index: int, raw: str, key: str | None, value: str
    ) -> MetaOption | None:
        flags = re.IGNORECASE if match.group("flags") else 0
        group_text = match.group("group")
        try:
            pattern = re.compile(value, flags)
        except re.error as exc:
            self.errors.append(f"Failed to parse option `{raw.strip()}`: {exc}")
            return None
        group = int(group_text) if group_text else None
        if group is not None and group > pattern.groups:
            self.errors.append(
                f"Failed to parse option `{raw.strip()}`: "
                f"capture group {group} does not exist in the pattern"
            )
            return None
        return MetaOption(
            index=index,
            raw=raw,
            kind="regexp",
            key=key,
            value=pattern,
            value_start_delimiter="/",
            value_end_delimiter="/",
            group=group,
        )

    @staticmethod
    def _unescape(value: str, end_delimiter: str) -> str:
        return re.sub(rf"\\(\\|{re.escape(end_delimiter)})", r"\1", value)


__all__ = ["MetaOption", "MetaOptionKind", "MetaOptions", "MetaValue"]
