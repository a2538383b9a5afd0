"""Closed-schema codec between TOML tables and `Policy` fragments.

Keys are kebab-case (`allow-branch`, `pre-release-commit-message`, ...).
Every table of the policy schema is closed: an unknown key is an error, so
a typo in `release.toml` fails loudly instead of silently doing nothing.

Some values accept more than one shape and carry no tag; they are tried in
a fixed order:
- `shared-version`: boolean, then group name string
- `pre-release-hook`: command line string, then argument list
"""

from __future__ import annotations

import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import tomli_w

from rel.core.result import Err, Ok, Result
from rel.core.structured import StrDict, as_str_dict, as_str_list

from .errors import PolicyError
from .model import (
    CertsSource,
    Command,
    CommandArgs,
    CommandLine,
    DependentVersion,
    MetadataPolicy,
    Policy,
    RateLimit,
    Replace,
    SharedVersion,
    SharedVersionEnabled,
    SharedVersionName,
    Unstable,
)

__all__ = [
    "policy_from_dict",
    "policy_to_dict",
    "loads_policy",
    "dump_policy",
]


class _SchemaError(ValueError):
    """Raised while walking a table; converted to a PolicyError at the top."""


def _bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise _SchemaError(f"`{key}`: expected a boolean, found {_kind(value)}")
    return value


def _str(key: str, value: object) -> str:
    if not isinstance(value, str):
        raise _SchemaError(f"`{key}`: expected a string, found {_kind(value)}")
    return value


def _str_list(key: str, value: object) -> tuple[str, ...]:
    items = as_str_list(value)
    if items is None:
        raise _SchemaError(f"`{key}`: expected a list of strings, found {_kind(value)}")
    return tuple(items)


def _count(key: str, value: object) -> int:
    # bool is an int subclass; TOML `true` must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise _SchemaError(f"`{key}`: expected a non-negative integer, found {_kind(value)}")
    if value < 0:
        raise _SchemaError(f"`{key}`: expected a non-negative integer, found {value}")
    return value


def _enum[E: Enum](cls: type[E]) -> Callable[[str, object], E]:
    def parse(key: str, value: object) -> E:
        text = _str(key, value)
        try:
            return cls(text)
        except ValueError:
            choices = ", ".join(f"`{m.value}`" for m in cls)
            raise _SchemaError(
                f"`{key}`: unknown variant `{text}`, expected one of {choices}"
            ) from None

    return parse


def _shared_version(key: str, value: object) -> SharedVersion:
    if isinstance(value, bool):
        return SharedVersionEnabled(value)
    if isinstance(value, str):
        return SharedVersionName(value)
    raise _SchemaError(f"`{key}`: expected a boolean or a group name, found {_kind(value)}")


def _command(key: str, value: object) -> Command:
    if isinstance(value, str):
        return CommandLine(value)
    argv = as_str_list(value)
    if argv is not None:
        return CommandArgs(tuple(argv))
    raise _SchemaError(f"`{key}`: expected a command string or argument list, found {_kind(value)}")


def _table(key: str, value: object, allowed: frozenset[str]) -> StrDict:
    table = as_str_dict(value)
    if table is None:
        raise _SchemaError(f"`{key}`: expected a table, found {_kind(value)}")
    _reject_unknown(table, allowed, prefix=f"{key}.")
    return table


def _replacements(key: str, value: object) -> tuple[Replace, ...]:
    if not isinstance(value, list):
        raise _SchemaError(f"`{key}`: expected an array of tables, found {_kind(value)}")
    out: list[Replace] = []
    for i, raw in enumerate(value):
        where = f"{key}[{i}]"
        entry = _table(where, raw, _REPLACE_KEYS)
        for required in ("file", "search", "replace"):
            if required not in entry:
                raise _SchemaError(f"`{where}`: missing field `{required}`")
        out.append(
            Replace(
                file=Path(_str(f"{where}.file", entry["file"])),
                search=_str(f"{where}.search", entry["search"]),
                replace=_str(f"{where}.replace", entry["replace"]),
                min=_optional(entry, "min", where, _count),
                max=_optional(entry, "max", where, _count),
                exactly=_optional(entry, "exactly", where, _count),
                prerelease=_optional(entry, "prerelease", where, _bool) or False,
            )
        )
    return tuple(out)


def _optional[T](
    table: Mapping[str, object],
    key: str,
    where: str,
    parse: Callable[[str, object], T],
) -> T | None:
    if key not in table:
        return None
    return parse(f"{where}.{key}", table[key])


def _reject_unknown(table: Mapping[str, object], allowed: frozenset[str], prefix: str = "") -> None:
    for key in table:
        if key not in allowed:
            expected = ", ".join(f"`{k}`" for k in sorted(allowed))
            raise _SchemaError(f"unknown field `{prefix}{key}`, expected one of {expected}")


def _kind(value: object) -> str:
    match value:
        case bool():
            return "a boolean"
        case int():
            return "an integer"
        case float():
            return "a float"
        case str():
            return "a string"
        case list():
            return "an array"
        case dict():
            return "a table"
    return type(value).__name__


@dataclass(frozen=True, slots=True)
class _Field:
    attr: str
    parse: Callable[[str, object], object]


_FIELDS: dict[str, _Field] = {
    "allow-branch": _Field("allow_branch", _str_list),
    "sign-commit": _Field("sign_commit", _bool),
    "sign-tag": _Field("sign_tag", _bool),
    "push-remote": _Field("push_remote", _str),
    "registry": _Field("registry", _str),
    "release": _Field("release", _bool),
    "publish": _Field("publish", _bool),
    "verify": _Field("verify", _bool),
    "owners": _Field("owners", _str_list),
    "push": _Field("push", _bool),
    "push-options": _Field("push_options", _str_list),
    "shared-version": _Field("shared_version", _shared_version),
    "consolidate-commits": _Field("consolidate_commits", _bool),
    "pre-release-commit-message": _Field("pre_release_commit_message", _str),
    "pre-release-replacements": _Field("pre_release_replacements", _replacements),
    "pre-release-hook": _Field("pre_release_hook", _command),
    "tag-message": _Field("tag_message", _str),
    "tag-prefix": _Field("tag_prefix", _str),
    "tag-name": _Field("tag_name", _str),
    "tag": _Field("tag", _bool),
    "enable-features": _Field("enable_features", _str_list),
    "enable-all-features": _Field("enable_all_features", _bool),
    "dependent-version": _Field("dependent_version", _enum(DependentVersion)),
    "metadata": _Field("metadata", _enum(MetadataPolicy)),
    "target": _Field("target", _str),
    "certs-source": _Field("certs_source", _enum(CertsSource)),
}

_RATE_LIMIT_KEYS = frozenset({"new-packages", "existing-packages"})
_UNSTABLE_KEYS = frozenset({"workspace-publish"})
_REPLACE_KEYS = frozenset({"file", "search", "replace", "min", "max", "exactly", "prerelease"})
_POLICY_KEYS = frozenset(_FIELDS) | {"rate-limit", "unstable"}


def _parse(data: Mapping[str, object]) -> Policy:
    _reject_unknown(data, _POLICY_KEYS)
    values: dict[str, object] = {}
    for key, entry in _FIELDS.items():
        if key in data:
            values[entry.attr] = entry.parse(key, data[key])

    if "rate-limit" in data:
        table = _table("rate-limit", data["rate-limit"], _RATE_LIMIT_KEYS)
        values["rate_limit"] = RateLimit(
            new_packages=_optional(table, "new-packages", "rate-limit", _count),
            existing_packages=_optional(table, "existing-packages", "rate-limit", _count),
        )
    if "unstable" in data:
        table = _table("unstable", data["unstable"], _UNSTABLE_KEYS)
        values["unstable"] = Unstable(
            workspace_publish=_optional(table, "workspace-publish", "unstable", _bool),
        )
    return Policy(**values)  # type: ignore[arg-type]


def policy_from_dict(data: Mapping[str, object], *, source: Path) -> Result[Policy, PolicyError]:
    """Parse a policy table; errors name `source`."""
    try:
        return Ok(_parse(data))
    except _SchemaError as e:
        return Err(PolicyError("parse_error", f"Failed to parse policy: {e}", path=source))


def loads_policy(text: str, *, source: Path) -> Result[Policy, PolicyError]:
    """Parse a whole `release.toml` document."""
    try:
        data: object = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(PolicyError("parse_error", f"Invalid TOML syntax: {e}", path=source))
    table = as_str_dict(data)
    if table is None:
        return Err(PolicyError("parse_error", "Policy root must be a TOML table", path=source))
    return policy_from_dict(table, source=source)


def _encode(value: object) -> object:
    match value:
        case Enum():
            return value.value
        case SharedVersionEnabled(enabled=enabled):
            return enabled
        case SharedVersionName(name=name):
            return name
        case CommandLine(line=line):
            return line
        case CommandArgs(argv=argv):
            return list(argv)
        case tuple():
            return [_encode(item) for item in value]
        case Replace():
            return _encode_replace(value)
    return value


def _encode_replace(replace: Replace) -> StrDict:
    out: StrDict = {
        "file": replace.file.as_posix(),
        "search": replace.search,
        "replace": replace.replace,
    }
    for key in ("min", "max", "exactly"):
        count = getattr(replace, key)
        if count is not None:
            out[key] = count
    out["prerelease"] = replace.prerelease
    return out


def policy_to_dict(policy: Policy) -> StrDict:
    """Serialize the fields `policy` sets, using the file's key names."""
    out: StrDict = {}
    for key, entry in _FIELDS.items():
        value = getattr(policy, entry.attr)
        if value is not None:
            out[key] = _encode(value)

    rate_limit: StrDict = {}
    if policy.rate_limit.new_packages is not None:
        rate_limit["new-packages"] = policy.rate_limit.new_packages
    if policy.rate_limit.existing_packages is not None:
        rate_limit["existing-packages"] = policy.rate_limit.existing_packages
    if rate_limit:
        out["rate-limit"] = rate_limit

    if policy.unstable.workspace_publish is not None:
        out["unstable"] = {"workspace-publish": policy.unstable.workspace_publish}
    return out


def dump_policy(policy: Policy) -> str:
    """Render `policy` as `release.toml` text."""
    return tomli_w.dumps(policy_to_dict(policy))
