"""Command-line flags as a policy fragment.

Boolean gates come in `--x` / `--no-x` pairs. The flag parser lets the last
one win, so at most one of the pair is true when it reaches this module:

    (False, False) -> unset
    (True,  False) -> True
    (False, True)  -> False
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from rel.core.result import Err, Ok, Result

from .errors import PolicyError
from .model import CertsSource, DependentVersion, Policy, Unstable

__all__ = [
    "resolve_bool_arg",
    "WorkspacePublish",
    "UnstableValue",
    "parse_unstable",
    "unstable_from_values",
    "CommitArgs",
    "PublishArgs",
    "TagArgs",
    "PushArgs",
    "PolicyArgs",
]


def resolve_bool_arg(yes: bool, no: bool) -> bool | None:
    match (yes, no):
        case (True, False):
            return True
        case (False, True):
            return False
        case (False, False):
            return None
    raise AssertionError("the flag parser must not pass both halves of a flag pair")


@dataclass(frozen=True, slots=True)
class WorkspacePublish:
    """`-Z workspace-publish[=true|false]`."""

    enabled: bool

    def __str__(self) -> str:
        return "workspace-publish" if self.enabled else ""


type UnstableValue = WorkspacePublish


def parse_unstable(value: str) -> Result[UnstableValue, PolicyError]:
    """Parse a `-Z name[=true|false]` value; a bare name means `true`."""
    name, _, setting = value.partition("=")
    match name:
        case "workspace-publish":
            match setting or "true":
                case "true":
                    return Ok(WorkspacePublish(True))
                case "false":
                    return Ok(WorkspacePublish(False))
            return Err(
                PolicyError(
                    "unstable_feature",
                    f"unsupported value `{name}={setting}`, expected one of `true`, `false`",
                )
            )
    return Err(
        PolicyError(
            "unstable_feature",
            f"unsupported unstable feature name `{name}` (value `{setting}`)",
            hint="known features: workspace-publish",
        )
    )


def unstable_from_values(values: tuple[UnstableValue, ...]) -> Unstable:
    unstable = Unstable()
    for value in values:
        match value:
            case WorkspacePublish(enabled=enabled):
                unstable = Unstable(workspace_publish=enabled)
    return unstable


@dataclass(frozen=True, slots=True)
class CommitArgs:
    sign_commit: bool = False
    no_sign_commit: bool = False

    def to_policy(self) -> Policy:
        return Policy(sign_commit=resolve_bool_arg(self.sign_commit, self.no_sign_commit))


@dataclass(frozen=True, slots=True)
class PublishArgs:
    publish: bool = False
    no_publish: bool = False
    registry: str | None = None
    verify: bool = False
    no_verify: bool = False
    features: tuple[str, ...] = ()
    all_features: bool = False
    target: str | None = None

    def to_policy(self) -> Policy:
        return Policy(
            publish=resolve_bool_arg(self.publish, self.no_publish),
            registry=self.registry,
            verify=resolve_bool_arg(self.verify, self.no_verify),
            enable_features=self.features or None,
            enable_all_features=True if self.all_features else None,
            target=self.target,
        )


@dataclass(frozen=True, slots=True)
class TagArgs:
    tag: bool = False
    no_tag: bool = False
    sign_tag: bool = False
    no_sign_tag: bool = False
    tag_prefix: str | None = None
    tag_name: str | None = None

    def to_policy(self) -> Policy:
        return Policy(
            tag=resolve_bool_arg(self.tag, self.no_tag),
            sign_tag=resolve_bool_arg(self.sign_tag, self.no_sign_tag),
            tag_prefix=self.tag_prefix,
            tag_name=self.tag_name,
        )


@dataclass(frozen=True, slots=True)
class PushArgs:
    push: bool = False
    no_push: bool = False
    push_remote: str | None = None

    def to_policy(self) -> Policy:
        return Policy(
            push=resolve_bool_arg(self.push, self.no_push),
            push_remote=self.push_remote,
        )


@dataclass(frozen=True, slots=True)
class PolicyArgs:
    """Every policy-related command-line option.

    `custom_config` is `-c/--config PATH`, `isolated` skips all implicit
    policy files, and `unstable` collects the `-Z` values.
    """

    custom_config: Path | None = None
    isolated: bool = False
    unstable: tuple[UnstableValue, ...] = ()
    sign: bool = False
    no_sign: bool = False
    dependent_version: DependentVersion | None = None
    allow_branch: tuple[str, ...] | None = None
    certs_source: CertsSource | None = None
    commit: CommitArgs = field(default_factory=CommitArgs)
    publish: PublishArgs = field(default_factory=PublishArgs)
    tag: TagArgs = field(default_factory=TagArgs)
    push: PushArgs = field(default_factory=PushArgs)

    def to_policy(self) -> Policy:
        sign = resolve_bool_arg(self.sign, self.no_sign)
        policy = Policy(
            unstable=unstable_from_values(self.unstable),
            allow_branch=self.allow_branch,
            sign_commit=sign,
            sign_tag=sign,
            dependent_version=self.dependent_version,
            certs_source=self.certs_source,
        )
        for group in (self.commit, self.publish, self.tag, self.push):
            policy = policy.merge(group.to_policy())
        return policy
