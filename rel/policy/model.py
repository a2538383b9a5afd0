"""Release policy value objects.

A `Policy` is a fragment: every field is optional and `None` means "not set
by this source". Fragments from each source are layered with `merge`, and the
merged result is read only through `effective()`, which collapses unset
fields to the documented defaults:

| field                       | default                                         |
|-----------------------------|-------------------------------------------------|
| allow_branch                | ["*", "!HEAD"]                                  |
| sign_commit / sign_tag      | false                                           |
| push_remote                 | "origin"                                        |
| release/publish/verify/push/tag | true                                        |
| consolidate_commits         | is_workspace                                    |
| pre_release_commit_message  | "chore: Release" when consolidating, else       |
|                             | "chore: Release {{crate_name}} version {{version}}" |
| tag_message                 | "chore: Release {{crate_name}} version {{version}}" |
| tag_name                    | "{{prefix}}v{{version}}"                        |
| tag_prefix                  | "{{crate_name}}-" (non-root), "" (root)         |
| enable_all_features         | false                                           |
| dependent_version           | upgrade                                         |
| metadata                    | optional                                        |
| certs_source                | webpki                                          |
| rate_limit.new_packages     | 5                                               |
| rate_limit.existing_packages| 30                                              |
| unstable.workspace_publish  | false                                           |
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import ClassVar

__all__ = [
    "DEFAULT_ALLOW_BRANCH",
    "DEFAULT_NEW_PACKAGES_RATE_LIMIT",
    "DEFAULT_EXISTING_PACKAGES_RATE_LIMIT",
    "DependentVersion",
    "MetadataPolicy",
    "CertsSource",
    "CommandLine",
    "CommandArgs",
    "Command",
    "SharedVersionEnabled",
    "SharedVersionName",
    "SharedVersion",
    "WORKSPACE_SHARED_VERSION",
    "Replace",
    "AllFeatures",
    "SelectiveFeatures",
    "Features",
    "RateLimit",
    "Unstable",
    "Policy",
    "EffectivePolicy",
]

DEFAULT_ALLOW_BRANCH: tuple[str, ...] = ("*", "!HEAD")
DEFAULT_PUSH_REMOTE = "origin"
DEFAULT_TAG_MESSAGE = "chore: Release {{crate_name}} version {{version}}"
DEFAULT_TAG_NAME = "{{prefix}}v{{version}}"
DEFAULT_COMMIT_MESSAGE = "chore: Release {{crate_name}} version {{version}}"
DEFAULT_CONSOLIDATED_COMMIT_MESSAGE = "chore: Release"
DEFAULT_PACKAGE_TAG_PREFIX = "{{crate_name}}-"

DEFAULT_NEW_PACKAGES_RATE_LIMIT = 5
DEFAULT_EXISTING_PACKAGES_RATE_LIMIT = 30


class DependentVersion(Enum):
    """How workspace dependents of a bumped package are updated."""

    # Always upgrade dependents; the safest option since `fix` is hard to test
    UPGRADE = "upgrade"
    # Upgrade only when the old version requirement no longer matches
    FIX = "fix"

    def __str__(self) -> str:
        return self.value


class MetadataPolicy(Enum):
    """How semver build metadata is handled when bumping."""

    OPTIONAL = "optional"  # apply when set, clear when not
    REQUIRED = "required"  # error if not set
    IGNORE = "ignore"  # never apply
    PERSISTENT = "persistent"  # keep the prior metadata if not set

    def __str__(self) -> str:
        return self.value


class CertsSource(Enum):
    """Trust store used for web requests."""

    WEBPKI = "webpki"  # bundled public-CA roots
    NATIVE = "native"  # operating system root store

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CommandLine:
    """A hook given as one line, interpreted by a shell."""

    line: str

    def args(self) -> list[str]:
        return [self.line]


@dataclass(frozen=True, slots=True)
class CommandArgs:
    """A hook given as an argument vector, executed without a shell."""

    argv: tuple[str, ...]

    def args(self) -> list[str]:
        return list(self.argv)


type Command = CommandLine | CommandArgs


WORKSPACE_SHARED_VERSION = "workspace"


@dataclass(frozen=True, slots=True)
class SharedVersionEnabled:
    """`shared-version = true|false`."""

    enabled: bool

    def as_name(self) -> str | None:
        return "default" if self.enabled else None


@dataclass(frozen=True, slots=True)
class SharedVersionName:
    """`shared-version = "<group>"`."""

    name: str

    WORKSPACE: ClassVar[str] = WORKSPACE_SHARED_VERSION

    def as_name(self) -> str | None:
        return self.name


type SharedVersion = SharedVersionEnabled | SharedVersionName


@dataclass(frozen=True, slots=True)
class Replace:
    """A text substitution applied to `file` while bumping.

    `min`, `max` and `exactly` constrain how many matches `search` must
    have; all are unconstrained when unset. With `prerelease` false the
    substitution is skipped for pre-release versions.
    """

    file: Path
    search: str
    replace: str
    min: int | None = None
    max: int | None = None
    exactly: int | None = None
    prerelease: bool = False


@dataclass(frozen=True, slots=True)
class AllFeatures:
    """Build with every feature enabled."""


@dataclass(frozen=True, slots=True)
class SelectiveFeatures:
    """Build with an explicit set of features (possibly empty)."""

    names: tuple[str, ...] = ()


type Features = AllFeatures | SelectiveFeatures


@dataclass(frozen=True, slots=True)
class RateLimit:
    """Publish throughput bounds for new and pre-existing packages."""

    new_packages: int | None = None
    existing_packages: int | None = None

    @classmethod
    def from_defaults(cls) -> RateLimit:
        return cls(
            new_packages=DEFAULT_NEW_PACKAGES_RATE_LIMIT,
            existing_packages=DEFAULT_EXISTING_PACKAGES_RATE_LIMIT,
        )

    def merge(self, other: RateLimit) -> RateLimit:
        return RateLimit(
            new_packages=_pick(other.new_packages, self.new_packages),
            existing_packages=_pick(other.existing_packages, self.existing_packages),
        )


@dataclass(frozen=True, slots=True)
class Unstable:
    """Opt-in flags for unstable behaviour."""

    workspace_publish: bool | None = None

    def merge(self, other: Unstable) -> Unstable:
        return Unstable(workspace_publish=_pick(other.workspace_publish, self.workspace_publish))


def _pick[T](new: T | None, old: T | None) -> T | None:
    return old if new is None else new


@dataclass(frozen=True, slots=True)
class Policy:
    """A release policy fragment. See the module docstring for defaults."""

    is_workspace: bool = False
    unstable: Unstable = field(default_factory=Unstable)
    allow_branch: tuple[str, ...] | None = None
    sign_commit: bool | None = None
    sign_tag: bool | None = None
    push_remote: str | None = None
    registry: str | None = None
    release: bool | None = None
    publish: bool | None = None
    verify: bool | None = None
    owners: tuple[str, ...] | None = None
    push: bool | None = None
    push_options: tuple[str, ...] | None = None
    shared_version: SharedVersion | None = None
    consolidate_commits: bool | None = None
    pre_release_commit_message: str | None = None
    pre_release_replacements: tuple[Replace, ...] | None = None
    pre_release_hook: Command | None = None
    tag_message: str | None = None
    tag_prefix: str | None = None
    tag_name: str | None = None
    tag: bool | None = None
    enable_features: tuple[str, ...] | None = None
    enable_all_features: bool | None = None
    dependent_version: DependentVersion | None = None
    metadata: MetadataPolicy | None = None
    target: str | None = None
    rate_limit: RateLimit = field(default_factory=RateLimit)
    certs_source: CertsSource | None = None

    # Fields that are not plain "set wins" values
    _NESTED: ClassVar[frozenset[str]] = frozenset({"is_workspace", "unstable", "rate_limit"})

    @classmethod
    def from_defaults(cls) -> Policy:
        """Every defaultable field set to its workspace default."""
        return cls(is_workspace=True).with_defaults()

    def with_defaults(self) -> Policy:
        """This fragment with every unset defaultable field filled in.

        Used to show the effective policy. `tag_prefix` depends on the
        package location and `target`, `registry`, `pre_release_hook` and
        `shared_version` have no default, so those are left as they are.
        """
        effective = self.effective()
        return replace(
            self,
            unstable=Unstable(workspace_publish=effective.workspace_publish),
            allow_branch=effective.allow_branch,
            sign_commit=effective.sign_commit,
            sign_tag=effective.sign_tag,
            push_remote=effective.push_remote,
            release=effective.release,
            publish=effective.publish,
            verify=effective.verify,
            owners=effective.owners,
            push=effective.push,
            push_options=effective.push_options,
            consolidate_commits=effective.consolidate_commits,
            pre_release_commit_message=effective.pre_release_commit_message,
            pre_release_replacements=effective.pre_release_replacements,
            tag_message=effective.tag_message,
            tag_name=effective.tag_name,
            tag=effective.tag,
            enable_features=effective.enable_features,
            enable_all_features=effective.enable_all_features,
            dependent_version=effective.dependent_version,
            metadata=effective.metadata,
            rate_limit=RateLimit(
                new_packages=effective.new_packages_rate_limit,
                existing_packages=effective.existing_packages_rate_limit,
            ),
            certs_source=effective.certs_source,
        )

    def merge(self, other: Policy) -> Policy:
        """Layer `other` on top of this fragment.

        A field set in `other` replaces ours; a field unset in `other` keeps
        ours. `rate_limit` and `unstable` merge per sub-field. `is_workspace`
        describes the run, not a source, so it is kept from `self`.
        """
        changes: dict[str, object] = {
            "unstable": self.unstable.merge(other.unstable),
            "rate_limit": self.rate_limit.merge(other.rate_limit),
        }
        for f in fields(self):
            if f.name in self._NESTED:
                continue
            value = getattr(other, f.name)
            if value is not None:
                changes[f.name] = value
        return replace(self, **changes)

    def effective(self) -> EffectivePolicy:
        """Collapse unset fields to their defaults."""
        consolidate = (
            self.consolidate_commits if self.consolidate_commits is not None else self.is_workspace
        )
        rate_limit = RateLimit.from_defaults().merge(self.rate_limit)
        if self.pre_release_commit_message is not None:
            commit_message = self.pre_release_commit_message
        elif consolidate:
            commit_message = DEFAULT_CONSOLIDATED_COMMIT_MESSAGE
        else:
            commit_message = DEFAULT_COMMIT_MESSAGE

        return EffectivePolicy(
            is_workspace=self.is_workspace,
            allow_branch=self.allow_branch if self.allow_branch is not None else DEFAULT_ALLOW_BRANCH,
            sign_commit=bool(self.sign_commit),
            sign_tag=bool(self.sign_tag),
            push_remote=self.push_remote if self.push_remote is not None else DEFAULT_PUSH_REMOTE,
            registry=self.registry,
            release=self.release is not False,
            publish=self.publish is not False,
            verify=self.verify is not False,
            owners=self.owners or (),
            push=self.push is not False,
            push_options=self.push_options or (),
            shared_version=self.shared_version.as_name() if self.shared_version else None,
            consolidate_commits=consolidate,
            pre_release_commit_message=commit_message,
            pre_release_replacements=self.pre_release_replacements or (),
            pre_release_hook=self.pre_release_hook,
            tag_message=self.tag_message if self.tag_message is not None else DEFAULT_TAG_MESSAGE,
            tag_name=self.tag_name if self.tag_name is not None else DEFAULT_TAG_NAME,
            tag=self.tag is not False,
            enable_features=self.enable_features or (),
            enable_all_features=bool(self.enable_all_features),
            dependent_version=self.dependent_version or DependentVersion.UPGRADE,
            metadata=self.metadata or MetadataPolicy.OPTIONAL,
            target=self.target,
            certs_source=self.certs_source or CertsSource.WEBPKI,
            new_packages_rate_limit=rate_limit.new_packages or 0,
            existing_packages_rate_limit=rate_limit.existing_packages or 0,
            workspace_publish=bool(self.unstable.workspace_publish),
            explicit_tag_prefix=self.tag_prefix,
        )


@dataclass(frozen=True, slots=True)
class EffectivePolicy:
    """The resolved policy as consumers read it: no field is ever unset.

    `registry`, `target` and `pre_release_hook` are genuinely optional
    (None means the default registry, the host target, no hook).
    """

    is_workspace: bool
    allow_branch: tuple[str, ...]
    sign_commit: bool
    sign_tag: bool
    push_remote: str
    registry: str | None
    release: bool
    publish: bool
    verify: bool
    owners: tuple[str, ...]
    push: bool
    push_options: tuple[str, ...]
    shared_version: str | None
    consolidate_commits: bool
    pre_release_commit_message: str
    pre_release_replacements: tuple[Replace, ...]
    pre_release_hook: Command | None
    tag_message: str
    tag_name: str
    tag: bool
    enable_features: tuple[str, ...]
    enable_all_features: bool
    dependent_version: DependentVersion
    metadata: MetadataPolicy
    target: str | None
    certs_source: CertsSource
    new_packages_rate_limit: int
    existing_packages_rate_limit: int
    workspace_publish: bool
    explicit_tag_prefix: str | None = None

    def tag_prefix(self, is_root: bool) -> str:
        """Tag prefix; packages below the workspace root default to their name."""
        if self.explicit_tag_prefix is not None:
            return self.explicit_tag_prefix
        return "" if is_root else DEFAULT_PACKAGE_TAG_PREFIX

    def features(self) -> Features:
        """Feature selection for the build/verify step."""
        if self.enable_all_features:
            return AllFeatures()
        return SelectiveFeatures(self.enable_features)
