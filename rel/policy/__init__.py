"""Release policy: the value object, its sources and their layering."""

from .args import PolicyArgs, parse_unstable, resolve_bool_arg
from .errors import PolicyError
from .model import (
    AllFeatures,
    CertsSource,
    CommandArgs,
    CommandLine,
    DependentVersion,
    EffectivePolicy,
    MetadataPolicy,
    Policy,
    RateLimit,
    Replace,
    SelectiveFeatures,
    SharedVersionEnabled,
    SharedVersionName,
    Unstable,
)
from .overrides import ManifestOverrides, resolve_overrides
from .resolve import (
    FixedPaths,
    PathProvider,
    SystemPaths,
    WorkspaceLayout,
    load_package_policy,
    load_workspace_policy,
    resolve_config,
    resolve_custom_config,
    resolve_workspace_config,
)
from .schema import dump_policy, loads_policy, policy_from_dict, policy_to_dict

__all__ = [
    # args
    "PolicyArgs",
    "parse_unstable",
    "resolve_bool_arg",
    # errors
    "PolicyError",
    # model
    "AllFeatures",
    "CertsSource",
    "CommandArgs",
    "CommandLine",
    "DependentVersion",
    "EffectivePolicy",
    "MetadataPolicy",
    "Policy",
    "RateLimit",
    "Replace",
    "SelectiveFeatures",
    "SharedVersionEnabled",
    "SharedVersionName",
    "Unstable",
    # overrides
    "ManifestOverrides",
    "resolve_overrides",
    # resolve
    "FixedPaths",
    "PathProvider",
    "SystemPaths",
    "WorkspaceLayout",
    "load_package_policy",
    "load_workspace_policy",
    "resolve_config",
    "resolve_custom_config",
    "resolve_workspace_config",
    # schema
    "dump_policy",
    "loads_policy",
    "policy_from_dict",
    "policy_to_dict",
]
