import argparse
import os
from pathlib import Path

import pytest

from crdrill.core.errors import ConfigurationError
from crdrill.core.settings import DrillSettings, parse_plural_overrides, resolve_kubeconfig


def drill_args(**overrides):
    values = dict(
        kind="Platform", name="prod", api_version="example.org/v1alpha1",
        kubeconfig=None, context=None, from_file=None, exempt_kind=None, plural=None,
        max_depth=None, timeout=None, time_budget=None, output="tree", verbose=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


def test_explicit_kubeconfig_wins():
    assert resolve_kubeconfig("/tmp/kc", {"KUBECONFIG": "/etc/other"}) == "/tmp/kc"


def test_kubeconfig_env_uses_first_entry():
    env = {"KUBECONFIG": os.pathsep.join(["/first/config", "/second/config"])}
    assert resolve_kubeconfig(None, env) == "/first/config"


def test_kubeconfig_defaults_to_home():
    assert resolve_kubeconfig(None, {}) == str(Path.home() / ".kube" / "config")


def test_plural_overrides_parse():
    assert parse_plural_overrides(["Mouse=mice", " Index = indices "]) == {"Mouse": "mice", "Index": "indices"}


@pytest.mark.parametrize("bad", ["Mouse", "=mice", "Mouse="])
def test_plural_overrides_reject_malformed(bad):
    with pytest.raises(ConfigurationError):
        parse_plural_overrides([bad])


def test_from_args_merges_exempt_kinds_with_defaults():
    settings = DrillSettings.from_args(drill_args(exempt_kind=["StoreConfig"]), environ={})
    assert {"ProviderConfig", "StoreConfig"} <= settings.exempt_kinds
    assert settings.offline is False


def test_from_args_snapshot_mode():
    settings = DrillSettings.from_args(drill_args(from_file=["dump.yaml"]), environ={})
    assert settings.offline is True
    assert settings.snapshot_files == ["dump.yaml"]


@pytest.mark.parametrize("overrides", [
    {"api_version": ""},
    {"max_depth": -1},
    {"timeout": 0},
    {"time_budget": -5.0},
    {"output": "html"},
    {"kind": ""},
    {"kind": "   "},
    {"name": ""},
])
def test_from_args_rejects_invalid_values(overrides):
    with pytest.raises(ConfigurationError):
        DrillSettings.from_args(drill_args(**overrides), environ={})


def test_from_args_trims_kind_and_name():
    settings = DrillSettings.from_args(drill_args(kind=" Platform ", name="prod "), environ={})
    assert (settings.kind, settings.name) == ("Platform", "prod")
