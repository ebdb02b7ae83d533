#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

from awsrunas.profile import ConfigurationError, ProfileConfig, ProfileResolver

AWS_CONFIG = """\
[default]
region = us-east-1

[profile test-profile]
region = us-west-1
role_arn = arn:aws:iam::123456789012:role/test-admin
source_profile = default
mfa_serial = arn:aws:iam::123456789012:mfa/alice

[profile long-session]
mfa_serial = arn:aws:iam::123456789012:mfa/alice
duration_seconds = 43200

[profile bad-duration]
duration_seconds = forever
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "config"
    path.write_text(AWS_CONFIG)
    return path


def test_load_role_profile(config_path):
    profile = ProfileResolver(config_path).load("test-profile")
    assert profile == ProfileConfig(
        name="test-profile",
        mfa_serial="arn:aws:iam::123456789012:mfa/alice",
        role_arn="arn:aws:iam::123456789012:role/test-admin",
        region="us-west-1",
        duration_seconds=None,
        source_profile="default",
    )


def test_load_default_profile(config_path):
    profile = ProfileResolver(config_path).load("default")
    assert profile == ProfileConfig(name="default", region="us-east-1")


def test_load_duration_is_an_int(config_path):
    profile = ProfileResolver(config_path).load("long-session")
    assert profile.duration_seconds == 43200
    assert profile.role_arn is None
    assert profile.region is None


def test_load_bad_duration(config_path):
    with pytest.raises(ConfigurationError, match="duration_seconds"):
        ProfileResolver(config_path).load("bad-duration")


def test_load_missing_profile(config_path):
    with pytest.raises(ConfigurationError, match="Profile not found"):
        ProfileResolver(config_path).load("does-not-exist")


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ProfileResolver(tmp_path / "missing").load("default")


def test_profile_config_is_immutable():
    profile = ProfileConfig(name="default")
    with pytest.raises(AttributeError):
        profile.region = "us-east-1"


def test_local_aws_config_is_preferred(tmp_path, monkeypatch):
    (tmp_path / "aws_config").write_text(AWS_CONFIG)
    monkeypatch.chdir(tmp_path)

    resolver = ProfileResolver()
    assert resolver.path.resolve() == (tmp_path / "aws_config").resolve()
    assert resolver.load("test-profile").region == "us-west-1"


def test_aws_config_file_env_var(config_path, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AWS_CONFIG_FILE", str(config_path))

    resolver = ProfileResolver()
    assert resolver.path is None
    assert resolver.config_file() == str(config_path)
    assert resolver.load("long-session").duration_seconds == 43200
