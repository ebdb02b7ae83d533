#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Resolve named profiles from the AWS configuration file.

## Overview

`ProfileResolver` reads a profile from the standard AWS configuration file
using botocore's own config loader, so the same files and syntax understood by
the AWS CLI are understood by aws-runas. Only the settings that affect how
credentials are obtained are extracted into a `ProfileConfig`:

    [profile admin]
    region = us-west-1
    role_arn = arn:aws:iam::123456789012:role/admin
    source_profile = default
    mfa_serial = arn:aws:iam::123456789012:mfa/alice
    duration_seconds = 43200

The configuration file is located as follows, in order of precedence:

1. The `path` passed to the `ProfileResolver` constructor.
2. A file named `aws_config` in the current working directory, which allows a
   project to ship its own set of profiles.
3. The botocore default, which is `$AWS_CONFIG_FILE` if set, otherwise
   `~/.aws/config`.
"""

import logging
import os
from collections import namedtuple
from pathlib import Path

import botocore.configloader
import botocore.exceptions

LOG = logging.getLogger(__name__)

LOCAL_CONFIG_FILE = "aws_config"
"""Name of the project-local configuration file checked in the current directory."""

ProfileConfig = namedtuple(
    "ProfileConfig",
    ["name", "mfa_serial", "role_arn", "region", "duration_seconds", "source_profile"],
)
ProfileConfig.__new__.__defaults__ = (None,) * 5
ProfileConfig.__doc__ = "Settings of a named profile that affect credential loading."


class ProfileResolver:
    """Loads `ProfileConfig` values from an AWS configuration file.

    If `path` is not specified, the file is located as described in the module
    documentation. The resolved path is available via the `path` attribute,
    which is `None` when the botocore default is used.
    """

    def __init__(self, path=None):
        if path is None and Path(LOCAL_CONFIG_FILE).is_file():
            path = Path.cwd() / LOCAL_CONFIG_FILE
        self.path = path

    def config_file(self):
        """Returns the path of the configuration file that will be read."""
        if self.path is not None:
            return str(self.path)
        return os.environ.get("AWS_CONFIG_FILE", "~/.aws/config")

    def load(self, name):
        """Returns the `ProfileConfig` for the profile called `name`.

        Raises `ConfigurationError` if the file cannot be read, the profile does
        not exist, or `duration_seconds` is not an integer.
        """
        filename = self.config_file()
        LOG.info("Loading profile %s from %s", name, filename)

        try:
            profiles = botocore.configloader.load_config(filename).get("profiles", {})
        except (
            botocore.exceptions.ConfigNotFound,
            botocore.exceptions.ConfigParseError,
        ) as e:
            raise ConfigurationError(f"Cannot read AWS config: {e}") from e

        if name not in profiles:
            raise ConfigurationError(f"Profile not found in {filename}: {name}")

        section = profiles[name]
        return ProfileConfig(
            name=name,
            mfa_serial=section.get("mfa_serial"),
            role_arn=section.get("role_arn"),
            region=section.get("region"),
            duration_seconds=_duration(name, section.get("duration_seconds")),
            source_profile=section.get("source_profile"),
        )


def _duration(name, value):
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"Profile {name}: duration_seconds is not an integer: {value!r}"
        ) from e


class ConfigurationError(Exception):
    """Raised if the selected profile cannot be used to obtain credentials."""
