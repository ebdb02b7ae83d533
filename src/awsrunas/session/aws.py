#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Obtain temporary credentials from AWS STS via boto3.

## Overview

`STSIdentityService` is the boto3 implementation of
`awsrunas.session.IdentityService`. It wraps an STS client and converts the
dict responses from boto3 into `awsrunas.session.CallerIdentity` and
`awsrunas.session.CredentialMaterial` values. Errors raised by botocore are
translated into the exceptions defined in `awsrunas.session`, with the original
exception chained so it can be inspected with `AWS_RUNAS_TRACE` enabled.

The STS client must itself be loaded with credentials. When a profile assumes
a role, those are the credentials of the `source_profile`:

    [profile admin]
    role_arn = arn:aws:iam::123456789012:role/admin
    source_profile = default
    mfa_serial = arn:aws:iam::123456789012:mfa/alice

Use `STSIdentityService.from_profile` to build a service with the right base
credentials for an `awsrunas.profile.ProfileConfig`:

    service = STSIdentityService.from_profile(profile_config)
    creds = service.get_session_token("123456", profile_config.mfa_serial, 3600)

If the profile has a `role_arn` but no `source_profile`, the default boto3
credential chain is used (environment variables, instance metadata, etc.). If
the profile has no `role_arn`, the credentials of the profile itself are used.
"""

import logging

import boto3
import botocore.exceptions
import botocore.session

from awsrunas.session import (
    AuthenticationError,
    CallerIdentity,
    CredentialMaterial,
    IdentityLookupError,
    IdentityService,
)

LOG = logging.getLogger(__name__)


class STSIdentityService(IdentityService):
    """An identity service backed by an AWS STS client.

    The `client` is a boto3 STS client, which is typically obtained via
    `STSIdentityService.from_profile`, but can be any object with the same
    interface (e.g. a client wrapped in a `botocore.stub.Stubber` for tests).
    """

    @classmethod
    def from_profile(cls, profile, config_path=None):
        """Returns a service whose STS client uses the base credentials of `profile`.

        `profile` is an `awsrunas.profile.ProfileConfig`. If `config_path` is
        provided, it is used as the AWS configuration file instead of the
        botocore default.
        """
        if profile.role_arn:
            base_profile = profile.source_profile
        else:
            base_profile = profile.name

        LOG.info("Loading base credentials from profile %s", base_profile)

        bc_session = botocore.session.Session(profile=base_profile)
        if config_path:
            bc_session.set_config_variable("config_file", str(config_path))

        session = boto3.Session(botocore_session=bc_session, region_name=profile.region)
        return cls(session.client("sts"))

    def __init__(self, client):
        self._client = client

    @property
    def client(self):
        """The underlying boto3 STS client."""
        return self._client

    def get_caller_identity(self):
        try:
            resp = self._client.get_caller_identity()

        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
            raise IdentityLookupError(f"Cannot get caller identity: {e}") from e

        return CallerIdentity(
            account=resp["Account"], arn=resp["Arn"], user_id=resp["UserId"]
        )

    def get_session_token(self, mfa_code, serial_number, duration_seconds):
        kwargs = {"DurationSeconds": duration_seconds}
        kwargs.update(_mfa_kwargs(mfa_code, serial_number))

        LOG.info("Getting session token (mfa: %s)", serial_number or "none")
        try:
            resp = self._client.get_session_token(**kwargs)

        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
            raise AuthenticationError(f"Cannot get session token: {e}") from e

        return _to_material(resp)

    def assume_role(
        self, role_arn, session_name, mfa_code, serial_number, duration_seconds
    ):
        kwargs = {
            "RoleArn": role_arn,
            "RoleSessionName": session_name,
            "DurationSeconds": duration_seconds,
        }
        kwargs.update(_mfa_kwargs(mfa_code, serial_number))

        LOG.info("Assuming role %s as %s", role_arn, session_name)
        try:
            resp = self._client.assume_role(**kwargs)

        except (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError) as e:
            raise AuthenticationError(f"Cannot assume role: {role_arn}: {e}") from e

        return _to_material(resp)


def _mfa_kwargs(mfa_code, serial_number):
    # SerialNumber and TokenCode are sent together or not at all.
    if not serial_number:
        return {}
    return {"SerialNumber": serial_number, "TokenCode": mfa_code}


def _to_material(resp):
    creds = resp["Credentials"]
    return CredentialMaterial(
        access_key_id=creds["AccessKeyId"],
        secret_access_key=creds["SecretAccessKey"],
        session_token=creds["SessionToken"],
        expiration=creds["Expiration"],
    )
