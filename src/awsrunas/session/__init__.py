#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Talk to the identity service that issues temporary credentials.

## Overview

This module provides an `IdentityService` interface that describes the three
calls aws-runas needs from the identity provider: who am I, give me a session
token, and let me assume a role. Keeping the interface separate from the boto3
implementation allows the credential logic in `awsrunas.creds` to be exercised
without AWS.

`awsrunas.session.aws`
:  The only implementation, which calls AWS STS via a boto3 client.

## Values

Two immutable value types are passed across the interface. `CallerIdentity`
holds the `account`, `arn`, and `user_id` of the caller. `CredentialMaterial`
holds the `access_key_id`, `secret_access_key`, `session_token`, and the
timezone-aware `expiration` of a set of temporary credentials.

## Exceptions

`AuthenticationError`
:  Raised if the service rejects a request for credentials. These are never
retried as a fresh MFA code is usually required.

`IdentityLookupError`
:  Raised if the caller identity cannot be determined. Callers may treat this
as non-fatal.
"""

from collections import namedtuple

CallerIdentity = namedtuple("CallerIdentity", ["account", "arn", "user_id"])
CallerIdentity.__doc__ = "The identity of the caller as reported by the service."

CredentialMaterial = namedtuple(
    "CredentialMaterial",
    ["access_key_id", "secret_access_key", "session_token", "expiration"],
)
CredentialMaterial.__doc__ = "A set of temporary credentials and their expiration."


class IdentityService:
    """An identity service issues temporary credentials.

    This is an abstract base class and cannot be instantiated directly.
    """

    def get_caller_identity(self):
        """Returns a `CallerIdentity` for the caller.

        Implementations raise `IdentityLookupError` if the identity cannot be
        determined for any reason, including access being denied.
        """
        raise NotImplementedError

    def get_session_token(self, mfa_code, serial_number, duration_seconds):
        """Returns `CredentialMaterial` for the caller's own identity.

        `serial_number` and `mfa_code` may be `None` if no MFA is to be sent.
        Implementations raise `AuthenticationError` on failure.
        """
        raise NotImplementedError

    def assume_role(
        self, role_arn, session_name, mfa_code, serial_number, duration_seconds
    ):
        """Returns `CredentialMaterial` for the role identified by `role_arn`.

        `serial_number` and `mfa_code` may be `None` if no MFA is to be sent.
        Implementations raise `AuthenticationError` on failure.
        """
        raise NotImplementedError


class AuthenticationError(Exception):
    """Raised if the identity service rejects a request for credentials."""


class IdentityLookupError(Exception):
    """Raised if the identity of the caller cannot be determined."""
