#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Orchestrate loading a profile, obtaining credentials, and the handoff.

## Overview

`Main` ties together the pieces of aws-runas for a single profile. It is the
primary entry point for library users and is what the CLI drives:

    main = Main(profile="admin", mfa_code="123456")
    main.assume_role()
    main.handoff(command="aws", argv=["s3", "ls"])

The profile is read when `Main` is instantiated. The STS client, the role
session name, and the credentials are each obtained at most once, on first
use, and then kept for the lifetime of the instance. Nothing is shared between
instances.

Whether a session is already active is determined once at instantiation by
checking for `AWS_SESSION_TOKEN` in `environ`. That is the only input taken
from the environment aside from `SHELL` at handoff time.
"""

import logging
import os

from awsrunas.cache import LazyValue
from awsrunas.creds import CredentialAssumer
from awsrunas.env import SESSION_TOKEN, credentials_env
from awsrunas.handoff import ProcessHandoff
from awsrunas.identity import SessionIdentifier
from awsrunas.identity import user_or_access_key_id as _user_or_access_key_id
from awsrunas.profile import ProfileResolver
from awsrunas.session.aws import STSIdentityService

LOG = logging.getLogger(__name__)


class Main:
    """Obtains temporary credentials for `profile` and hands them to a command.

    `mfa_code` is the current code from the MFA device configured by the
    profile's `mfa_serial`. `duration_seconds` overrides the duration in the
    profile. If `no_role` is `True`, a session token is obtained for the
    profile's own credentials rather than assuming its role. `path` selects an
    alternate AWS configuration file.

    `environ` defaults to `os.environ`. `resolver` and `service_factory` can be
    provided to replace the `ProfileResolver` and the function that creates an
    `IdentityService` from a `ProfileConfig`, respectively.

    `mfa_prompter` is called with the MFA serial to obtain a code when one is
    required and `mfa_code` was not given. It is only called after the profile
    has been checked against the selected call, and before the STS client is
    created.
    """

    def __init__(
        self,
        profile,
        mfa_code=None,
        duration_seconds=None,
        no_role=False,
        path=None,
        environ=None,
        resolver=None,
        service_factory=None,
        mfa_prompter=None,
    ):
        self._environ = os.environ if environ is None else environ
        self._resolver = resolver or ProfileResolver(path)
        self.profile = self._resolver.load(profile)
        self.session_active = SESSION_TOKEN in self._environ

        if service_factory is None:
            config_path = self._resolver.path

            def service_factory(p):
                return STSIdentityService.from_profile(p, config_path)

        self._service = LazyValue(lambda: service_factory(self.profile))
        self._session_id = SessionIdentifier(
            lambda: self.sts_client().get_caller_identity()
        )
        self._assumer = CredentialAssumer(
            self.sts_client,
            self.profile,
            mfa_code=mfa_code,
            duration_seconds=duration_seconds,
            no_role=no_role,
            session_active=self.session_active,
            session_name=self.session_id,
            mfa_prompter=mfa_prompter,
        )

    def sts_client(self):
        """Returns the `IdentityService` for the profile, creating it once."""
        return self._service.value()

    def plan(self):
        """Returns the `awsrunas.creds.Plan` without contacting AWS.

        Raises `ConfigurationError` if the profile cannot be used for the
        selected call.
        """
        return self._assumer.plan()

    def session_id(self):
        """Returns the role session name, computing it once."""
        return self._session_id.compute()

    @staticmethod
    def user_or_access_key_id(identity):
        """Returns the short label for a `CallerIdentity`."""
        return _user_or_access_key_id(identity)

    @property
    def assumed_role(self):
        """`True` if credentials are obtained by assuming the profile's role."""
        return self._assumer.assumed_role

    def assume_role(self):
        """Returns the `CredentialMaterial`, authenticating only once."""
        return self._assumer.assume()

    def credentials_env(self):
        """Returns the environment variables for the obtained credentials.

        An empty dict is returned if `assume_role` has not been called yet.
        """
        if not self._assumer.has_credentials():
            LOG.warning("credentials_env called before credentials were obtained")
            return {}

        if self.assumed_role:
            return credentials_env(
                self.assume_role(),
                self.profile,
                session_name=self.session_id(),
                role_arn=self.profile.role_arn,
            )
        return credentials_env(self.assume_role(), self.profile)

    def handoff(self, command=None, argv=(), skip_prompt=False):
        """Replaces the current process with `command` using the credentials."""
        handoff = ProcessHandoff(self.credentials_env(), self._environ)
        return handoff.handoff(command=command, argv=argv, skip_prompt=skip_prompt)
