#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Decide how to authenticate and obtain temporary credentials.

## Overview

`CredentialAssumer` performs exactly one authentication call to the identity
service and keeps the resulting `awsrunas.session.CredentialMaterial`. Which
call is made depends on two inputs:

- whether the user asked for no role (`--no-role`), and
- whether a session is already active, i.e. `AWS_SESSION_TOKEN` was set in the
  environment aws-runas was started from.

These are combined via the `DECISIONS` table into one of four cases:

| no_role | session active | call                | MFA serial required |
|---------|----------------|---------------------|---------------------|
| False   | False          | `assume_role`       | no                  |
| False   | True           | `assume_role`       | no                  |
| True    | False          | `get_session_token` | yes                 |
| True    | True           | `get_session_token` | no                  |

When a session is already active, it is assumed that MFA was satisfied when
that session was created, so neither the MFA serial nor the code is sent.
A session token without MFA is useless to most users as its purpose is to
satisfy MFA conditions in IAM policies, hence the requirement in the third row.

## Order of Operations

The profile is checked against the selected call before anything else, so a
missing `mfa_serial` or `role_arn` is reported before the user is prompted for
an MFA code and before the identity service is created.

## Duration

The requested duration is the first of the following that is set: the
`duration_seconds` passed to the constructor, the `duration_seconds` in the
profile, or `DEFAULT_DURATION_SECONDS`.
"""

import logging
from collections import namedtuple

from awsrunas.cache import LazyValue
from awsrunas.profile import ConfigurationError

LOG = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 3600

MFA_REQUIRED_MESSAGE = "No mfa_serial in selected profile, session will be useless"

ASSUME_ROLE = "assume_role"
SESSION_TOKEN = "session_token"

Decision = namedtuple("Decision", ["method", "requires_serial"])

DECISIONS = {
    # (no_role, session_active): Decision
    (False, False): Decision(ASSUME_ROLE, False),
    (False, True): Decision(ASSUME_ROLE, False),
    (True, False): Decision(SESSION_TOKEN, True),
    (True, True): Decision(SESSION_TOKEN, False),
}

Plan = namedtuple("Plan", ["method", "serial_number", "mfa_code", "duration_seconds"])


class CredentialAssumer:
    """Obtains credentials for a profile via a single authentication call.

    `service` is a function of zero arguments that returns an
    `awsrunas.session.IdentityService`; it is only called once the plan has
    been validated. `profile` is an `awsrunas.profile.ProfileConfig`.
    `session_name` is a function of zero arguments that returns the role session
    name; it is only called if a role is assumed. `session_active` should be
    `True` if the caller already holds a session token.

    `mfa_prompter` is a function of one argument, the MFA serial, that returns
    the current MFA code. It is called if a serial is sent and no `mfa_code` was
    provided.
    """

    def __init__(
        self,
        service,
        profile,
        mfa_code=None,
        duration_seconds=None,
        no_role=False,
        session_active=False,
        session_name=None,
        mfa_prompter=None,
    ):
        self._service = service
        self._profile = profile
        self._mfa_code = mfa_code
        self._duration_seconds = duration_seconds
        self._no_role = no_role
        self._session_active = session_active
        self._session_name = session_name
        self._mfa_prompter = mfa_prompter
        self._creds = LazyValue(self._authenticate)

    @property
    def decision(self):
        """The `Decision` that applies to this assumer's inputs."""
        return DECISIONS[(bool(self._no_role), bool(self._session_active))]

    @property
    def assumed_role(self):
        """`True` if credentials are obtained by assuming the profile's role."""
        return self.decision.method == ASSUME_ROLE

    def plan(self):
        """Returns the `Plan` of the authentication call without making it.

        Raises `ConfigurationError` if the profile lacks a setting required by
        the selected call.
        """
        decision = self.decision
        serial_number = None if self._session_active else self._profile.mfa_serial

        if decision.requires_serial and not serial_number:
            raise ConfigurationError(MFA_REQUIRED_MESSAGE)

        if decision.method == ASSUME_ROLE and not self._profile.role_arn:
            raise ConfigurationError(
                f"No role_arn in selected profile {self._profile.name}, "
                "use --no-role to get a session token instead"
            )

        return Plan(
            method=decision.method,
            serial_number=serial_number,
            mfa_code=self._mfa_code if serial_number else None,
            duration_seconds=_first_set(
                self._duration_seconds,
                self._profile.duration_seconds,
                DEFAULT_DURATION_SECONDS,
            ),
        )

    def assume(self):
        """Returns `CredentialMaterial`, authenticating only on the first call.

        Errors from the identity service propagate to the caller and nothing is
        remembered, so a later call will try again.
        """
        return self._creds.value()

    def has_credentials(self):
        """Returns `True` if credentials have been obtained."""
        return self._creds.is_loaded()

    def _authenticate(self):
        plan = self.plan()
        if plan.serial_number and plan.mfa_code is None and self._mfa_prompter:
            plan = plan._replace(mfa_code=self._mfa_prompter(plan.serial_number))

        service = self._service()
        LOG.info(
            "Authenticating via %s for %s seconds", plan.method, plan.duration_seconds
        )

        if plan.method == SESSION_TOKEN:
            return service.get_session_token(
                plan.mfa_code, plan.serial_number, plan.duration_seconds
            )

        return service.assume_role(
            self._profile.role_arn,
            self._session_name(),
            plan.mfa_code,
            plan.serial_number,
            plan.duration_seconds,
        )


def _first_set(*values):
    return next(v for v in values if v is not None)
