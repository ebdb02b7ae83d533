#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Map temporary credentials to environment variables.

`credentials_env` returns the variables that are added to the environment of
the command launched by aws-runas. The standard AWS SDK variables are always
set, along with a few `AWS_RUNAS_*` variables that scripts and shell prompts
can use to tell which profile is active and when the credentials expire:

`AWS_ACCESS_KEY_ID`, `AWS_SECRET_ACCESS_KEY`, `AWS_SESSION_TOKEN`
:  The credentials themselves.

`AWS_SESSION_EXPIRATION`, `AWS_SESSION_EXPIRATION_UNIX`
:  The expiration in UTC, e.g. `2017-07-10 19:56:11 UTC`, and as seconds since
the epoch.

`AWS_RUNAS_PROFILE`
:  The name of the profile in use.

`AWS_ROLE_SESSION_NAME`, `AWS_RUNAS_ASSUMED_ROLE_ARN`
:  Only set when a role was assumed.

`AWS_REGION`, `AWS_DEFAULT_REGION`
:  Only set when the profile has a region.

Optional variables are omitted rather than set to an empty string, so a
consumer can test for their presence.
"""

from datetime import timezone

ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
SESSION_TOKEN = "AWS_SESSION_TOKEN"
SESSION_EXPIRATION = "AWS_SESSION_EXPIRATION"
SESSION_EXPIRATION_UNIX = "AWS_SESSION_EXPIRATION_UNIX"
RUNAS_PROFILE = "AWS_RUNAS_PROFILE"
ROLE_SESSION_NAME = "AWS_ROLE_SESSION_NAME"
ASSUMED_ROLE_ARN = "AWS_RUNAS_ASSUMED_ROLE_ARN"
REGION = "AWS_REGION"
DEFAULT_REGION = "AWS_DEFAULT_REGION"


def credentials_env(material, profile, session_name=None, role_arn=None):
    """Returns a dict of environment variables for the credentials.

    `material` is the `CredentialMaterial` that was obtained and `profile` is
    the `ProfileConfig` it was obtained for. `session_name` and `role_arn`
    should only be provided if a role was assumed.
    """
    expiration = material.expiration.astimezone(timezone.utc)

    env = {
        ACCESS_KEY_ID: material.access_key_id,
        SECRET_ACCESS_KEY: material.secret_access_key,
        SESSION_TOKEN: material.session_token,
        SESSION_EXPIRATION: expiration.strftime("%Y-%m-%d %H:%M:%S UTC"),
        SESSION_EXPIRATION_UNIX: str(int(expiration.timestamp())),
        RUNAS_PROFILE: profile.name,
    }

    if role_arn:
        env[ROLE_SESSION_NAME] = session_name
        env[ASSUMED_ROLE_ARN] = role_arn

    if profile.region:
        env[REGION] = profile.region
        env[DEFAULT_REGION] = profile.region

    return env
