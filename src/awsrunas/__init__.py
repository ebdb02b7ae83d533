#
# Copyright 2019 FMR LLC <opensource@fmr.com>
#
# SPDX-License-Identifier: MIT
#
"""Run a command or shell with temporary AWS credentials for a profile.

## Overview

`aws-runas` is both a CLI and library that obtains short-lived AWS credentials
for a named profile in the AWS configuration file, exports them to a child
process via environment variables, and then replaces the current process with
that child. Credentials are obtained either by assuming the role configured in
the profile (the default) or by minting a plain session token with
`--no-role`. Both paths support MFA when an `mfa_serial` is configured.

### CLI Usage

The CLI is documented on the `awsrunas.cli` page. In short:

    $ aws-runas admin-profile aws s3 ls
    Enter MFA code: 123456

If no command is given, the user's `$SHELL` is launched with the credentials
in its environment and a prompt that names the active profile.

### Library Usage

The `awsrunas.main.Main` class drives the whole flow and is the entry point for
library users:

    main = Main(profile="admin-profile", mfa_code="123456")
    main.assume_role()
    env = main.credentials_env()
    main.handoff(command="terraform", argv=["plan"])

Of particular interest are the following submodules:

`awsrunas.creds`
: Decides how to authenticate (assume a role or mint a session token, with or
without MFA) and performs the single authentication call.

`awsrunas.identity`
: Builds the human-readable role session name that shows up in CloudTrail.

`awsrunas.env`
: Maps the credentials and profile metadata to environment variables.

`awsrunas.session`
: Defines the `awsrunas.session.IdentityService` interface used to talk to STS,
along with the boto3 implementation in `awsrunas.session.aws`.
"""

name = "awsrunas"
__version__ = "1.0.0"
