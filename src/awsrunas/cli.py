#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""The aws-runas CLI runs a command with temporary AWS credentials.

## Overview

The CLI obtains temporary credentials for a profile defined in the AWS
configuration file and then replaces itself with a command, or an interactive
shell, that has those credentials in its environment. This page contains a
short [User Guide](#cli-user-guide) and a [Reference Guide](#cli-reference) for
the command line arguments and configuration options.

## CLI User Guide

### Usage

Given the following profile in `~/.aws/config`:

    [profile admin]
    region = us-west-1
    role_arn = arn:aws:iam::123456789012:role/admin
    source_profile = default
    mfa_serial = arn:aws:iam::123456789012:mfa/alice

Run any command with the credentials of the `admin` role by naming the profile
followed by the command and its arguments:

    $ aws-runas admin aws s3 ls
    Enter MFA code: 123456
    2019-05-01 10:11:12 my-bucket

The MFA code is prompted for because the profile defines an `mfa_serial`. It
can also be passed via `--mfa-code`. If no command is specified, the user's
shell is started and its prompt is prefixed with the profile name:

    $ aws-runas admin
    Enter MFA code: 123456
    (aws-runas:admin) $ aws sts get-caller-identity

Use `--skip-prompt` to start the shell without changing its prompt.

### Session Tokens

Some IAM policies only require MFA rather than a different role. In that case,
use `--no-role` to obtain a session token for the profile's own credentials.
The profile must define an `mfa_serial` as a session token obtained without MFA
is of no use:

    $ aws-runas --no-role default terraform plan

### Nested Sessions

If `AWS_SESSION_TOKEN` is already set when aws-runas starts, for example when
it is invoked from a shell started by aws-runas, MFA is assumed to have been
satisfied already and the user is not prompted for a code.

### Environment

The following environment variables are set for the command. Refer to
`awsrunas.env` for details.

    AWS_ACCESS_KEY_ID           AWS_SESSION_EXPIRATION
    AWS_SECRET_ACCESS_KEY       AWS_SESSION_EXPIRATION_UNIX
    AWS_SESSION_TOKEN           AWS_RUNAS_PROFILE
    AWS_REGION                  AWS_ROLE_SESSION_NAME
    AWS_DEFAULT_REGION          AWS_RUNAS_ASSUMED_ROLE_ARN

## CLI Reference

### Synopsis

    aws-runas [options] [PROFILE] [COMMAND [ARGS ...]]

If `PROFILE` is not specified, `$AWS_PROFILE` is used, or `default` if that is
not set either.

Options may be placed before or after `PROFILE`. Everything from `COMMAND` on
is passed to the command unchanged, including arguments that look like options.

### Options

    -h, --help           show this help message and exit
    --path PATH          path to the AWS config file
    --no-role            get a session token rather than assuming a role
    --duration N         duration of the credentials in seconds
    --mfa-code CODE      MFA code rather than prompting for one
    --skip-prompt        do not modify the prompt of the shell
    --log-level LEVEL    set the logging level
    --version            show program's version number and exit

### Configuration

Defaults for the options above can be stored in `$HOME/.aws_runas.yaml`, or in
the file named by the `AWS_RUNAS_CONFIG` environment variable. Options given on
the command line take precedence:

    CLI:
      path: STRING
      no_role: BOOLEAN
      duration: INTEGER
      skip_prompt: BOOLEAN
      log_level: ("DEBUG" | "INFO" | "WARN" | "ERROR")

### Errors

Upon error, the message is printed to standard error and the exit status is 1.
Set `AWS_RUNAS_TRACE` to `1` to include a stack trace.
"""

import argparse
import logging
import os
import sys
import traceback
from functools import partial
from pathlib import Path

from awsrunas import __version__
from awsrunas.argparse import RawAndDefaultsFormatter, positive_int
from awsrunas.config import Bool, Choice, Config, Int, Str
from awsrunas.main import Main

LOG = logging.getLogger(__name__)

SHORT_DESCRIPTION = """
Run a command, or a shell, with temporary AWS credentials for PROFILE. The
credentials are obtained by assuming the role configured for the profile, or
with --no-role, by obtaining a session token. If the profile defines an
mfa_serial, the MFA code is prompted for unless --mfa-code is given.

examples:
  aws-runas admin aws s3 ls
  aws-runas --no-role --duration 43200 default
"""


def main():
    """The main entry point for the `aws-runas` CLI tool installed with this package.

    Runs the CLI tool. Upon success, the process is replaced with the command,
    so this function does not return. Upon error, prints the error message to
    standard error and exits with a `1`. By default, a stack trace is not
    included to minimize output. If the trace is desired, set the
    `AWS_RUNAS_TRACE` environment variable to `1`.
    """
    try:
        _cli(sys.argv[1:])

    except Exception as e:  # pylint: disable=broad-except
        if os.getenv("AWS_RUNAS_TRACE"):
            traceback.print_exc(file=sys.stderr)

        print(e, file=sys.stderr)
        sys.exit(1)


def _cli(argv, environ=os.environ):
    """Parses command line arguments and invokes the aws-runas CLI.

    This function may prompt the user for an MFA code. Upon success, it does
    not return as the process is replaced by the command.
    """
    config = Config.from_file(config_filename(environ))
    cfg = partial(config.get, "CLI")

    parser = _build_parser(cfg)
    args = _parse_args(parser, argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    profile_name = args.profile or environ.get("AWS_PROFILE", "default")

    runas = Main(
        profile_name,
        mfa_code=args.mfa_code,
        duration_seconds=args.duration,
        no_role=args.no_role,
        path=args.path,
        environ=environ,
        mfa_prompter=_ask_for_mfa_code,
    )

    creds = runas.assume_role()
    LOG.info("Credentials for %s expire at %s", runas.profile.name, creds.expiration)

    runas.handoff(
        command=args.command, argv=args.arguments, skip_prompt=args.skip_prompt
    )


def _build_parser(cfg):
    """Returns the argument parser with defaults from the `cfg` callable."""
    parser = argparse.ArgumentParser(
        prog="aws-runas",
        allow_abbrev=False,
        formatter_class=RawAndDefaultsFormatter,
        description=SHORT_DESCRIPTION,
    )

    parser.add_argument(
        "--path",
        metavar="PATH",
        default=cfg("path", type=Str),
        help="path to the AWS config file",
    )

    parser.add_argument(
        "--no-role",
        action="store_true",
        default=cfg("no_role", type=Bool, default=False),
        help="get a session token rather than assuming a role",
    )

    parser.add_argument(
        "--duration",
        metavar="N",
        type=positive_int,
        default=cfg("duration", type=Int),
        help="duration of the credentials in seconds",
    )

    parser.add_argument(
        "--mfa-code",
        metavar="CODE",
        help="MFA code rather than prompting for one",
    )

    parser.add_argument(
        "--skip-prompt",
        action="store_true",
        default=cfg("skip_prompt", type=Bool, default=False),
        help="do not modify the prompt of the shell",
    )

    parser.add_argument(
        "--log-level",
        default=cfg(
            "log_level", type=Choice("DEBUG", "INFO", "WARN", "ERROR"), default="ERROR"
        ),
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        help="set the logging level",
    )

    parser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )

    parser.add_argument("profile", nargs="?", help="profile in the AWS config file")
    parser.add_argument(
        "command", nargs="*", help="command to execute followed by its arguments"
    )
    return parser


# Options of the parser above that consume the next argument as their value.
_OPTIONS_WITH_VALUE = {"--path", "--duration", "--mfa-code", "--log-level"}


def _parse_args(parser, argv):
    """Parses `argv`, separating the command and its arguments from the options.

    The command starts at the second positional argument, the first being the
    profile. Everything from there on belongs to the command, including options
    such as `--version`, so options for aws-runas may be placed before or after
    the profile but never after the command:

        aws-runas admin --no-role aws s3 ls --recursive

    The returned namespace has `command` set to the name of the command, or
    `None`, and `arguments` set to the list of its arguments.
    """
    own, command = _split_command(argv)
    args = parser.parse_args(own)
    args.command = command[0] if command else None
    args.arguments = command[1:]
    return args


def _split_command(argv):
    positionals = 0
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg.startswith("-"):
            i += 2 if arg in _OPTIONS_WITH_VALUE else 1
            continue
        positionals += 1
        if positionals == 2:
            return argv[:i], argv[i:]
        i += 1
    return argv, []


def config_filename(environ=os.environ):
    """Returns the path to the user configuration."""
    return environ.get("AWS_RUNAS_CONFIG", Path.home() / ".aws_runas.yaml")


def _ask_for_mfa_code(mfa_serial):
    """Prompt user for the code of the MFA device `mfa_serial`."""
    LOG.info("Prompting for MFA code for %s", mfa_serial)
    print("Enter MFA code: ", flush=True, end="", file=sys.stderr)
    return input().strip()


if __name__ == "__main__":
    main()
