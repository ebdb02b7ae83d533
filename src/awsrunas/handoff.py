#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Replace the current process with a command that has the credentials.

## Overview

`ProcessHandoff` is the last step of aws-runas. It merges the credential
variables over the current environment and replaces the running Python process
with the requested command via `os.execvpe`, so the exit status seen by the
user's shell is that of the command itself.

If no command is given, the user's `$SHELL` (or `/bin/sh`) is started instead.
Unless the prompt is skipped, bash and zsh are started with a prompt prefixed
by the name of the active profile, so it is obvious that the shell holds
temporary credentials:

    (aws-runas:admin) ~/src $

This is done without touching the user's dotfiles. For bash, a temporary
rcfile that sources `~/.bashrc` is passed via `--rcfile`. For zsh, `ZDOTDIR`
points to a temporary directory whose `.zshrc` sources the user's own. Other
shells are started as-is.

The current process environment is never modified. If the command cannot be
executed, the temporary prompt files are removed and a `HandoffError` is
raised, leaving the process otherwise unchanged.
"""

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path

from awsrunas.env import RUNAS_PROFILE

LOG = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/sh"

_BASH_RC = """\
[ -f ~/.bashrc ] && . ~/.bashrc
PS1="(aws-runas:${AWS_RUNAS_PROFILE}) $PS1"
"""

_ZSH_RC = """\
[ -f "${AWS_RUNAS_ZDOTDIR:-$HOME}/.zshrc" ] && . "${AWS_RUNAS_ZDOTDIR:-$HOME}/.zshrc"
PROMPT="(aws-runas:${AWS_RUNAS_PROFILE}) $PROMPT"
"""


class ProcessHandoff:
    """Executes a command with `overlay` merged over `environ`.

    `overlay` is a dict of environment variables, typically the result of
    `awsrunas.env.credentials_env`. Keys in `overlay` take precedence over
    those in `environ`, which defaults to `os.environ`.
    """

    def __init__(self, overlay, environ=None):
        self._overlay = overlay
        self._environ = os.environ if environ is None else environ
        self._tempfiles = []

    def environment(self):
        """Returns a new dict with the environment for the command."""
        env = dict(self._environ)
        env.update(self._overlay)
        return env

    def shell(self):
        """Returns the user's preferred shell."""
        return self._environ.get("SHELL") or DEFAULT_SHELL

    def handoff(self, command=None, argv=(), skip_prompt=False):
        """Replaces the current process with `command` and its `argv`.

        If `command` is `None`, the user's shell is launched. When successful,
        this method does not return. Raises `HandoffError` if the command cannot
        be executed.
        """
        env = self.environment()
        argv = list(argv)

        if command is None:
            command = self.shell()
            if not skip_prompt:
                argv = self._customize_prompt(command, argv, env)

        LOG.info("Executing %s with args %s", command, argv)

        # Anything buffered would be lost once the process image is replaced.
        sys.stdout.flush()
        sys.stderr.flush()

        try:
            os.execvpe(command, [command] + argv, env)
        except OSError as e:
            self._remove_tempfiles()
            raise HandoffError(f"Cannot execute {command}: {e.strerror}") from e

    def _customize_prompt(self, shell, argv, env):
        """Returns argv, updating env, so `shell` shows the profile in its prompt."""
        name = Path(shell).name
        if RUNAS_PROFILE not in env:
            return argv

        if name == "bash":
            rcfile = _write_temp(_BASH_RC, suffix=".bashrc")
            self._tempfiles.append(rcfile)
            return ["--rcfile", rcfile] + argv

        if name == "zsh":
            zdotdir = tempfile.mkdtemp(prefix="aws-runas-")
            self._tempfiles.append(zdotdir)
            _write(Path(zdotdir) / ".zshrc", _ZSH_RC)
            if "ZDOTDIR" in env:
                env["AWS_RUNAS_ZDOTDIR"] = env["ZDOTDIR"]
            env["ZDOTDIR"] = zdotdir
            return argv

        LOG.info("Cannot customize the prompt of %s", name)
        return argv

    def _remove_tempfiles(self):
        for path in self._tempfiles:
            if os.path.isdir(path):
                shutil.rmtree(path, ignore_errors=True)
            elif os.path.exists(path):
                os.remove(path)
        self._tempfiles = []


def _write_temp(content, suffix):
    fd, path = tempfile.mkstemp(prefix="aws-runas-", suffix=suffix)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(content)
    return path


def _write(path, content):
    with path.open("w", encoding="utf-8") as f:
        f.write(content)


class HandoffError(Exception):
    """Raised if the command cannot be executed."""
