#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import os
from pathlib import Path

import pytest

from awsrunas.handoff import HandoffError, ProcessHandoff

OVERLAY = {
    "AWS_ACCESS_KEY_ID": "accessKeyIdType",
    "AWS_SESSION_TOKEN": "tokenType",
    "AWS_RUNAS_PROFILE": "test-profile",
}


@pytest.fixture
def environ():
    return {"SHELL": "/bin/sh", "HOME": "/home/alice", "AWS_SESSION_TOKEN": "old"}


@pytest.fixture
def execvpe(mocker):
    return mocker.patch("os.execvpe")


def test_execs_command(execvpe, environ):
    ProcessHandoff(OVERLAY, environ).handoff(
        command="/usr/bin/foo", argv=["--bar", "baz"], skip_prompt=False
    )
    execvpe.assert_called_once()
    file, args, env = execvpe.call_args[0]
    assert file == "/usr/bin/foo"
    assert args == ["/usr/bin/foo", "--bar", "baz"]
    assert env["AWS_ACCESS_KEY_ID"] == "accessKeyIdType"
    assert env["HOME"] == "/home/alice"


def test_overlay_takes_precedence(execvpe, environ):
    ProcessHandoff(OVERLAY, environ).handoff(command="foo")
    env = execvpe.call_args[0][2]
    assert env["AWS_SESSION_TOKEN"] == "tokenType"


def test_environ_is_not_modified(execvpe, environ):
    before = dict(environ)
    ProcessHandoff(OVERLAY, environ).handoff(command="foo")
    assert environ == before


def test_os_environ_is_not_modified(execvpe, monkeypatch):
    monkeypatch.delenv("AWS_RUNAS_PROFILE", raising=False)
    ProcessHandoff(OVERLAY).handoff(command="foo")
    assert "AWS_RUNAS_PROFILE" not in os.environ


def test_command_not_found(environ):
    handoff = ProcessHandoff(OVERLAY, environ)
    with pytest.raises(HandoffError, match="does-not-exist"):
        handoff.handoff(command="/does-not-exist/aws-runas-test")
    assert "AWS_RUNAS_PROFILE" not in environ


def test_command_not_executable(execvpe, environ):
    execvpe.side_effect = PermissionError(13, "Permission denied")
    with pytest.raises(HandoffError, match="Permission denied"):
        ProcessHandoff(OVERLAY, environ).handoff(command="/etc/passwd")


def test_shell_without_prompt(execvpe, environ):
    ProcessHandoff(OVERLAY, environ).handoff(skip_prompt=True)
    file, args, _ = execvpe.call_args[0]
    assert file == "/bin/sh"
    assert args == ["/bin/sh"]


def test_default_shell(execvpe):
    ProcessHandoff(OVERLAY, {}).handoff(skip_prompt=True)
    assert execvpe.call_args[0][0] == "/bin/sh"


def test_bash_prompt(execvpe, environ):
    environ["SHELL"] = "/bin/bash"
    ProcessHandoff(OVERLAY, environ).handoff()
    file, args, _ = execvpe.call_args[0]
    assert file == "/bin/bash"
    assert args[:2] == ["/bin/bash", "--rcfile"]
    rcfile = Path(args[2])
    try:
        content = rcfile.read_text()
        assert "~/.bashrc" in content
        assert "aws-runas:${AWS_RUNAS_PROFILE}" in content
    finally:
        rcfile.unlink()


def test_zsh_prompt(execvpe, environ):
    environ["SHELL"] = "/usr/bin/zsh"
    environ["ZDOTDIR"] = "/home/alice/.zsh"
    ProcessHandoff(OVERLAY, environ).handoff()
    file, args, env = execvpe.call_args[0]
    assert file == "/usr/bin/zsh"
    assert args == ["/usr/bin/zsh"]
    assert env["AWS_RUNAS_ZDOTDIR"] == "/home/alice/.zsh"
    zshrc = Path(env["ZDOTDIR"]) / ".zshrc"
    assert "aws-runas:${AWS_RUNAS_PROFILE}" in zshrc.read_text()
    assert environ["ZDOTDIR"] == "/home/alice/.zsh"


def test_bash_with_skip_prompt(execvpe, environ):
    environ["SHELL"] = "/bin/bash"
    ProcessHandoff(OVERLAY, environ).handoff(skip_prompt=True)
    assert execvpe.call_args[0][1] == ["/bin/bash"]


def test_bash_rcfile_removed_when_exec_fails(execvpe, environ):
    execvpe.side_effect = FileNotFoundError(2, "No such file or directory")
    environ["SHELL"] = "/bin/bash"
    with pytest.raises(HandoffError):
        ProcessHandoff(OVERLAY, environ).handoff()
    rcfile = Path(execvpe.call_args[0][1][2])
    assert not rcfile.exists()


def test_zdotdir_removed_when_exec_fails(execvpe, environ):
    execvpe.side_effect = FileNotFoundError(2, "No such file or directory")
    environ["SHELL"] = "/usr/bin/zsh"
    with pytest.raises(HandoffError):
        ProcessHandoff(OVERLAY, environ).handoff()
    zdotdir = Path(execvpe.call_args[0][2]["ZDOTDIR"])
    assert not zdotdir.exists()
