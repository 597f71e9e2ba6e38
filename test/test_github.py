# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

import sal_test  # noqa
import sal.helpers.github
import sal.helpers.logging


@pytest.fixture
def args(request, monkeypatch, tmpdir):
    request.addfinalizer(sal.helpers.logging.close)
    monkeypatch.setattr(sal.helpers.github, "current_group", None)
    return sal_test.args_for(monkeypatch, tmpdir, "setup")


def test_escape():
    assert sal.helpers.github.escape_data("50%\nline\r") == "50%25%0Aline%0D"
    assert sal.helpers.github.escape_property("a: b, c") == "a%3A b%2C c"


def test_group(args, capsys):
    github = sal.helpers.github
    capsys.readouterr()

    github.endgroup()
    assert capsys.readouterr().out == ""

    github.group("First")
    github.group("Second")
    assert github.current_group == "Second"
    github.endgroup()
    assert github.current_group is None

    assert capsys.readouterr().out == ("::group::First\n"
                                       "::endgroup::\n"
                                       "::group::Second\n"
                                       "::endgroup::\n")


def test_error(args, capsys):
    capsys.readouterr()
    sal.helpers.github.error("Install packages", "Command failed: 1\n2")
    assert capsys.readouterr().out == (
        "::error title=setup-alpine%3A Install packages::"
        "Command failed: 1%0A2\n")


def test_set_output(args, tmpdir):
    args.github_output = str(tmpdir) + "/output"
    args.github_path = str(tmpdir) + "/path"

    sal.helpers.github.set_output(args, "root-path", "/home/runner/rootfs/a")
    sal.helpers.github.add_path(args, "/home/runner/rootfs/a/abin")

    with open(args.github_output) as handle:
        assert handle.read() == "root-path=/home/runner/rootfs/a\n"
    with open(args.github_path) as handle:
        assert handle.read() == "/home/runner/rootfs/a/abin\n"


def test_set_output_outside_of_actions(args, tmpdir):
    args.github_output = ""
    args.github_path = ""
    sal.helpers.github.set_output(args, "root-path", "/rootfs")
    sal.helpers.github.add_path(args, "/rootfs/abin")
    with open(args.log) as handle:
        log = handle.read()
    assert "NOTE: GITHUB_OUTPUT is not set, output: root-path=/rootfs" in log
    assert "NOTE: GITHUB_PATH is not set, add to PATH: /rootfs/abin" in log
