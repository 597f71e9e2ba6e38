# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import pwd
import tempfile

import sal.config


def fill_runner_defaults(args):
    """
    Fill out the runner related values that have no static default, because
    they depend on the system we are running on.
    """
    if not args.user:
        args.user = pwd.getpwuid(os.getuid()).pw_name
    if not args.uid:
        if os.environ.get("SUDO_USER"):
            args.uid = sal.config.default_uid
        else:
            # Not running with sudo: mirror whoever runs setup-alpine
            args.uid = str(os.getuid())
    if args.runner_temp == sal.config.defaults["runner_temp"]:
        args.runner_temp = tempfile.gettempdir()
    if not args.runner_workspace:
        args.runner_workspace = os.getcwd()
    if not args.workspace:
        args.workspace = os.getcwd()

    # The parent of the workspace holds the checkouts of all repositories
    # used in the job
    args.runner_workdir = os.path.dirname(
        os.path.normpath(args.runner_workspace))


def merge_with_args(args, environ=None):
    """
    We have the internal config (sal/config/__init__.py) and the action
    inputs, which GitHub passes as INPUT_* environment variables.

    Args holds the variables parsed from the commandline (e.g. --arch fills
    out args.arch), and values specified on the commandline count the most.

    In case it is not specified on the commandline, we look into the
    environment (sal.config.load()). When it is not set there either, we use
    the default value from the internal config.
    """
    # Use values from the environment
    cfg = sal.config.load(environ)
    for key, value in cfg.items():
        if key not in args or getattr(args, key) is None:
            setattr(args, key, value)

    # Use defaults from sal.config.defaults
    for key, value in sal.config.defaults.items():
        if key not in args or getattr(args, key) is None:
            setattr(args, key, value)

    fill_runner_defaults(args)
