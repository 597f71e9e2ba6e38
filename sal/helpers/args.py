# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import pwd

import sal.config
import sal.helpers.logging
import sal.parse.validate

""" This file constructs the args variable, which is passed to almost all
    functions in the setup-alpine code base. Here's a listing of the kind of
    information it stores.

    1. Argparse
       Variables directly from command line argument parsing (see
       sal/parse/arguments.py, the "dest" parameter of the add_argument()
       calls defines where it is stored in args).

       Examples:
       args.action ("setup", "run", "destroy")
       args.as_root (True when 'run --root' is passed)
       ...

    2. Argparse merged with others
       Variables from the action inputs (INPUT_* environment variables) and
       the runner's environment, that can be overridden from the command line
       (sal/parse/arguments.py) and fall back to the defaults defined in
       sal/config/__init__.py (see "defaults = {...").

       Examples:
       args.arch ("x86_64", "aarch64", ...)
       args.runner_temp ("/home/runner/work/_temp", override with
                         --runner-temp)
       args.user ("runner", from $SUDO_USER)

    3. Derived
       Values computed from the above, so they don't need to be computed
       over and over.

       Examples:
       args.runner_workdir (parent of $RUNNER_WORKSPACE)
       args.rootfs (set by sal.chroot.init.prepare_dir(), or with
                    'run -C ROOTFS')
"""


def user_home(user):
    """ Home directory of the CI user. When setup-alpine runs with sudo,
        ~ would be root's home, so look it up by name. """
    try:
        return pwd.getpwnam(user).pw_dir
    except KeyError:
        return os.path.expanduser("~")


def replace_placeholders(args):
    """ Replace $RUNNER_TEMP, $USER_HOME and ~ (for path variables) in
        variables from any config (environment, default config settings or
        config parameters specified on commandline) """

    # Replace $RUNNER_TEMP, $USER_HOME
    for key, value in sal.config.defaults.items():
        if key not in args:
            continue
        old = getattr(args, key)
        if isinstance(old, str):
            new = old.replace("$RUNNER_TEMP", args.runner_temp)
            if "$USER_HOME" in new:
                new = new.replace("$USER_HOME", user_home(args.user))
            setattr(args, key, new)

    # Replace ~ (path variables only)
    for key in ["keys_dir", "log", "rootfs_base", "runner_temp", "workspace"]:
        if key in args:
            setattr(args, key, os.path.expanduser(getattr(args, key)))


def init(args, environ=None):
    # Basic initialization
    sal.config.merge_with_args(args, environ)
    replace_placeholders(args)
    if "rootfs" not in args:
        setattr(args, "rootfs", None)

    # Initialize logs (we could raise errors below)
    sal.helpers.logging.init(args)

    # Initialization code which may raise errors
    if args.action == "setup":
        sal.parse.validate.inputs(args)

    return args
