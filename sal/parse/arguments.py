# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import argparse
import copy
import sys

try:
    import argcomplete
except ImportError:
    pass

import sal.config
import sal.helpers.args

""" This file is about parsing command line arguments passed to setup-alpine,
    as well as generating the help pages (setup-alpine -h). All this is done
    with Python's argparse. The parsed arguments get extended and finally
    stored in the "args" variable, which is passed to most functions all over
    the setup-alpine code base.

    See sal/helpers/args.py for more information about the args variable. """


def arguments_inputs(parser):
    """ Options that override the action inputs (INPUT_* environment
        variables). They all default to None, so sal.config.merge_with_args()
        can tell whether they were set on the command line. """
    group = parser.add_argument_group(
        "action inputs",
        "Override the inputs that GitHub passes as INPUT_* environment"
        " variables.")
    group.add_argument("--apk-tools-url", dest="apk_tools_url",
                       metavar="URL",
                       help="URL of the static apk binary, followed by"
                            " '#!sha256!' and its SHA-256 checksum")
    group.add_argument("--arch", choices=sal.config.architectures,
                       help="architecture of the rootfs, default: " +
                            sal.config.defaults["arch"])
    group.add_argument("--branch",
                       help="Alpine branch, e.g. v3.19, edge, default: " +
                            sal.config.defaults["branch"])
    group.add_argument("--extra-keys", dest="extra_keys", metavar="PATHS",
                       help="whitespace separated list of apk signing keys,"
                            " relative to the workspace")
    group.add_argument("--extra-repositories", dest="extra_repositories",
                       metavar="URLS",
                       help="whitespace separated list of additional"
                            " repositories")
    group.add_argument("--mirror-url", dest="mirror_url", metavar="URL",
                       help="Alpine Linux mirror, default: " +
                            sal.config.defaults["mirror_url"])
    group.add_argument("--packages",
                       help="whitespace separated list of packages to"
                            " install")
    group.add_argument("--shell-name", dest="shell_name",
                       help="name of the script that runs commands inside"
                            " the rootfs, default: " +
                            sal.config.defaults["shell_name"])
    group.add_argument("--volumes", metavar="SRC:DST",
                       help="whitespace separated list of directories to"
                            " bind-mount into the rootfs")


def arguments_runner(parser):
    group = parser.add_argument_group(
        "runner",
        "Override values that are derived from the runner's environment.")
    group.add_argument("--rootfs-base", dest="rootfs_base", metavar="DIR",
                       help="folder in which the rootfs gets created"
                            " (default: ~/rootfs of the CI user)")
    group.add_argument("--runner-temp", dest="runner_temp", metavar="DIR",
                       help="folder for downloads and the PRoot build"
                            " (default: $RUNNER_TEMP)")
    group.add_argument("--workspace", metavar="DIR",
                       help="folder that --extra-keys paths are relative to"
                            " (default: $GITHUB_WORKSPACE)")
    group.add_argument("--keys-dir", dest="keys_dir", metavar="DIR",
                       help="folder with the *.pub keys that sign the Alpine"
                            " repositories (default: shipped with"
                            " setup-alpine)")
    group.add_argument("--user", help="user to create inside the rootfs"
                       " (default: $SUDO_USER)")
    group.add_argument("--uid", help="uid of --user (default: $SUDO_UID)")


def arguments_run(subparser):
    ret = subparser.add_parser("run", help="run a command inside an existing"
                               " rootfs")
    ret.add_argument("-C", "--rootfs", dest="rootfs", metavar="ROOTFS",
                     help="path to the rootfs (default: derived from"
                          " --branch and --arch)")
    ret.add_argument("-r", "--root", dest="as_root", action="store_true",
                     help="run the command as (fake) root")
    ret.add_argument("command", nargs=argparse.REMAINDER,
                     help="arguments for \"/bin/sh -eo pipefail\" like with"
                          " alpine.sh, e.g. -c 'apk info' or a script"
                          " (default: interactive /bin/sh)")


def arguments_destroy(subparser):
    ret = subparser.add_parser("destroy", help="remove a rootfs")
    ret.add_argument("-C", "--rootfs", dest="rootfs", metavar="ROOTFS",
                     help="path to the rootfs (default: derived from"
                          " --branch and --arch)")
    ret.add_argument("--dry", action="store_true", help="instead of actually"
                     " deleting anything, print out what would have been"
                     " deleted")


def arguments(argv=None):
    parser = argparse.ArgumentParser(prog="setup-alpine")

    # Other
    parser.add_argument("-V", "--version", action="version",
                        version=sal.__version__)

    # Logging
    parser.add_argument("-l", "--log", dest="log", default=None,
                        help="path to log file (default:"
                             " $RUNNER_TEMP/setup-alpine.log)")
    parser.add_argument("--details-to-stdout", dest="details_to_stdout",
                        help="print details (e.g. output of apk) to stdout,"
                             " instead of writing to the log",
                        action="store_true")
    parser.add_argument("-v", "--verbose", dest="verbose",
                        action="store_true", help="write even more to the"
                        " logfiles")
    parser.add_argument("-q", "--quiet", dest="quiet", action="store_true",
                        help="do not output any log messages")

    arguments_inputs(parser)
    arguments_runner(parser)

    # Actions
    sub = parser.add_subparsers(title="action", dest="action")
    sub.add_parser("setup", help="create the Alpine rootfs (default)")
    arguments_run(sub)
    arguments_destroy(sub)

    if "argcomplete" in sys.modules:
        argcomplete.autocomplete(parser, always_complete_options="long")

    # Parse and extend arguments (also backup unmodified result from argparse)
    args = parser.parse_args(argv)
    if not args.action:
        args.action = "setup"
    setattr(args, "from_argparse", copy.deepcopy(args))
    sal.helpers.args.init(args)
    return args
