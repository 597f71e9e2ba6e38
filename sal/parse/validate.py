# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import re

import sal.config
from sal.helpers.errors import InputError

""" Validation of the action inputs. This runs before anything gets changed
    on the system, so a typo in the workflow file fails fast. """

shell_name_pattern = r"^[a-zA-Z][a-zA-Z0-9_.~+@%-]*$"
branch_pattern = r"^v[0-9]+\.[0-9]+"
url_pattern = r"^https?://.+#!sha256![0-9a-fA-F]{64}$"


def arch(value):
    if value not in sal.config.architectures:
        raise InputError("arch", "Expected one of: " +
                         ", ".join(sal.config.architectures) +
                         f", but got: {value}.")


def apk_tools_url(value):
    if not re.match(url_pattern, value):
        raise InputError("apk-tools-url", "The value must start with"
                         " https:// or http:// and end with '#!sha256!'"
                         " followed by a SHA-256 hash of the file to be"
                         f" downloaded, but got: {value}")


def branch(value):
    if value in ["edge", "latest-stable"]:
        return
    if not re.match(branch_pattern, value):
        raise InputError("branch", "Expected 'v[0-9].[0-9]+' (e.g. v3.15),"
                         f" edge, or latest-stable, but got: {value}.")


def branch_version(value):
    """
    :returns: (major, minor) tuple of a "vX.Y" branch, e.g. (3, 15), None for
              "edge" and "latest-stable"
    """
    match = re.match(branch_pattern, value)
    if not match:
        return None
    major, minor = match.group(0)[1:].split(".")
    return (int(major), int(minor))


def extra_keys(value, workspace):
    for path in value.split():
        full = os.path.join(workspace, path)
        if not os.path.isfile(full) or not os.access(full, os.R_OK):
            raise InputError("extra-keys", "File does not exist in workspace"
                             f" or is not readable: {path}.")


def shell_name(value):
    if not re.match(shell_name_pattern, value):
        raise InputError("shell-name", "Expected value matching regex"
                         f" {shell_name_pattern}, but got: {value}.")


def parse_volume(value):
    """
    :param value: "SRC:DST", or "SRC" to use the same path inside the rootfs
    :returns: (SRC, DST)
    """
    source = value.split(":", 1)[0]
    target = value.split(":", 1)[1] if ":" in value else value
    return (source, target)


def volumes(value):
    for volume in value.split():
        source, target = parse_volume(volume)
        if not source or not target:
            raise InputError("volumes", "Expected SRC:DST, but got:"
                             f" {volume}.")
        if not target.startswith("/"):
            raise InputError("volumes", "The destination must be an absolute"
                             f" path, but got: {volume}.")


def apk_tools_default_url(arch):
    return sal.config.apk_tools_url_template.format(
        version=sal.config.apk_tools_version,
        arch=arch,
        sha256=sal.config.apk_tools_sha256[arch])


def inputs(args):
    """
    Validate all action inputs in args. Also fill out args.apk_tools_url with
    the default for args.arch, if it is empty.

    :raises InputError: for the first invalid input
    """
    arch(args.arch)
    if not args.apk_tools_url:
        args.apk_tools_url = apk_tools_default_url(args.arch)
        logging.verbose(f"apk-tools-url: {args.apk_tools_url}")
    apk_tools_url(args.apk_tools_url)
    branch(args.branch)
    extra_keys(args.extra_keys, args.workspace)
    shell_name(args.shell_name)
    volumes(args.volumes)
