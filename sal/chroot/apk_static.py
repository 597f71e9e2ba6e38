# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import shlex
import stat

import sal.config
import sal.helpers.github
import sal.helpers.http
import sal.helpers.run
import sal.helpers.run_core


def path(args):
    return f"{args.runner_temp}/apk"


def init(args):
    """
    Download and verify the static apk binary ($RUNNER_TEMP/apk).
    """
    url = sal.helpers.http.parse_checksum_url(args.apk_tools_url)[0]
    sal.helpers.github.info(f"Downloading {url}")

    apk = sal.helpers.http.download(args, args.apk_tools_url, path(args))
    os.chmod(apk, os.stat(apk).st_mode | stat.S_IEXEC | stat.S_IXGRP |
             stat.S_IXOTH)
    return apk


def run(args, parameters, output="log"):
    """
    Run the static apk binary as root.

    :param parameters: apk subcommand and its arguments, e.g.
                       ["add", "--root", "/tmp/rootfs", "busybox"]
    """
    # --no-progress is a parameter to each subcommand, so it must be appended
    # or apk gets confused
    command = [path(args)] + parameters + ["--no-progress"]
    return sal.helpers.run.root(args, command, output=output)


def fetch_stdout(args, root, package, target):
    """
    Fetch a package from the repositories configured in root and write the
    .apk file to target (apk fetch --stdout).
    """
    logging.debug(f"Fetch {package} to {target}")
    cmd = sal.config.sudo([path(args), "fetch", "--root", root,
                           "--no-progress", "--stdout", package])
    flat = sal.helpers.run_core.flat_cmd(cmd) + " > " + shlex.quote(target)
    sal.helpers.run.user(args, ["sh", "-c", flat])
