# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os

import sal.config
import sal.helpers.file
import sal.helpers.github
import sal.helpers.run


def source_dir(args):
    return f"{args.runner_temp}/PRoot"


def clone(args):
    """
    Clone PRoot's git repository at the configured tag (does nothing if it
    was cloned already).
    """
    path = source_dir(args)
    if os.path.exists(f"{path}/.git"):
        logging.debug(f"Using existing PRoot checkout: {path}")
        return path

    sal.helpers.github.info(f"Cloning {sal.config.proot_git_url}"
                            f" ({sal.config.proot_git_tag})")
    sal.helpers.run.user(args, ["git", "clone", "--depth=1",
                                "-b", sal.config.proot_git_tag,
                                sal.config.proot_git_url, path])
    return path


def build(args):
    """
    Build proot from source, for compatibility with unprivileged,
    Docker-based runners.

    :returns: path to the proot binary
    """
    path = clone(args)

    sal.helpers.github.info("Installing build dependencies: " +
                            " ".join(sal.config.proot_build_depends))
    sal.helpers.run.root(args, ["apt", "-y", "install"] +
                         sal.config.proot_build_depends)

    sal.helpers.github.info("Building proot")
    sal.helpers.run.user(args, ["make", "-C", f"{path}/src"] +
                         sal.config.proot_make_targets)
    return f"{path}/src/proot"


def install(args):
    sal.helpers.github.group("Install proot")
    binary = build(args)
    sal.helpers.file.install(
        args, binary, f"{args.rootfs}/{sal.config.bin_dir}/proot")
