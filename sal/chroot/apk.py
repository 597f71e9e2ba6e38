# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import shlex

import sal.chroot.root
import sal.helpers.github
import sal.helpers.run_core


def install_script(packages):
    """
    :param packages: list of package names, e.g. ["build-base", "git"]
    :returns: shell script that installs them inside the rootfs
    """
    pkgs = " ".join(packages)
    return (f"echo {shlex.quote('▷ Installing ' + pkgs)}\n" +
            sal.helpers.run_core.flat_cmd(["apk", "add", "--update-cache"] +
                                          packages) + "\n")


def install(args, packages):
    if not packages:
        return
    sal.helpers.github.group("Install packages")
    sal.chroot.root.run_script(args, install_script(packages))
