# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import sal.config
import sal.helpers.file
import sal.helpers.github


def targets(args):
    """
    :returns: {source: target} of the action scripts, source in
              sal/data, target as full path inside args.rootfs
    """
    ret = {}
    for source, target in sal.config.action_scripts.items():
        target = target.replace("$SHELL_NAME", args.shell_name)
        ret[f"{sal.config.data_path}/{source}"] = f"{args.rootfs}/{target}"
    return ret


def install(args):
    """
    Install the scripts that run commands inside the rootfs (from later steps
    of the workflow) and the one that removes it.
    """
    sal.helpers.github.group("Copy action scripts")
    for source, target in targets(args).items():
        sal.helpers.file.install(args, source, target)
