# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import shlex

import sal.config
import sal.helpers.file
import sal.helpers.github
import sal.helpers.run
import sal.parse.validate

""" PRoot does not mount anything, it translates paths of the processes it
    runs. The bind "mounts" are therefore only a list of -b arguments, stored
    in $ROOTFS/.binds.sh as bash array, so the proot-configured script can
    source it. """


def needs_run_shm(dev_shm="/dev/shm", run_shm="/run/shm"):
    """
    Some systems (Ubuntu?) symlink /dev/shm to /run/shm.

    :dev_shm, run_shm: can be changed for testcases
    """
    return os.path.islink(dev_shm) and os.path.isdir(run_shm)


def bind_args(args):
    """
    :returns: list of bind specifications for proot's -b, e.g.
              ["/proc", "/dev", "/sys", "/home/runner/work",
               "/home/runner/cache:/cache"]
    """
    ret = list(sal.config.chroot_binds)
    ret.append(args.runner_workdir)
    if needs_run_shm():
        ret.append("/run/shm")

    for volume in args.volumes.split():
        source, target = sal.parse.validate.parse_volume(volume)
        ret.append(f"{source}:{target}")
    return ret


def binds_file_content(binds):
    ret = "PROOT_BIND_ARGS=(\n"
    for bind in binds:
        ret += f"  -b {shlex.quote(bind)}\n"
    ret += ")\n"
    return ret


def write_binds(args):
    """
    Create $ROOTFS/proc and write $ROOTFS/.binds.sh.
    """
    sal.helpers.run.root(args, ["mkdir", "-p", f"{args.rootfs}/proc"])

    binds = bind_args(args)
    for bind in binds:
        sal.helpers.github.info(f"Bind {bind}")
    sal.helpers.file.write(args, f"{args.rootfs}/{sal.config.binds_file}",
                           binds_file_content(binds))


def read_binds(rootfs):
    """
    Parse $ROOTFS/.binds.sh, as written by write_binds().

    :returns: list of bind specifications (see bind_args())
    """
    path = f"{rootfs}/{sal.config.binds_file}"
    if not os.path.exists(path):
        logging.debug(f"No binds file found: {path}")
        return []

    with open(path, encoding="utf-8") as handle:
        words = shlex.split(handle.read())

    ret = []
    for i, word in enumerate(words):
        if word == "-b" and i + 1 < len(words):
            ret.append(words[i + 1])
    return ret
