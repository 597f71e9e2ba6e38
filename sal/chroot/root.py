# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os

import sal.chroot.mount
import sal.config
import sal.helpers.file
import sal.helpers.run
import sal.helpers.run_core


def proot_path(rootfs):
    return f"{rootfs}/{sal.config.bin_dir}/proot"


def command(rootfs, cmd, as_root=False, working_dir="/"):
    """
    Build the proot command line that runs cmd inside the rootfs, with the
    same arguments that the proot-configured script uses.

    :param as_root: use proot's fake root (-0)
    :returns: e.g. ["/.../abin/proot", "-r", "/...", "-b", "/proc", ...,
              "-0", "-w", "/", "echo", "test"]
    """
    proot = proot_path(rootfs)
    if not os.path.exists(proot):
        raise RuntimeError(f"Could not find {proot}, is this a rootfs"
                           " created by setup-alpine?")

    ret = [proot, "-r", rootfs]
    for bind in sal.chroot.mount.read_binds(rootfs):
        ret += ["-b", bind]
    if as_root:
        ret += ["-0"]
    return ret + ["-w", working_dir] + cmd


def root(args, cmd, working_dir="/", output="log", output_return=False,
         check=None, as_root=True):
    """
    Run a command inside args.rootfs, as (fake) root unless as_root is
    False.

    See sal.helpers.run_core.core() for a detailed description of all other
    arguments and the return value.
    """
    # Readable log message (without all the escaping)
    msg = "(alpine) # " if as_root else "(alpine) % "
    if working_dir != "/":
        msg += f"cd {working_dir}; "
    msg += " ".join(cmd)

    cmd_proot = command(args.rootfs, cmd, as_root, working_dir)
    return sal.helpers.run_core.core(args, msg, sal.config.sudo(cmd_proot),
                                     None, output, output_return, check)


def run_script(args, script, as_root=True):
    """
    Write a shell script to $ROOTFS/.setup.sh and run it inside the rootfs.
    Its output is shown in the job log.
    """
    path = f"{args.rootfs}/{sal.config.setup_script}"
    sal.helpers.file.write(args, path, script, "755")
    try:
        root(args, ["/bin/sh", "-eo", "pipefail",
                    "/" + sal.config.setup_script], output="stdout",
             as_root=as_root)
    finally:
        sal.helpers.run.root(args, ["rm", "-f", path])
