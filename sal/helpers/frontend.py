# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import shlex

import sal.chroot
import sal.chroot.apk
import sal.chroot.apk_static
import sal.chroot.binfmt
import sal.chroot.init
import sal.chroot.keys
import sal.chroot.proot
import sal.chroot.root
import sal.chroot.scripts
import sal.chroot.user
import sal.config
import sal.helpers.file
import sal.helpers.github
import sal.helpers.run_core


def _parse_rootfs(args):
    if args.rootfs:
        return os.path.realpath(args.rootfs)
    return sal.chroot.rootfs_path(args)


def setup(args):
    github = sal.helpers.github

    github.group("Prepare rootfs directory")
    sal.chroot.prepare_dir(args)

    github.group("Download static apk-tools")
    sal.chroot.apk_static.init(args)

    github.group("Prepare repository keys")
    sal.chroot.keys.init(args)

    sal.chroot.binfmt.init(args)
    sal.chroot.init.init(args)

    github.group("Set chroot filesystem binds")
    sal.chroot.write_binds(args)

    sal.chroot.proot.install(args)
    sal.chroot.scripts.install(args)
    sal.chroot.apk.install(args, args.packages.split())
    sal.chroot.user.setup(args)
    github.endgroup()

    github.set_output(args, "root-path", args.rootfs)
    github.add_path(args, f"{args.rootfs}/{sal.config.bin_dir}")


def env_file_content(environ):
    """
    Shell script that exports the given environment, in the format of the
    "export" builtin (what alpine.sh writes to the env file).
    """
    ret = ""
    for key in sorted(environ.keys()):
        if not key.isidentifier():
            continue
        ret += f"export {key}={shlex.quote(environ[key])}\n"
    return ret


def run(args):
    """
    Same as alpine.sh: pass the host environment through the env file and
    run the command with "/bin/sh -eo pipefail", or an interactive shell if
    no command was given.
    """
    args.rootfs = _parse_rootfs(args)

    command = list(args.command)
    if command[:1] == ["--"]:
        command = command[1:]
    if command:
        command = ["/bin/sh", "-eo", "pipefail"] + command
    else:
        command = ["/bin/sh"]

    sal.helpers.file.write(args, f"{args.rootfs}/{sal.config.env_file}",
                           env_file_content(os.environ))

    cmd = sal.chroot.root.command(args.rootfs, command, args.as_root,
                                  os.getcwd())
    msg = "(alpine) " + ("# " if args.as_root else "% ") + " ".join(command)
    sal.helpers.run_core.core(args, msg, cmd, output="interactive")


def destroy(args):
    sal.chroot.destroy(args, _parse_rootfs(args), args.dry)
