# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import glob
import logging
import os
import tempfile

import sal.chroot.apk_static
import sal.config
import sal.helpers.file
import sal.helpers.github
import sal.helpers.run
import sal.parse.validate


def rootfs_path(args):
    """
    Default path of the rootfs for args.branch and args.arch, e.g.
    /home/runner/rootfs/alpine-latest-x86_64.
    """
    branch = args.branch
    if branch.endswith("-stable"):
        branch = branch[:-len("-stable")]
    return f"{args.rootfs_base}/alpine-{branch}-{args.arch}"


def prepare_dir(args):
    """
    Create the rootfs folder and store it in args.rootfs. If the default path
    exists already (e.g. the action runs twice in one job), create a new
    folder next to it.
    """
    path = default = rootfs_path(args)
    if os.path.exists(default):
        os.makedirs(args.rootfs_base, exist_ok=True)
        path = tempfile.mkdtemp(prefix=os.path.basename(default) + "-",
                                dir=args.rootfs_base)
        os.chmod(path, 0o755)
        logging.warning(f"WARNING: {default} exists already, using {path}"
                        " instead")
    else:
        os.makedirs(path)

    sal.helpers.github.info(f"Alpine will be installed into: {path}")
    args.rootfs = path
    return path


def repositories(args):
    """
    :returns: list of repository URLs for /etc/apk/repositories
    """
    ret = [f"{args.mirror_url}/{args.branch}/main",
           f"{args.mirror_url}/{args.branch}/community"]
    return ret + args.extra_repositories.split()


def write_repositories(args):
    sal.helpers.github.info("Creating /etc/apk/repositories:")
    content = "\n".join(repositories(args)) + "\n"
    for line in content.splitlines():
        logging.info(line)
    sal.helpers.file.write(args, f"{args.rootfs}/etc/apk/repositories",
                           content)


def init_keys(args):
    """
    Copy the keys that sign the Alpine repositories into the rootfs, so apk
    can verify the APKINDEX files before alpine-keys is installed. Then copy
    the extra keys from the workspace.
    """
    keys = sorted(glob.glob(f"{args.keys_dir}/*.pub"))
    if not keys:
        raise RuntimeError(f"No *.pub keys found in {args.keys_dir}. Copy the"
                           " keys from Alpine's alpine-keys package there, or"
                           " point --keys-dir to a folder with the keys.")

    target_dir = f"{args.rootfs}/etc/apk/keys"
    for key in keys:
        sal.helpers.file.install(args, key,
                                 f"{target_dir}/{os.path.basename(key)}",
                                 "644")

    for path in args.extra_keys.split():
        sal.helpers.file.install(args, os.path.join(args.workspace, path),
                                 f"{target_dir}/{os.path.basename(path)}",
                                 "644")


def copy_resolv_conf(args, host="/etc/resolv.conf"):
    """
    Copy the host's /etc/resolv.conf to the rootfs. If it doesn't exist,
    create an empty file.

    :param host: can be changed for testcases
    """
    content = ""
    if os.path.exists(host):
        with open(host, encoding="utf-8") as handle:
            content = handle.read()
    sal.helpers.file.write(args, f"{args.rootfs}/etc/resolv.conf", content)


def release_package(args):
    """
    :returns: "alpine-release", or "" for branches that don't have it yet
    """
    version = sal.parse.validate.branch_version(args.branch)
    version_min = sal.parse.validate.branch_version(
        sal.config.release_package_min_branch)
    if version and version < version_min:
        return ""
    return sal.config.release_package


def unpack_release_files(args):
    """
    Unpack only /etc of alpine-base (os-release, alpine-release, issue), we
    don't want to install all its dependencies (e.g. openrc).
    """
    package = sal.config.release_fallback_package
    sal.helpers.github.info(f"Fetching and unpacking /etc from {package}")

    handle, temp_path = tempfile.mkstemp(prefix="setup-alpine",
                                         suffix=".apk")
    os.close(handle)
    try:
        sal.chroot.apk_static.fetch_stdout(args, args.rootfs, package,
                                           temp_path)
        sal.helpers.run.root(args, ["tar", "-xzf", temp_path, "-C",
                                    args.rootfs, "etc"])
    finally:
        os.unlink(temp_path)


def init(args):
    """
    Bootstrap the Alpine rootfs in args.rootfs with the static apk.
    """
    sal.helpers.github.group(f"Initialize Alpine Linux {args.branch}"
                             f" ({args.arch})")

    write_repositories(args)
    init_keys(args)
    copy_resolv_conf(args)

    release = release_package(args)
    packages = sal.config.base_packages + ([release] if release else [])

    sal.helpers.github.info(f"Installing base packages into {args.rootfs}")
    sal.chroot.apk_static.run(args, ["add",
                                     "--root", args.rootfs,
                                     "--initdb",
                                     "--update-cache",
                                     "--arch", args.arch] + packages,
                              output="stdout")

    if not release:
        unpack_release_files(args)
