# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os

import sal.chroot.root
import sal.helpers.run


def destroy(args, rootfs, dry=False):
    """
    Safely remove a rootfs. Only folders that contain abin/proot are
    considered a rootfs, so a typo in the path can't delete something else.

    :param dry: Only show what would be deleted, do not delete for real
    """
    rootfs = os.path.realpath(rootfs)
    if not os.path.exists(rootfs):
        logging.info(f"NOTE: rootfs does not exist: {rootfs}")
        return
    if rootfs == "/" or not os.path.exists(sal.chroot.root.proot_path(rootfs)):
        raise RuntimeError(f"Not a rootfs created by setup-alpine: {rootfs}")

    logging.info(f"% rm -rf {rootfs}")
    if not dry:
        sal.helpers.run.root(args, ["rm", "-rf", rootfs])
