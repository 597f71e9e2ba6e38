# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
from sal.chroot.init import prepare_dir, rootfs_path
from sal.chroot.mount import write_binds, read_binds
from sal.chroot.root import run_script
from sal.chroot.user import setup as setup_user
from sal.chroot.zap import destroy
