# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import fnmatch
import platform


def alpine_to_qemu(arch):
    """
    Convert the architecture to the string used in the QEMU packaging.
    This corresponds to the package name of e.g. qemu-aarch64.
    """
    mapping = {
        "x86": "i386",
        "i[3456]86": "i386",
        "armhf": "arm",
        "armv[4-9]": "arm",
    }
    for pattern, arch_qemu in mapping.items():
        if fnmatch.fnmatch(arch, pattern):
            return arch_qemu
    return arch


def cpu_emulation_required(arch):
    """
    Whether a rootfs for arch needs QEMU on this host. Note that this compares
    with the machine name (uname -m), so e.g. x86 on x86_64 is emulated too.
    """
    return arch != platform.machine()
