# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import sal.config

# Get magic and mask from binfmt info file
# Return: {magic: ..., mask: ...}


def binfmt_info(arch_qemu, info=None):
    # Parse the info file
    full = {}
    info = info or sal.config.binfmt_info_path
    logging.verbose("parsing: " + info)
    with open(info, "r") as handle:
        for line in handle:
            if line.startswith('#') or "=" not in line:
                continue
            key, value = line.split("=", 1)
            full[key.strip()] = value.strip().strip("'")

    ret = {}
    logging.verbose("filtering by architecture: " + arch_qemu)
    for type in ["mask", "magic"]:
        key = arch_qemu + "_" + type
        if key not in full:
            raise RuntimeError(
                f"Could not find key {key} in binfmt info file: {info}")
        ret[type] = full[key]
    logging.verbose("=> " + str(ret))
    return ret
