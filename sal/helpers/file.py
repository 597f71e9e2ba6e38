# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import hashlib
import os
import tempfile

import sal.helpers.run


def sha256sum(path):
    """
    Calculate the SHA-256 checksum of a file.

    :returns: hex digest in lower case
    """
    ret = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(64 * 1024), b""):
            ret.update(chunk)
    return ret.hexdigest()


def install(args, source, target, mode="755"):
    """
    Copy a file as root with "install -D", so the target gets owned by root,
    missing parent directories get created and the mode is set.
    """
    sal.helpers.run.root(args, ["install", "-Dv", "-m" + mode, source,
                                target])


def write(args, path, content, mode="644"):
    """
    Write a text file as root (through a temporary file, see install()).
    """
    handle, temp_path = tempfile.mkstemp(prefix="setup-alpine")
    try:
        with open(handle, "w", encoding="utf-8") as temp:
            temp.write(content)
        install(args, temp_path, path, mode)
    finally:
        os.unlink(temp_path)
