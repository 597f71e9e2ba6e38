# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import tarfile


def parse_next_block(path, lines, start):
    """
    Parse the next block in an APKINDEX.

    :param path: to the APKINDEX.tar.gz
    :param start: current index in lines, gets increased in this
                  function. Wrapped into a list, so it can be modified
                  "by reference". Example: [5]
    :param lines: all lines from the "APKINDEX" file inside the archive
    :returns: a dictionary with the following structure:
              { "arch": "x86_64",
                "pkgname": "alpine-keys",
                "version": "2.4-r1" }
    :returns: None, when there are no more blocks
    """
    ret = {}
    mapping = {
        "A": "arch",
        "P": "pkgname",
        "V": "version",
    }
    end_of_block_found = False
    for i in range(start[0], len(lines)):
        # Check for empty line
        start[0] = i + 1
        line = lines[i]
        if not isinstance(line, str):
            line = line.decode()
        if line == "\n":
            end_of_block_found = True
            break

        for letter, key in mapping.items():
            if line.startswith(letter + ":"):
                if key in ret:
                    raise RuntimeError(
                        "Key " + key + " (" + letter + ":) specified twice"
                        " in block: " + str(ret) + ", file: " + path)
                ret[key] = line[2:-1]

    if end_of_block_found:
        for key in ["pkgname", "version"]:
            if key not in ret:
                raise RuntimeError(f"Missing required key '{key}' in block "
                                   f"{ret}, file: {path}")
        return ret

    # No more blocks
    elif ret != {}:
        raise RuntimeError("Last block in " + path + " does not end"
                           " with a new line! Delete the file and"
                           " try again. Last block: " + str(ret))
    return None


def package(path, pkgname):
    """
    Find a package in an APKINDEX.tar.gz downloaded from a mirror.

    :param path: to the APKINDEX.tar.gz
    :returns: the block of the package (see parse_next_block())
    :raises RuntimeError: when the package is not in the index
    """
    logging.verbose(f"Parsing {path}")
    with tarfile.open(path, "r:gz") as tar:
        with tar.extractfile(tar.getmember("APKINDEX")) as handle:
            lines = handle.readlines()

    start = [0]
    while True:
        block = parse_next_block(path, lines, start)
        if not block:
            break
        if block["pkgname"] == pkgname:
            return block

    raise RuntimeError(f"Could not find package {pkgname} in {path}")
