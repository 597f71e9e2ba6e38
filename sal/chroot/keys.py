# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import glob
import logging
import os
import shutil
import tarfile

import sal.config
import sal.helpers.github
import sal.helpers.http
import sal.parse.apkindex


def find(keys_dir):
    return sorted(glob.glob(f"{keys_dir}/*.pub"))


def mirror(args):
    """
    :returns: HTTPS mirror to download the keys from. The keys can't be
              verified by anything else, so plain HTTP is not good enough.
    """
    if args.mirror_url.startswith("https://"):
        return args.mirror_url.rstrip("/")
    return sal.config.alpine_keys_mirror


def extract(apk_path, target_dir):
    """
    Extract the *.pub files in apk/keys folders of an alpine-keys package
    into target_dir. The package has the same keys in several folders,
    partially as symlinks, only the regular files are used. The signature
    of the package (.SIGN.RSA.<key>.pub) is skipped.

    :returns: sorted list of the extracted keys
    """
    ret = set()
    os.makedirs(target_dir, exist_ok=True)
    with tarfile.open(apk_path, "r:gz") as tar:
        for member in tar.getmembers():
            folder, name = os.path.split(member.name)
            if (not member.isfile() or not folder.endswith("apk/keys") or
                    not name.endswith(".pub")):
                continue
            path = f"{target_dir}/{name}"
            with tar.extractfile(member) as source:
                with open(path, "wb") as target:
                    shutil.copyfileobj(source, target)
            ret.add(path)

    if not ret:
        raise RuntimeError(f"Could not find any *.pub keys in {apk_path}")
    return sorted(ret)


def init(args):
    """
    Make sure that args.keys_dir has the keys that sign the Alpine
    repositories. If it is empty, download the alpine-keys package and point
    args.keys_dir to the extracted keys.
    """
    if find(args.keys_dir):
        logging.verbose(f"Using keys from {args.keys_dir}")
        return

    target_dir = f"{args.runner_temp}/{sal.config.alpine_keys_dir}"
    if find(target_dir):
        logging.verbose(f"Using previously downloaded keys: {target_dir}")
        args.keys_dir = target_dir
        return

    package = sal.config.alpine_keys_package
    branch = sal.config.alpine_keys_branch
    url_dir = f"{mirror(args)}/{branch}/main/{args.arch}"
    sal.helpers.github.info(f"No keys in {args.keys_dir}, downloading"
                            f" {package} from {url_dir}")

    index = sal.helpers.http.fetch(f"{url_dir}/APKINDEX.tar.gz",
                                   f"{args.runner_temp}/APKINDEX.tar.gz")
    try:
        version = sal.parse.apkindex.package(index, package)["version"]
    finally:
        os.unlink(index)

    apk = sal.helpers.http.fetch(f"{url_dir}/{package}-{version}.apk",
                                 f"{args.runner_temp}/{package}-{version}.apk")
    try:
        keys = extract(apk, target_dir)
    finally:
        os.unlink(apk)

    for key in keys:
        logging.info(f"* {os.path.basename(key)}")
    args.keys_dir = target_dir
