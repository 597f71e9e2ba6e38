# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import glob
import logging
import os
import shutil
import tarfile
import tempfile

import sal.chroot.apk_static
import sal.config
import sal.helpers.file
import sal.helpers.github
import sal.helpers.run
import sal.parse
import sal.parse.arch


def check_update_binfmts():
    if not shutil.which("update-binfmts"):
        raise RuntimeError("Could not find the 'update-binfmts' executable,"
                           " which is needed to emulate foreign"
                           " architectures. Install binfmt-support on the"
                           " runner.")


def is_registered(args, arch_qemu):
    code = sal.helpers.run.user(args, ["update-binfmts", "--display",
                                       f"qemu-{arch_qemu}"], check=False)
    return code == 0


def fetch(args, arch_qemu):
    """
    Download the qemu-<arch> package from the latest-stable community
    repository with the static apk. Installing qemu-user-static with apt-get
    takes a lot longer.

    :returns: path to the downloaded .apk file
    """
    package = f"qemu-{arch_qemu}"
    sal.helpers.github.info(f"Fetching {package} from the latest-stable"
                            " Alpine repository")
    sal.chroot.apk_static.run(args, [
        "fetch",
        "--keys-dir", args.keys_dir,
        "--repository", f"{args.mirror_url}/latest-stable/community",
        "--no-cache",
        "--output", args.runner_temp,
        package])

    # File name: <pkgname>-<pkgver>-r<pkgrel>.apk
    found = sorted(glob.glob(f"{args.runner_temp}/{package}-[0-9]*.apk"))
    if not found:
        raise RuntimeError(f"apk fetch did not save {package} in"
                           f" {args.runner_temp}")
    return found[-1]


def extract_binary(apk_path, member):
    """
    Extract a single file from an .apk package to a temporary path. Apk
    packages are concatenated gzip streams of tar segments, which tarfile
    reads as one archive.

    :param member: path inside the package, e.g. "usr/bin/qemu-aarch64"
    :returns: path to the temporary file
    """
    with tarfile.open(apk_path, "r:gz") as tar:
        try:
            source = tar.extractfile(member)
        except KeyError:
            source = None
        if source is None:
            raise RuntimeError(f"Could not find {member} in {apk_path}")

        handle, temp_path = tempfile.mkstemp(prefix="setup-alpine")
        with open(handle, "wb") as target:
            shutil.copyfileobj(source, target)

    logging.debug(f"extracted: {member} -> {temp_path}")
    return temp_path


def install(args, arch_qemu):
    """
    Install the qemu-<arch> binary to /usr/local/bin on the host.
    """
    package = f"qemu-{arch_qemu}"
    apk_path = fetch(args, arch_qemu)

    sal.helpers.github.info(f"Unpacking {package} and installing on the host"
                            " system")
    temp_path = extract_binary(apk_path, f"usr/bin/{package}")
    try:
        sal.helpers.file.install(args, temp_path,
                                 f"{sal.config.qemu_install_dir}/{package}")
    finally:
        os.unlink(temp_path)
    sal.helpers.run.root(args, ["rm", "-f", apk_path])


def import_file(arch_qemu, interpreter):
    """
    Generate the binfmt-support format file that "update-binfmts --import"
    reads, see binfmt-support's update-binfmts(8).
    """
    info = sal.parse.binfmt_info(arch_qemu)
    lines = ["package setup-alpine",
             f"interpreter {interpreter}",
             f"magic {info['magic']}",
             "offset 0",
             f"mask {info['mask']}",
             "credentials yes",
             "fix_binary yes"]
    return "\n".join(lines) + "\n"


def register(args, arch_qemu):
    """
    Register the installed qemu-<arch> binary with update-binfmts.
    """
    name = f"qemu-{arch_qemu}"
    interpreter = f"{sal.config.qemu_install_dir}/{name}"

    # update-binfmts uses the file name as name of the format
    path = f"{args.runner_temp}/binfmts/{name}"
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as handle:
        handle.write(import_file(arch_qemu, interpreter))

    sal.helpers.github.info(f"Registering binfmt for {arch_qemu}")
    sal.helpers.run.root(args, ["update-binfmts", "--import", path])


def init(args):
    """
    Make sure that binaries of args.arch can run on the host.
    """
    if not sal.parse.arch.cpu_emulation_required(args.arch):
        return

    arch_qemu = sal.parse.arch.alpine_to_qemu(args.arch)
    sal.helpers.github.group(f"Install qemu-{arch_qemu} emulator")
    check_update_binfmts()

    if is_registered(args, arch_qemu):
        sal.helpers.github.info(f"qemu-{arch_qemu} is already installed on"
                                " the host system")
        return

    install(args, arch_qemu)
    register(args, arch_qemu)
