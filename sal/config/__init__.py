# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
from typing import List

#
# Exported functions
#
from sal.config.load import load
from sal.config.merge_with_args import merge_with_args
from sal.config.sudo import which_sudo


#
# Exported variables (internal configuration)
#
sal_src = os.path.normpath(os.path.realpath(__file__) + "/../../..")
data_path = sal_src + "/sal/data"
apk_keys_path = data_path + "/keys"
binfmt_info_path = data_path + "/qemu-user-binfmt.txt"

# Architectures with a static apk-tools build. The value is the SHA-256 of
# apk.static from apk_tools_url_template for that architecture.
apk_tools_version = "v2.14.0"
apk_tools_sha256 = {
    "x86_64": "1c65115a425d049590bec7c729c7fd88357fbb090a6fc8c31d834d7b0bc7d6f2",
    "x86": "cb8160be3f57b2e7b071b63cb9acb4f06c1e2521b69db178b63e2130acd5504a",
    "aarch64": "d49a63b8b6780fc1342d3e7e14862aa006c30bafbf74beec8e1dfe99e6f89471",
    "armhf": "878a000702c1faeb9fdab594dc071b5a1c40647646c96b07aa35dcd43247567a",
    "armv7": "9d68d7cb0bbb46e02b7616e030eba7be1697d84cabf61e0a186a6b7522ffb09e",
    "ppc64le": "e7d28c677b0a90f7b89bf85d848c52c1a91d06fd7e0661a55b457abaac4eb0b3",
    "riscv64": "b32132ebcb4fd0b01cd270689328e11d094bb9a69c2991ed40f359f857cce6a3",
    "s390x": "c1ca31c424ce8c62a22cc8cc597770f64ca1106709e65ae447a81f6175081fa5",
}
architectures = list(apk_tools_sha256.keys())
apk_tools_url_template = ("https://gitlab.alpinelinux.org/api/v4/projects/5"
                          "/packages/generic/{version}/{arch}/apk.static"
                          "#!sha256!{sha256}")

# Separates the download URL from the expected SHA-256 of the file
checksum_separator = "#!sha256!"

# Seconds to wait for a connection when downloading
download_timeout = 10

# Installed into every rootfs
base_packages = [
    "alpine-baselayout",
    "apk-tools",
    "bash",
    "busybox",
    "busybox-suid",
    "musl-utils",
    "sudo",
]

# Provides /etc/os-release, /etc/alpine-release and /etc/issue. Older branches
# don't have it, there we unpack /etc from alpine-base instead (without
# installing it, it would pull in openrc).
release_package = "alpine-release"
release_package_min_branch = "v3.17"
release_fallback_package = "alpine-base"

# When --keys-dir has no keys, they get taken from this package. The
# APKINDEX and the package are downloaded over HTTPS from mirror_url, or
# from alpine_keys_mirror if mirror_url is not an HTTPS URL. Extracted to
# $RUNNER_TEMP/alpine_keys_dir.
alpine_keys_package = "alpine-keys"
alpine_keys_mirror = "https://dl-cdn.alpinelinux.org/alpine"
alpine_keys_branch = "latest-stable"
alpine_keys_dir = "alpine-keys"

# PRoot gets built from source, the prebuilt binaries don't work on
# unprivileged, Docker-based runners
proot_git_url = "https://github.com/proot-me/PRoot"
proot_git_tag = "v5.4.0"
proot_build_depends = ["libtalloc-dev", "libarchive-dev"]
proot_make_targets = ["loader.elf", "proot"]

# Where the qemu-user binaries get installed on the host
qemu_install_dir = "/usr/local/bin"

# Always bind-mounted into the rootfs (before the runner work dir and the
# user's volumes)
chroot_binds = ["/proc", "/dev", "/sys"]

# Files inside the rootfs
binds_file = ".binds.sh"
env_file = "tmp/.env.sh"
setup_script = ".setup.sh"
bin_dir = "abin"

# Action scripts installed into the rootfs (source in data_path, target
# relative to the rootfs). "$SHELL_NAME" gets replaced with args.shell_name.
action_scripts = {
    "proot-configured": f"{bin_dir}/proot-configured",
    "alpine.sh": f"{bin_dir}/$SHELL_NAME",
    "destroy.sh": "destroy.sh",
}

# Used when the CI user's uid is unknown
default_uid = "1000"

# Names of the action inputs. They get read from INPUT_<NAME> environment
# variables (upper case, "-" replaced with "_"), see sal/config/load.py.
input_keys = [
    "apk_tools_url",
    "arch",
    "branch",
    "extra_keys",
    "extra_repositories",
    "mirror_url",
    "packages",
    "shell_name",
    "volumes",
]

# Values describing the runner, the first non-empty environment variable of
# each list wins
runner_env = {
    "github_output": ["GITHUB_OUTPUT"],
    "github_path": ["GITHUB_PATH"],
    "runner_temp": ["RUNNER_TEMP"],
    "runner_workspace": ["RUNNER_WORKSPACE"],
    "uid": ["SUDO_UID"],
    "user": ["SUDO_USER", "USER"],
    "workspace": ["GITHUB_WORKSPACE"],
}

# Input/runner default values
# $RUNNER_TEMP and $USER_HOME get replaced with the actual values (which may
# be overridden on the commandline)
defaults = {
    # This first chunk matches input_keys
    "apk_tools_url": "",
    "arch": "x86_64",
    "branch": "latest-stable",
    "extra_keys": "",
    "extra_repositories": "",
    "mirror_url": "http://dl-cdn.alpinelinux.org/alpine",
    "packages": "",
    "shell_name": "alpine.sh",
    "volumes": "",

    # Runner and other
    "github_output": "",
    "github_path": "",
    "keys_dir": apk_keys_path,
    "log": "$RUNNER_TEMP/setup-alpine.log",
    "rootfs_base": "$USER_HOME/rootfs",
    "runner_temp": "/tmp",
    "runner_workspace": "",
    "uid": "",
    "user": "",
    "workspace": "",
}

# Colors used in terminal output
styles = {
    "BLUE": '\033[94m',
    "BOLD": '\033[1m',
    "GREEN": '\033[92m',
    "RED": '\033[91m',
    "YELLOW": '\033[93m',
    "END": '\033[0m'
}


def sudo(cmd: List[str]) -> List[str]:
    """Adapt a command to run as root."""
    sudo = which_sudo()
    if sudo:
        return [sudo, *cmd]
    else:
        return cmd
