# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import shlex

import sal.chroot.root
import sal.helpers.github
import sal.helpers.run_core


def setup_script(user, uid):
    """
    Shell script that creates the user inside the rootfs, and allows it to
    use sudo and doas without password (if they are installed).
    """
    adduser = sal.helpers.run_core.flat_cmd(["adduser", "-u", uid, "-G",
                                             "users", "-s", "/bin/sh", "-D",
                                             user])
    sudo_rule = shlex.quote(f"{user} ALL=(ALL) NOPASSWD: ALL")
    doas_rule = shlex.quote(f"permit nopass keepenv {user}")
    message = shlex.quote(f"▷ Creating user {user} with uid {uid}")

    return f"""echo {message}
{adduser}

if [ -d /etc/sudoers.d ]; then
	echo '▷ Adding sudo rule:'
	echo {sudo_rule} | tee /etc/sudoers.d/root
fi
if [ -d /etc/doas.d ]; then
	echo '▷ Adding doas rule:'
	echo {doas_rule} | tee /etc/doas.d/root.conf
fi
"""


def setup(args):
    """
    Create a user inside the rootfs that mirrors the CI user, unless the
    runner runs as root.
    """
    if args.uid == "0":
        return
    sal.helpers.github.group(f"Set up user {args.user}")
    sal.chroot.root.run_script(args, setup_script(args.user, args.uid))
