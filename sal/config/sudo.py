# Copyright 2023 Anjandev Momi
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import shutil
from functools import lru_cache
from typing import Optional


@lru_cache()
def which_sudo() -> Optional[str]:
    """Returns a command required to run commands as root, if any.

    The action normally runs with "sudo -E", in that case nothing is needed.
    Otherwise find whether sudo or doas is installed. Allows the user to
    override the preferred sudo with the SAL_SUDO env variable.
    """

    if os.getuid() == 0:
        return None

    user_set_sudo = os.getenv("SAL_SUDO")
    if user_set_sudo is not None:
        if shutil.which(user_set_sudo) is None:
            raise RuntimeError("SAL_SUDO environmental variable is set to"
                               f" {user_set_sudo} but setup-alpine cannot"
                               " find this command on your system.")
        return user_set_sudo

    for sudo in ["sudo", "doas"]:
        if shutil.which(sudo) is not None:
            return sudo

    raise RuntimeError("Can't find sudo or doas, which is required to set up"
                       " the Alpine rootfs without running as root. Install"
                       " sudo, doas, or specify your own sudo with the"
                       " SAL_SUDO environmental variable.")
