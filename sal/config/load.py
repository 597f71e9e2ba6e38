# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import sal.config


def input_env_name(key):
    """
    Name of the environment variable holding an action input.

    :param key: input name as in sal.config.input_keys, e.g. "shell_name"
    :returns: e.g. "INPUT_SHELL_NAME"
    """
    return "INPUT_" + key.upper().replace("-", "_")


def load(environ=None):
    """
    Read the action inputs (INPUT_* variables) and the values describing the
    runner (RUNNER_TEMP, SUDO_USER etc.) from the environment.

    Empty values count as not set, GitHub passes optional inputs that were not
    specified as empty strings.

    :param environ: dict to read from instead of os.environ (for testcases)
    :returns: dict of keys from sal.config.defaults that are set in the
              environment, e.g. {"arch": "aarch64", "runner_temp": "/tmp"}
    """
    if environ is None:
        environ = os.environ

    ret = {}
    for key in sal.config.input_keys:
        value = environ.get(input_env_name(key), "").strip()
        if value:
            ret[key] = value

    for key, names in sal.config.runner_env.items():
        for name in names:
            value = environ.get(name, "").strip()
            if value:
                ret[key] = value
                break

    for key, value in ret.items():
        logging.debug(f"environment: {key}={value}")
    return ret
