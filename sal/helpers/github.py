# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import sys

""" GitHub Actions workflow commands and environment files. Reference:
    https://docs.github.com/en/actions/using-workflows/workflow-commands-for-github-actions """

# Title of the currently open log group (None if no group is open)
current_group = None


def escape_data(value):
    return (str(value).replace("%", "%25")
            .replace("\r", "%0D")
            .replace("\n", "%0A"))


def escape_property(value):
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def command(name, message="", **properties):
    """
    Write a workflow command to stdout, e.g. "::error title=x::message".
    """
    line = "::" + name
    if properties:
        line += " " + ",".join(f"{key}={escape_property(value)}"
                               for key, value in properties.items())
    line += "::" + escape_data(message)

    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def group(title):
    """
    Start an expandable group in the job log. An already open group gets
    closed first.
    """
    global current_group
    if current_group:
        endgroup()
    command("group", title)
    current_group = title
    logging.debug(f"*** {title} ***")


def endgroup():
    """
    Close the currently open group (does nothing if there is none).
    """
    global current_group
    if not current_group:
        return
    command("endgroup")
    current_group = None


def error(title, message):
    command("error", message, title=f"setup-alpine: {title}")


def info(message):
    logging.info("▷ " + message)


def append_env_file(path, line):
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(line + "\n")


def set_output(args, name, value):
    """
    Set an output parameter of the action, so following steps can read it
    with ${{ steps.<id>.outputs.<name> }}.
    """
    if not args.github_output:
        logging.info(f"NOTE: GITHUB_OUTPUT is not set, output: {name}={value}")
        return
    logging.debug(f"output: {name}={value}")
    append_env_file(args.github_output, f"{name}={value}")


def add_path(args, path):
    """
    Prepend a directory to PATH for all following steps of the job.
    """
    if not args.github_path:
        logging.info(f"NOTE: GITHUB_PATH is not set, add to PATH: {path}")
        return
    logging.debug(f"PATH: {path}")
    append_env_file(args.github_path, path)
