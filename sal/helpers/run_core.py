# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import shlex
import subprocess
import sys

import sal.helpers.logging

""" For a detailed description of all output modes, read the description of
    core() at the bottom. All other functions in this file get (indirectly)
    called by core(). """


def flat_cmd(cmd, working_dir=None, env={}):
    """
    Convert a shell command passed as list into a flat shell string with
    proper escaping.

    :param cmd: command as list, e.g. ["echo", "string with spaces"]
    :param working_dir: when set, prepend "cd ...;" to execute the command
                        in the given working directory
    :param env: dict of environment variables to be passed to the command,
                e.g. {"JOBS": "5"}
    :returns: the flat string, e.g.
              echo 'string with spaces'
              cd /home/runner;echo 'string with spaces'
    """
    # Merge env and cmd into escaped list
    escaped = []
    for key, value in env.items():
        escaped.append(key + "=" + shlex.quote(value))
    for i in range(len(cmd)):
        escaped.append(shlex.quote(cmd[i]))

    # Prepend working dir
    ret = " ".join(escaped)
    if working_dir:
        ret = "cd " + shlex.quote(working_dir) + ";" + ret

    return ret


def sanity_checks(output="log", output_return=False, check=None):
    """
    Raise an exception if the parameters passed to core() don't make sense
    (all parameters are described in core() below).
    """
    vals = ["log", "stdout", "interactive"]
    if output not in vals:
        raise RuntimeError("Invalid output value: " + str(output))

    if output_return and output == "interactive":
        raise RuntimeError("Can't use output_return with output: " + output)


def foreground_pipe(args, cmd, working_dir=None, output_to_stdout=False,
                    output_return=False):
    """
    Run a subprocess in foreground with redirected output, and write the
    output line by line to the log file (and optionally to stdout).

    :returns: (code, output)
              * code: return code of the program
              * output: ""
              * output: full program output string (output_return is True)
    """
    process = subprocess.Popen(cmd, cwd=working_dir, stdin=subprocess.DEVNULL,
                               stdout=subprocess.PIPE,
                               stderr=subprocess.STDOUT)

    output_buffer = []
    for line in iter(process.stdout.readline, b""):
        text = line.decode("utf-8", errors="replace")
        if output_to_stdout:
            sys.stdout.write(text)
            sys.stdout.flush()
        elif sal.helpers.logging.logfd:
            sal.helpers.logging.logfd.write(text)
            sal.helpers.logging.logfd.flush()
        if output_return:
            output_buffer.append(text)

    process.stdout.close()
    return (process.wait(), "".join(output_buffer))


def foreground_tui(cmd, working_dir=None):
    """
    Run a subprocess in foreground without redirecting any of its output.

    This is the only way interactive programs started with 'setup-alpine run'
    (shells, editors) work properly.
    """

    logging.debug("*** output passed to the terminal (not logged) ***")
    process = subprocess.Popen(cmd, cwd=working_dir)
    return process.wait()


def check_return_code(args, code, log_message):
    """
    Check the return code of a command.

    :param code: exit code to check
    :param log_message: simplified and more readable form of the command, e.g.
                        "(alpine) % echo test" instead of the full command
                        with the proot call
    :raises RuntimeError: when the code indicates that the command failed
    """

    if code:
        logging.debug("^" * 70)
        if not args.details_to_stdout:
            logging.info("NOTE: The failed command's output is above the ^^^"
                         " line in the log file: " + args.log)
        raise RuntimeError(f"Command failed (exit code {str(code)}): " +
                           log_message)


def core(args, log_message, cmd, working_dir=None, output="log",
         output_return=False, check=None):
    """
    Run a command and create a log entry.

    This is a low level function not meant to be used directly. Use one of the
    following instead: sal.helpers.run.user(), sal.helpers.run.root(),
    sal.chroot.root.root()

    :param log_message: simplified and more readable form of the command, e.g.
                        "(alpine) % echo test" instead of the full command
                        with the proot call
    :param cmd: command in list form
    :param working_dir: path in host system where the command should run
    :param output: where to write the output (stdout and stderr) of the
                   process. We almost always write to the log file, which can
                   be read with "tail -f" in a second terminal while the
                   command is running. The other modes are:

                   output        | output_return | log file | stdout
                   -------------------------------------------------
                   "log"         | supported     | x        |
                   "stdout"      | supported     |          | x
                   "interactive" |               |          | x (tty)

                   "stdout" shows the output in the job log, without the
                   process being able to read from the terminal.
                   "interactive" passes the terminal to the process (used for
                   'setup-alpine run').
    :param output_return: in addition to writing the program's output to the
                          destinations above in real time, write to a buffer
                          and return it as string when the command has
                          finished.
    :param check: an exception will be raised when the command's return code
                  is not 0. Set this to False to disable the check.
    :returns: * program's return code (default)
              * full program output (output_return=True)
    """
    sanity_checks(output, output_return, check)

    logging.debug(log_message)
    logging.verbose("run: " + str(cmd))

    if output == "interactive":
        code = foreground_tui(cmd, working_dir)
        output_after_run = ""
    else:
        output_to_stdout = output == "stdout"
        code, output_after_run = foreground_pipe(args, cmd, working_dir,
                                                 output_to_stdout,
                                                 output_return)

    if check is not False:
        check_return_code(args, code, log_message)

    return output_after_run if output_return else code
