# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import gzip
import io
import os
import sys
import tarfile

# Add topdir to import path
topdir = os.path.realpath(os.path.join(os.path.dirname(__file__) + "/../.."))
sys.path.insert(0, topdir)

# Environment variables that would leak the runner's configuration into the
# testsuite (when it runs in GitHub Actions itself)
runner_env = ["GITHUB_OUTPUT", "GITHUB_PATH", "GITHUB_WORKSPACE",
              "RUNNER_TEMP", "RUNNER_WORKSPACE", "SUDO_UID", "SUDO_USER"]


def clean_env(monkeypatch):
    """ Remove all INPUT_* and runner variables from the environment. """
    for key in list(os.environ.keys()):
        if key.startswith("INPUT_") or key in runner_env:
            monkeypatch.delenv(key, raising=False)


def args_for(monkeypatch, tmpdir, *argv):
    """ Parse arguments for a testcase, with all paths inside tmpdir and
        commands that would run as root running as the current user. """
    import sal.config
    import sal.parse
    clean_env(monkeypatch)
    monkeypatch.setattr(sal.config, "which_sudo", lambda: None)
    tmpdir = str(tmpdir)
    sys.argv = ["setup_alpine.py",
                "--rootfs-base", tmpdir + "/rootfs",
                "--runner-temp", tmpdir,
                "--workspace", tmpdir + "/workspace",
                "--keys-dir", tmpdir + "/keys"] + list(argv)
    os.makedirs(tmpdir + "/workspace", exist_ok=True)
    return sal.parse.arguments()


def tar_segment(files, links=None, end=False):
    """ Uncompressed tar data with the given files. Without end, the end of
        archive marker is cut off, like in the first segments of .apk
        files. """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w") as tar:
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(content))
        for name, target in (links or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
        offset = tar.offset
    return buf.getvalue() if end else buf.getvalue()[:offset]


def create_apk(path, files, links=None):
    """ Write a package in the .apk format: gzip streams of the signature,
        control and data tar segments, concatenated into one file. """
    segments = [tar_segment({".SIGN.RSA.test.rsa.pub": b"signature"}),
                tar_segment({".PKGINFO": b"pkgname = test\n"}),
                tar_segment(files, links, end=True)]
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as handle:
        for segment in segments:
            handle.write(gzip.compress(segment))
    return path


def fake_executable(path, script):
    """ Write a shell script and make it executable. """
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as handle:
        handle.write("#!/bin/sh\n" + script)
    os.chmod(path, 0o755)
    return path
