# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import pytest

import sal_test  # noqa
import sal.chroot
import sal.chroot.apk_static
import sal.chroot.init
import sal.config
import sal.helpers.logging


@pytest.fixture
def args(request, monkeypatch, tmpdir):
    request.addfinalizer(sal.helpers.logging.close)
    return sal_test.args_for(monkeypatch, tmpdir, "setup")


def test_rootfs_path(args, tmpdir):
    func = sal.chroot.rootfs_path
    assert func(args) == f"{tmpdir}/rootfs/alpine-latest-x86_64"

    args.branch = "v3.19"
    args.arch = "aarch64"
    assert func(args) == f"{tmpdir}/rootfs/alpine-v3.19-aarch64"

    args.branch = "edge"
    assert func(args) == f"{tmpdir}/rootfs/alpine-edge-aarch64"


def test_prepare_dir(args, tmpdir):
    path = sal.chroot.prepare_dir(args)
    assert path == f"{tmpdir}/rootfs/alpine-latest-x86_64"
    assert args.rootfs == path
    assert os.path.isdir(path)

    # Running again must not reuse the existing rootfs
    path_second = sal.chroot.prepare_dir(args)
    assert path_second != path
    assert os.path.basename(path_second).startswith("alpine-latest-x86_64-")
    assert os.path.dirname(path_second) == f"{tmpdir}/rootfs"
    assert os.stat(path_second).st_mode & 0o777 == 0o755


def test_repositories(args):
    args.mirror_url = "http://mirror.test/alpine"
    args.branch = "v3.19"
    assert sal.chroot.init.repositories(args) == [
        "http://mirror.test/alpine/v3.19/main",
        "http://mirror.test/alpine/v3.19/community"]

    args.extra_repositories = "http://a.test/repo\n http://b.test/repo"
    assert sal.chroot.init.repositories(args)[2:] == ["http://a.test/repo",
                                                      "http://b.test/repo"]


def test_write_repositories(args, tmpdir):
    args.rootfs = str(tmpdir) + "/rootfs/test"
    args.branch = "edge"
    sal.chroot.init.write_repositories(args)

    with open(args.rootfs + "/etc/apk/repositories") as handle:
        assert handle.read() == (f"{args.mirror_url}/edge/main\n"
                                 f"{args.mirror_url}/edge/community\n")


def test_release_package(args):
    func = sal.chroot.init.release_package
    for branch in ["edge", "latest-stable", "v3.17", "v3.19", "v4.0"]:
        args.branch = branch
        assert func(args) == "alpine-release"

    for branch in ["v3.9", "v3.16"]:
        args.branch = branch
        assert func(args) == ""


def test_init_keys(args, tmpdir):
    args.rootfs = str(tmpdir) + "/rootfs/test"

    # No keys
    os.makedirs(args.keys_dir)
    with pytest.raises(RuntimeError) as e:
        sal.chroot.init.init_keys(args)
    assert str(e.value).startswith(f"No *.pub keys found in {args.keys_dir}")

    # Keys and extra keys
    for path in [f"{args.keys_dir}/alpine-devel.rsa.pub",
                 f"{args.workspace}/extra/my.rsa.pub"]:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as handle:
            handle.write("key")
    args.extra_keys = "extra/my.rsa.pub"
    sal.chroot.init.init_keys(args)

    keys = args.rootfs + "/etc/apk/keys"
    assert sorted(os.listdir(keys)) == ["alpine-devel.rsa.pub", "my.rsa.pub"]
    assert os.stat(keys + "/my.rsa.pub").st_mode & 0o777 == 0o644


def test_copy_resolv_conf(args, tmpdir):
    args.rootfs = str(tmpdir) + "/rootfs/test"
    host = str(tmpdir) + "/resolv.conf"
    with open(host, "w") as handle:
        handle.write("nameserver 127.0.0.53\n")

    sal.chroot.init.copy_resolv_conf(args, host)
    with open(args.rootfs + "/etc/resolv.conf") as handle:
        assert handle.read() == "nameserver 127.0.0.53\n"

    # Host without resolv.conf
    sal.chroot.init.copy_resolv_conf(args, host + ".missing")
    with open(args.rootfs + "/etc/resolv.conf") as handle:
        assert handle.read() == ""


def test_init(args, monkeypatch):
    """ Check the apk call, without running apk. """
    calls = []
    monkeypatch.setattr(sal.chroot.init, "init_keys", lambda args: None)
    monkeypatch.setattr(sal.chroot.init, "copy_resolv_conf",
                        lambda args: None)
    monkeypatch.setattr(sal.chroot.init, "write_repositories",
                        lambda args: None)
    monkeypatch.setattr(sal.chroot.apk_static, "run",
                        lambda args, parameters, output="log":
                        calls.append(parameters))
    monkeypatch.setattr(sal.chroot.init, "unpack_release_files",
                        lambda args: calls.append("unpack"))
    args.rootfs = "/rootfs"

    sal.chroot.init.init(args)
    assert calls == [["add", "--root", "/rootfs", "--initdb",
                      "--update-cache", "--arch", "x86_64"] +
                     sal.config.base_packages + ["alpine-release"]]

    calls.clear()
    args.branch = "v3.16"
    sal.chroot.init.init(args)
    assert calls[0][-1] == sal.config.base_packages[-1]
    assert calls[1] == "unpack"


def test_unpack_release_files(args, tmpdir):
    """ Only etc/ of the package fetched with the (fake) static apk gets
        unpacked into the rootfs. """
    tmpdir = str(tmpdir)
    package = sal_test.create_apk(f"{tmpdir}/mirror/alpine-base.apk", {
        "etc/os-release": b"NAME=\"Alpine Linux\"\n",
        "usr/share/doc/alpine-base/README": b"not extracted\n"})
    sal_test.fake_executable(sal.chroot.apk_static.path(args),
                             f"echo \"$@\" > {tmpdir}/apk-args\n"
                             f"cat {package}\n")
    args.rootfs = f"{tmpdir}/rootfs/test"
    os.makedirs(args.rootfs)

    sal.chroot.init.unpack_release_files(args)

    with open(f"{tmpdir}/apk-args") as handle:
        assert handle.read() == (f"fetch --root {args.rootfs} --no-progress"
                                 " --stdout alpine-base\n")
    with open(f"{args.rootfs}/etc/os-release") as handle:
        assert handle.read() == "NAME=\"Alpine Linux\"\n"
    assert sorted(os.listdir(args.rootfs)) == ["etc"]
