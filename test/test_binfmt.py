# Copyright 2023 Oliver Smith
# SPDX-License-Identifier: GPL-3.0-or-later
import os
import pytest

import sal_test  # noqa
import sal.chroot.apk_static
import sal.chroot.binfmt
import sal.config
import sal.helpers.logging
import sal.parse
import sal.parse.arch


@pytest.fixture
def args(request, monkeypatch, tmpdir):
    request.addfinalizer(sal.helpers.logging.close)
    return sal_test.args_for(monkeypatch, tmpdir, "setup")


def test_alpine_to_qemu():
    func = sal.parse.arch.alpine_to_qemu
    assert func("x86") == "i386"
    assert func("i686") == "i386"
    assert func("armhf") == "arm"
    assert func("armv7") == "arm"
    assert func("aarch64") == "aarch64"
    assert func("ppc64le") == "ppc64le"
    assert func("riscv64") == "riscv64"
    assert func("s390x") == "s390x"
    assert func("x86_64") == "x86_64"


def test_cpu_emulation_required(monkeypatch):
    monkeypatch.setattr("platform.machine", lambda: "x86_64")
    func = sal.parse.arch.cpu_emulation_required
    assert func("x86_64") is False
    assert func("aarch64") is True
    assert func("x86") is True


def test_binfmt_info(args):
    for arch in sal.config.architectures:
        info = sal.parse.binfmt_info(sal.parse.arch.alpine_to_qemu(arch))
        assert info["magic"].startswith("\\x7fELF")
        assert info["mask"].startswith("\\xff")


def test_binfmt_info_missing(args, tmpdir):
    path = str(tmpdir) + "/binfmt.txt"
    with open(path, "w") as handle:
        handle.write("# comment\n")
        handle.write("aarch64_magic='\\x7fELF'\n")

    with pytest.raises(RuntimeError) as e:
        sal.parse.binfmt_info("aarch64", path)
    assert "Could not find key aarch64_mask" in str(e.value)


def test_import_file(args):
    info = sal.parse.binfmt_info("aarch64")
    lines = sal.chroot.binfmt.import_file(
        "aarch64", "/usr/local/bin/qemu-aarch64").splitlines()

    assert lines[0] == "package setup-alpine"
    assert lines[1] == "interpreter /usr/local/bin/qemu-aarch64"
    assert lines[2] == f"magic {info['magic']}"
    assert lines[3] == "offset 0"
    assert lines[4] == f"mask {info['mask']}"
    assert "credentials yes" in lines
    assert "fix_binary yes" in lines


def test_extract_binary(args, tmpdir):
    apk = str(tmpdir) + "/qemu-aarch64-8.1.3-r0.apk"
    sal_test.create_apk(apk, {".PKGINFO": b"pkgname = qemu-aarch64\n",
                     "usr/bin/qemu-aarch64": b"\x7fELF binary"})

    path = sal.chroot.binfmt.extract_binary(apk, "usr/bin/qemu-aarch64")
    try:
        with open(path, "rb") as handle:
            assert handle.read() == b"\x7fELF binary"
    finally:
        os.unlink(path)

    with pytest.raises(RuntimeError) as e:
        sal.chroot.binfmt.extract_binary(apk, "usr/bin/qemu-arm")
    assert str(e.value).startswith("Could not find usr/bin/qemu-arm")


def test_init_native(args, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("must not be called")

    monkeypatch.setattr("platform.machine", lambda: "x86_64")
    monkeypatch.setattr(sal.chroot.binfmt, "install", fail)
    args.arch = "x86_64"
    sal.chroot.binfmt.init(args)


def test_init_registered(args, monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("must not be called")

    monkeypatch.setattr("platform.machine", lambda: "x86_64")
    monkeypatch.setattr(sal.chroot.binfmt, "check_update_binfmts",
                        lambda: None)
    monkeypatch.setattr(sal.chroot.binfmt, "is_registered",
                        lambda args, arch_qemu: arch_qemu == "aarch64")
    monkeypatch.setattr(sal.chroot.binfmt, "install", fail)
    args.arch = "aarch64"
    sal.chroot.binfmt.init(args)


def test_init_unregistered(args, monkeypatch, tmpdir):
    """ Fetch, install and register qemu-aarch64 with fake apk and
        update-binfmts executables. """
    tmpdir = str(tmpdir)
    package = sal_test.create_apk(f"{tmpdir}/mirror/qemu-aarch64.apk",
                                  {"usr/bin/qemu-aarch64": b"\x7fELF binary"})
    downloaded = f"{args.runner_temp}/qemu-aarch64-8.1.3-r0.apk"

    sal_test.fake_executable(sal.chroot.apk_static.path(args),
                             f"echo \"$@\" > {tmpdir}/apk-args\n"
                             f"cp {package} {downloaded}\n")
    sal_test.fake_executable(f"{tmpdir}/bin/update-binfmts",
                             f"echo \"$@\" >> {tmpdir}/update-binfmts-args\n"
                             "[ \"$1\" != \"--display\" ]\n")
    monkeypatch.setenv("PATH", f"{tmpdir}/bin:" + os.environ["PATH"])
    monkeypatch.setattr("platform.machine", lambda: "x86_64")
    monkeypatch.setattr(sal.config, "qemu_install_dir", f"{tmpdir}/local/bin")
    args.arch = "aarch64"

    sal.chroot.binfmt.init(args)

    with open(f"{tmpdir}/apk-args") as handle:
        assert handle.read() == (
            f"fetch --keys-dir {args.keys_dir} --repository"
            f" {args.mirror_url}/latest-stable/community --no-cache"
            f" --output {args.runner_temp} qemu-aarch64 --no-progress\n")

    # Installed to qemu_install_dir, downloaded package removed
    qemu = f"{tmpdir}/local/bin/qemu-aarch64"
    with open(qemu, "rb") as handle:
        assert handle.read() == b"\x7fELF binary"
    assert os.stat(qemu).st_mode & 0o777 == 0o755
    assert not os.path.exists(downloaded)

    import_path = f"{args.runner_temp}/binfmts/qemu-aarch64"
    with open(f"{tmpdir}/update-binfmts-args") as handle:
        assert handle.read().splitlines() == ["--display qemu-aarch64",
                                              f"--import {import_path}"]
    with open(import_path) as handle:
        assert f"interpreter {qemu}\n" in handle.read()


def test_fetch_missing(args, tmpdir):
    sal_test.fake_executable(sal.chroot.apk_static.path(args), "true\n")
    with pytest.raises(RuntimeError) as e:
        sal.chroot.binfmt.fetch(args, "aarch64")
    assert str(e.value) == ("apk fetch did not save qemu-aarch64 in"
                            f" {args.runner_temp}")
