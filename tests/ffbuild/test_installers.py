import pytest

from ffbuild.build_types.configuration import PackageRequirement, PackageStatus, Platform
from ffbuild.build_types.exceptions import PackageInstallError
from ffbuild.installers import (AptInstaller, BrewInstaller, PacmanInstaller, base_installer,
                                get_installer)


@pytest.fixture(autouse=True)
def _not_root(monkeypatch):
    monkeypatch.setattr(base_installer, "_is_root", lambda: False)
    monkeypatch.setattr(base_installer.BaseInstaller, "is_available", lambda self: True)


def _reqs(platform, *packages):
    return [PackageRequirement(platform=platform, package=p) for p in packages]


def _installer(cls, platform, config, runner, logger, batch=False):
    return cls(platform=platform, config=config.get_platform_config(platform.value),
               runner=runner, logger=logger, batch=batch)


def test_get_installer_maps_package_managers(config, make_runner, logger):
    runner = make_runner()
    assert isinstance(get_installer(Platform.MACOS, config, runner, logger), BrewInstaller)
    assert isinstance(get_installer(Platform.LINUX, config, runner, logger), AptInstaller)
    assert isinstance(get_installer(Platform.WINDOWS, config, runner, logger), PacmanInstaller)


def test_already_installed_packages_are_not_reinstalled(config, make_runner, make_host, logger):
    host = make_host(installed={"nasm", "libx264-dev"})
    runner = make_runner(host.respond)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger)

    report = installer.ensure(_reqs(Platform.LINUX, "nasm", "libx264-dev"))

    assert report.invocations == 0
    assert report.results["nasm"].status == PackageStatus.ALREADY_INSTALLED
    assert runner.ran("apt-get") == []


def test_missing_packages_are_installed_one_by_one_with_sudo(config, make_runner, make_host, logger):
    host = make_host(installed={"nasm"})
    runner = make_runner(host.respond)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger)

    report = installer.ensure(_reqs(Platform.LINUX, "nasm", "libx264-dev", "libx265-dev"))

    assert runner.ran("apt-get", "update") == [["sudo", "apt-get", "update"]]
    assert runner.ran("apt-get", "install") == [
        ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y",
         "libx264-dev"],
        ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y",
         "libx265-dev"],
    ]
    assert report.invocations == 3
    assert report.results["libx264-dev"].status == PackageStatus.INSTALLED
    assert sorted(report.satisfied) == ["libx264-dev", "libx265-dev", "nasm"]


def test_second_run_is_idempotent(config, make_runner, make_host, logger):
    host = make_host(installed={"nasm"})
    requirements = _reqs(Platform.LINUX, "nasm", "libvpx-dev", "libopus-dev")

    first = _installer(AptInstaller, Platform.LINUX, config, make_runner(host.respond), logger)
    first_report = first.ensure(requirements)

    runner = make_runner(host.respond)
    second_report = _installer(AptInstaller, Platform.LINUX, config, runner, logger).ensure(requirements)

    assert second_report.invocations == 0
    assert runner.ran("apt-get") == []
    assert sorted(second_report.satisfied) == sorted(first_report.satisfied)
    assert second_report.manual == first_report.manual == []

    third_report = _installer(AptInstaller, Platform.LINUX, config,
                              make_runner(host.respond), logger).ensure(requirements)
    assert third_report == second_report


def test_duplicate_requirements_are_processed_once(config, make_runner, make_host, logger):
    host = make_host()
    runner = make_runner(host.respond)
    installer = _installer(PacmanInstaller, Platform.WINDOWS, config, runner, logger)

    installer.ensure(_reqs(Platform.WINDOWS, "git", "git"))

    assert runner.ran("pacman", "-S", "--noconfirm", "--needed") == [
        ["pacman", "-S", "--noconfirm", "--needed", "git"]]


def test_install_failure_is_fatal_and_names_package(config, make_runner, make_host, logger):
    host = make_host(broken={"libfdk-aac-dev"})
    runner = make_runner(host.respond)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger)

    with pytest.raises(PackageInstallError) as excinfo:
        installer.ensure(_reqs(Platform.LINUX, "libfdk-aac-dev", "libopus-dev"))

    error = excinfo.value
    assert error.packages == ["libfdk-aac-dev"]
    assert error.platform == "linux"
    assert "libfdk-aac-dev" in str(error)
    assert "Unable to locate package" in error.output
    assert error.report.results["libopus-dev"].status == PackageStatus.INSTALLED
    assert error.report.results["libfdk-aac-dev"].status == PackageStatus.FAILED


def test_manual_package_is_not_fatal(config, make_runner, make_host, logger):
    host = make_host(installed={"x264"})
    runner = make_runner(host.respond)
    installer = _installer(BrewInstaller, Platform.MACOS, config, runner, logger)
    manual = PackageRequirement(platform=Platform.MACOS, package="librtmp", manual=True,
                                instructions=("make install",))

    report = installer.ensure(_reqs(Platform.MACOS, "x264") + [manual])

    assert report.results["librtmp"].status == PackageStatus.MANUAL
    assert report.results["librtmp"].instructions == ("make install",)
    assert report.manual == ["librtmp"]
    assert report.invocations == 0
    assert runner.ran("brew", "install") == []
    assert runner.ran("pkg-config", "--exists", "librtmp")


def test_manual_package_installed_out_of_band_counts(config, make_runner, make_host, logger):
    host = make_host()
    host.manual_present.add("libzmq")
    installer = _installer(BrewInstaller, Platform.MACOS, config, make_runner(host.respond), logger)

    report = installer.ensure([PackageRequirement(platform=Platform.MACOS, package="libzmq",
                                                  manual=True)])

    assert report.is_satisfied("libzmq")


def test_brew_query_needs_version_output(config, make_runner, logger):
    runner = make_runner(lambda cmd: (0, "") if cmd[:2] == ["brew", "list"] else 0)
    installer = _installer(BrewInstaller, Platform.MACOS, config, runner, logger)

    report = installer.ensure(_reqs(Platform.MACOS, "dav1d"))

    assert runner.ran("brew", "install", "dav1d")
    assert runner.ran("brew", "update")
    assert not runner.ran("sudo")
    assert report.results["dav1d"].status == PackageStatus.INSTALLED


def test_batch_install_keeps_per_package_attribution(config, make_runner, make_host, logger):
    host = make_host(broken={"libsvtav1enc-dev"})
    runner = make_runner(host.respond)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger, batch=True)

    with pytest.raises(PackageInstallError) as excinfo:
        installer.ensure(_reqs(Platform.LINUX, "libaom-dev", "libsvtav1enc-dev"))

    assert runner.ran("apt-get", "install") == [
        ["sudo", "env", "DEBIAN_FRONTEND=noninteractive", "apt-get", "install", "-y",
         "libaom-dev", "libsvtav1enc-dev"]]
    assert excinfo.value.packages == ["libsvtav1enc-dev"]
    assert excinfo.value.report.results["libaom-dev"].status == PackageStatus.INSTALLED


def test_refresh_failure_is_fatal(config, make_runner, logger):
    runner = make_runner(lambda cmd: 1 if "update" in cmd or cmd[0] == "dpkg-query" else 0)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger)

    with pytest.raises(PackageInstallError, match="apt-get update"):
        installer.ensure(_reqs(Platform.LINUX, "nasm"))

    assert runner.ran("apt-get", "install") == []


def test_missing_brew_is_bootstrapped(config, make_runner, make_host, monkeypatch, logger):
    available = iter([False, True])
    monkeypatch.setattr(BrewInstaller, "is_available", lambda self: next(available))
    host = make_host()
    runner = make_runner(host.respond)
    installer = _installer(BrewInstaller, Platform.MACOS, config, runner, logger)

    installer.ensure(_reqs(Platform.MACOS, "nasm"))

    bootstrap = runner.calls.index(config.get_platform_config("macos")["bootstrap"]["command"])
    assert bootstrap < runner.calls.index(["brew", "update"])


def test_missing_manager_without_bootstrap_is_fatal(config, make_runner, monkeypatch, logger):
    monkeypatch.setattr(PacmanInstaller, "is_available", lambda self: False)
    runner = make_runner(lambda cmd: 1)
    installer = _installer(PacmanInstaller, Platform.WINDOWS, config, runner, logger)

    with pytest.raises(PackageInstallError, match="pacman not found"):
        installer.ensure(_reqs(Platform.WINDOWS, "git"))


def test_dry_run_counts_installs_as_satisfied(config, make_runner, make_host, logger):
    host = make_host()
    runner = make_runner(host.respond, dry_run=True)
    installer = _installer(AptInstaller, Platform.LINUX, config, runner, logger)

    report = installer.ensure(_reqs(Platform.LINUX, "libdav1d-dev"))

    assert report.is_satisfied("libdav1d-dev")
    assert host.installed == set()


def test_manual_packages_are_checked_after_toolchain_install(config, make_runner, make_host, logger):
    host = make_host()
    host.manual_present.add("librtmp")

    def respond(cmd):
        if cmd[0] == "pkg-config" and "pkg-config" not in host.installed:
            return (127, "")
        return host.respond(cmd)

    runner = make_runner(respond)
    installer = _installer(BrewInstaller, Platform.MACOS, config, runner, logger)
    manual = PackageRequirement(platform=Platform.MACOS, package="librtmp", manual=True)

    report = installer.ensure([manual] + _reqs(Platform.MACOS, "pkg-config"))

    assert report.is_satisfied("librtmp")
    assert report.manual == []
    lookup = runner.calls.index(["pkg-config", "--exists", "librtmp"])
    assert runner.calls.index(["brew", "install", "pkg-config"]) < lookup
