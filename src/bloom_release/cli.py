"""Command-line interface for multi-package bloom releases."""

import json
import sys
from pathlib import Path

import click
from rich.markup import escape

from . import log
from .constants import DEFAULT_OS_NAME, DEFAULT_WHITELIST, DEFAULT_WORKING_DIR
from .errors import BloomReleaseError
from .executor import SubprocessExecutor
from .models import RunConfig
from .rosdep import Rosdep
from .runner import ReleaseRunner

console = log.console


def _target_options(f):
    """Options shared by every command that selects packages."""
    options = [
        click.option("--ros-distro", envvar="ROS_DISTRO", default=None,
                     help="ROS distribution, e.g. humble or noetic [env: ROS_DISTRO]"),
        click.option("--debian-distro", envvar="DEBIAN_DISTRO", default=None,
                     help="Target OS release, e.g. jammy [env: DEBIAN_DISTRO]"),
        click.option("--packages-dir", envvar="PACKAGES_DIR", default=".", type=click.Path(),
                     help="Directory searched for package.xml files [env: PACKAGES_DIR]"),
        click.option("--whitelist", envvar="PACKAGE_WHITELIST", default=DEFAULT_WHITELIST,
                     help="Regex a package path must match [env: PACKAGE_WHITELIST]"),
        click.option("--blacklist", envvar="PACKAGE_BLACKLIST", default="",
                     help="Regex excluding matching package paths [env: PACKAGE_BLACKLIST]"),
        click.option("--working-dir", envvar="WORKING_DIR", default=DEFAULT_WORKING_DIR,
                     type=click.Path(), help="Root for staged copies and build output [env: WORKING_DIR]"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _make_config(ros_distro, debian_distro, **kwargs) -> RunConfig:
    missing = []
    if not ros_distro:
        missing.append("ROS_DISTRO")
    if not debian_distro:
        missing.append("DEBIAN_DISTRO")
    if missing:
        log.error("Missing required environment variables")
        log.error("Required: ROS_DISTRO, DEBIAN_DISTRO")
        log.error(f"Not set: {', '.join(missing)}")
        sys.exit(1)
    try:
        return RunConfig(ros_distro=ros_distro, debian_distro=debian_distro, **kwargs)
    except BloomReleaseError as e:
        log.error(str(e))
        sys.exit(1)


@click.group()
@click.version_option(package_name="bloom-release")
def main():
    """Build Debian packages for every ROS package in a source tree with bloom."""
    pass


@main.command()
@_target_options
@click.option("--output-dir", envvar="OUTPUT_DIR", default=None, type=click.Path(),
              help="Directory collecting .deb files (default: <working-dir>/output)")
@click.option("--os-name", default=DEFAULT_OS_NAME, help="OS name passed to bloom-generate")
@click.option("--workspace/--no-workspace", "workspace_mode", default=True,
              help="Build all packages together before packaging each one")
@click.option("--timeout", "command_timeout", type=float, default=None,
              help="Seconds before an external command is abandoned (default: no limit)")
@click.option("--no-sudo", is_flag=True, help="Run 'rosdep init' without sudo")
@click.option("--report", "report_path", type=click.Path(), default=None,
              help="Write a JSON run report to this file")
@click.option("--verbose", "-v", is_flag=True, help="Show output of every external command")
def build(
    ros_distro,
    debian_distro,
    packages_dir,
    whitelist,
    blacklist,
    working_dir,
    output_dir,
    os_name,
    workspace_mode,
    command_timeout,
    no_sudo,
    report_path,
    verbose,
):
    """Discover, build, and package ROS packages, then report the results."""
    config = _make_config(
        ros_distro,
        debian_distro,
        packages_dir=Path(packages_dir),
        whitelist=whitelist,
        blacklist=blacklist,
        working_dir=Path(working_dir),
        output_dir=Path(output_dir) if output_dir else None,
        os_name=os_name,
        workspace_mode=workspace_mode,
        command_timeout=command_timeout,
    )

    log.section("ROS Bloom Release - Multi-Package Build")
    log.info(f"ROS Distro: {config.ros_distro}")
    log.info(f"Debian Distro: {config.debian_distro}")
    log.info(f"Packages Directory: {config.packages_dir}")
    log.info(f"Whitelist Pattern: {config.whitelist}")
    log.info(f"Blacklist Pattern: {config.blacklist}")
    log.info(f"Workspace mode: {'on' if config.workspace_mode else 'off'}")

    executor = SubprocessExecutor(timeout=config.command_timeout, verbose=verbose)
    rosdep = Rosdep(executor, config.ros_distro, use_sudo=not no_sudo)
    runner = ReleaseRunner(config, executor, rosdep=rosdep)

    try:
        report = runner.run()
    except BloomReleaseError as e:
        log.error(str(e))
        if verbose:
            import traceback
            console.print(traceback.format_exc(), markup=False)
        sys.exit(1)

    if report_path:
        with open(report_path, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        log.info(f"Report saved to: {report_path}")

    sys.exit(report.exit_code)


@main.command()
@_target_options
def discover(ros_distro, debian_distro, packages_dir, whitelist, blacklist, working_dir):
    """List the packages a build would process, without building anything."""
    config = _make_config(
        ros_distro,
        debian_distro,
        packages_dir=Path(packages_dir),
        whitelist=whitelist,
        blacklist=blacklist,
        working_dir=Path(working_dir),
    )
    runner = ReleaseRunner(config, SubprocessExecutor())
    try:
        units = runner.select_units()
    except BloomReleaseError as e:
        log.error(str(e))
        sys.exit(1)

    console.print(f"\n[bold]{len(units)} package(s) selected:[/bold]")
    for unit in units:
        console.print(f"  {escape(unit.name)}  [dim]{escape(str(unit.path))}[/dim]")
