"""Top-level loop: for every platform x configuration cell run the enabled phases, then pack.

Cells run one at a time. The first failing command raises and ends the run;
build directories and staging are left as they are for inspection.
"""

from __future__ import annotations

import logging
import time

from hermes_tooling.build.host_aware import detect_host_architecture
from hermes_tooling.build.params import BuildOptions, BuildParams, RunParams, resolve
from hermes_tooling.build.phases import (
    PhaseContext,
    StageForPackaging,
    run_build,
    run_configure,
    run_jstest,
    run_test,
)
from hermes_tooling.build.toolchain import Toolchain
from hermes_tooling.helpers import delete_dir, ensure_dir, format_elapsed
from hermes_tooling.release.version import remove_governance_files, stamp_version
from hermes_tooling.staging import pack
from hermes_tooling.staging.assemble import stage_fake_outputs

log = logging.getLogger(__name__)


def log_invocation(options: BuildOptions, host_arch: str) -> None:
    """Print the effective parameters, one aligned line each."""
    rows = [
        ("configure", options.configure),
        ("build", options.build),
        ("targets", ",".join(options.targets)),
        ("test", options.test),
        ("jstest", options.jstest),
        ("pack", options.pack),
        ("clean-all", options.clean_all),
        ("clean-build", options.clean_build),
        ("clean-tools", options.clean_tools),
        ("clean-pkg", options.clean_pkg),
        ("msvc", options.msvc),
        ("uwp", options.uwp),
        ("platform", ",".join(options.platforms)),
        ("configuration", ",".join(options.configurations)),
        ("host architecture", host_arch),
        ("output-path", options.output_path),
        ("semantic-version", options.semantic_version),
        ("file-version", options.file_version),
        ("windows-sdk-version", options.windows_sdk_version),
        ("fake-build", options.fake_build),
    ]
    print()
    print("hermes-tooling build is invoked with parameters:")
    for name, value in rows:
        print(f"{name:>21}: {value}")
    print()


def log_build_params(params: BuildParams) -> None:
    print(
        f"buildParams: platform={params.platform} configuration={params.configuration}"
        f" uwp={params.is_uwp} host={params.host_arch} msvc={params.use_msvc}"
        f" cross={params.is_cross} buildPath={params.build_path}"
        f" targets={' '.join(params.targets) or '<all>'} customTargets={params.has_custom_targets}"
    )


def clean_run_outputs(options: BuildOptions, run_params: RunParams) -> None:
    """Whole-run clean switches; applied before any cell."""
    if options.clean_all:
        delete_dir(run_params.output_root)
        ensure_dir(run_params.output_root)
    if options.clean_tools:
        delete_dir(run_params.tools_root)
    if options.clean_pkg:
        delete_dir(run_params.staging_root)
        delete_dir(run_params.package_root)


def run_cell(params: BuildParams, ctx: PhaseContext) -> None:
    """All enabled phases for one cell, in order."""
    options = ctx.options
    if options.fake_build:
        stage_fake_outputs(params, ctx.run_params)
        return
    if options.clean_build:
        delete_dir(params.build_path)

    hook = StageForPackaging(ctx.run_params)
    if options.configure:
        run_configure(params, ctx)
    if options.build:
        run_build(params, ctx, hook)
    if options.test:
        run_test(params, ctx, hook)
    if options.jstest:
        run_jstest(params, ctx)


def run(
    options: BuildOptions,
    toolchain: Toolchain | None = None,
    host_arch: str | None = None,
) -> int:
    """Run the whole matrix. Returns 0; failures raise BuildToolingError subclasses."""
    start = time.monotonic()
    host = host_arch or detect_host_architecture()

    ensure_dir(options.output_path)
    run_params = RunParams.from_output(options.source_root, options.output_path)

    log_invocation(options, host)

    remove_governance_files(run_params.source_root, options.file_version)
    stamp_version(run_params.source_root, options.semantic_version, options.file_version)

    clean_run_outputs(options, run_params)

    if toolchain is None and options.needs_toolchain:
        toolchain = Toolchain.discover(options.windows_sdk_version)
        log.debug("Using vcvarsall at %s", toolchain.vcvarsall)
    ctx = PhaseContext(toolchain=toolchain, run_params=run_params, options=options)

    for platform in options.platforms:
        for configuration in options.configurations:
            params = resolve(platform, configuration, run_params, options, host)
            log_build_params(params)
            run_cell(params, ctx)

    if options.pack:
        pack.run(run_params, options.semantic_version, options.layout)

    print(f"Build took {format_elapsed(time.monotonic() - start)} to run")
    print()
    return 0
