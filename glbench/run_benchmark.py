# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Buffer-upload and draw-call latency benchmark CLI.

Usage:
    # Classic run: 1-100 MB uploads, 1000 draws per trial, 5 warmup, 100 runs
    glbench

    # Quick smoke test
    glbench --preset quick

    # Custom sweep, continue past failures, save results and a plot
    glbench --sizes 1 8 64 --draw-calls 100 1000 --continue-on-failure \
        --output results/ --csv results/summary.csv --plot upload.png
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .config import PRESETS, HarnessConfig, load_config
from .core.errors import ContextUnavailableError
from .core.observers import LoggingObserver
from .core.results import ResultsStore
from .gl.context import open_context
from .report import BAR, SEP, format_sweep
from .suite import run_suite


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Measure GPU buffer-upload and draw-call latency."
    )
    parser.add_argument("--config", help="YAML configuration file.")
    parser.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Warmup/measurement preset: "
        + "; ".join(f"{p.name}: {p.description}" for p in PRESETS.values()),
    )
    parser.add_argument("--warmup", type=int, help="Warmup trials per configuration.")
    parser.add_argument("--runs", type=int, help="Measured trials per configuration.")
    parser.add_argument(
        "--sizes", type=float, nargs="+", metavar="MB", help="Buffer sizes to sweep, in MB."
    )
    parser.add_argument(
        "--draw-calls", type=int, nargs="+", metavar="N", help="Draw calls per trial."
    )
    parser.add_argument(
        "--await-uploads",
        action="store_true",
        help="Wait for the GPU to go idle before stopping each upload timer.",
    )
    parser.add_argument(
        "--continue-on-failure",
        action="store_true",
        help="Keep sweeping after a configuration fails.",
    )
    parser.add_argument("--output", help="Directory for per-configuration JSON results.")
    parser.add_argument("--csv", help="Export all stored results to this CSV file.")
    parser.add_argument("--plot", help="Save the buffer-upload chart to this file.")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="-v for progress, -vv for every trial."
    )
    return parser


def resolve_config(args: argparse.Namespace) -> HarnessConfig:
    """Apply command-line overrides on top of the file or default config."""
    config = load_config(args.config)
    if args.preset:
        config = config.with_preset(args.preset)

    fairness = config.fairness
    if args.warmup is not None:
        fairness = replace(fairness, warmup_runs=args.warmup)
    if args.runs is not None:
        fairness = replace(fairness, measurement_runs=args.runs)
    if args.continue_on_failure:
        fairness = replace(fairness, continue_on_failure=True)

    upload = config.buffer_upload
    if args.sizes:
        upload = replace(upload, sizes_mb=list(args.sizes))
    if args.await_uploads:
        upload = replace(upload, await_completion=True)

    draws = config.draw_calls
    if args.draw_calls:
        draws = replace(draws, draw_calls_per_trial=list(args.draw_calls))

    output = config.output
    if args.output:
        output = replace(output, output_dir=args.output)
    if args.csv:
        output = replace(output, csv=args.csv)
    if args.plot:
        output = replace(output, plot=args.plot)

    return replace(
        config, fairness=fairness, buffer_upload=upload, draw_calls=draws, output=output
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    try:
        context = open_context(config.context.width, config.context.height)
    except ContextUnavailableError as exc:
        print(f"Graphics context unavailable: {exc}", file=sys.stderr)
        return 2

    with context:
        hardware = context.renderer_info()
        print(BAR)
        print(f"Renderer: {hardware['renderer']} ({hardware['vendor']})")
        print(f"OpenGL:   {hardware['version']}")
        print(
            f"Trials:   {config.fairness.measurement_runs} runs with "
            f"{config.fairness.warmup_runs} warmup per configuration"
        )
        results = run_suite(context, config, observer=LoggingObserver())

    for result in results.values():
        print()
        print(format_sweep(result))

    output = config.output
    if output.output_dir:
        print()
        print(SEP)
        print("SAVING RESULTS")
        print(SEP)
        store = ResultsStore(output.output_dir)
        metadata = {
            "warmup_runs": config.fairness.warmup_runs,
            "measurement_runs": config.fairness.measurement_runs,
            "await_uploads": config.buffer_upload.await_completion,
        }
        for result in results.values():
            for path in store.save_sweep(result, hardware=hardware, metadata=metadata):
                print(f"  Saved: {path}")
        if output.csv:
            try:
                print(f"  Saved: {store.to_csv(output.csv)}")
            except ValueError as exc:
                print(f"  CSV export skipped: {exc}")
    elif output.csv:
        print("  CSV export needs --output to collect results into", file=sys.stderr)

    upload_result = results["buffer_upload"]
    if output.plot and upload_result.results:
        from .visualization import plot_upload_sweep

        fig = plot_upload_sweep(upload_result)
        fig.savefig(output.plot, dpi=150, bbox_inches="tight")
        print(f"  Saved: {output.plot}")

    return 0 if all(result.complete for result in results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
