# -*- coding: utf-8 -*-
# femexec/main.py

"""
Command-line driver:
  static   Run a command with one filename argument through the static state machine
           (default: the platform directory listing, a quick environment check).
  dynamic  Run an interactive solver script and feed it "Execute Step <n>" commands.
  config   Load a configuration file and report substructures and missing fields.
"""

import argparse
import logging
import os
import sys

from femexec.api import post_static, run_dynamic_steps
from femexec.build import load_config, missing_fields
from femexec.build.schema import FemProgram, FemProgramConfig
from femexec.runner import ProcessExecution, StaticExecutor

log = logging.getLogger("femexec")


def _default_static_command():
    if sys.platform == "win32":
        return "cmd", "/c"
    return "ls", "-l"


def cmd_static(args) -> int:
    command, filename = args.command, args.filename
    if command is None:
        command, filename = _default_static_command()
    fem = StaticExecutor(command, filename or "", workdir=args.workdir,
                         wait_ms=args.wait_ms, process_output_files=args.parse_outputs)
    if fem.start_cmd() is None:
        log.error("Unable to start %s", command)
        return 1
    if not fem.wait(timeout_s=args.timeout):
        log.error("%s did not finish (state %s)", command, fem.current.value)
        fem.abort()
        return 1
    print('Output: "{}"'.format(fem.pm.output))
    if args.parse_outputs:
        log.info("Displacements %s, forces %s",
                 getattr(fem.displacements, "shape", None), getattr(fem.forces, "shape", None))
        if args.plots:
            for path in post_static(fem):
                log.info("Wrote %s", path)
    return 0


def cmd_dynamic(args) -> int:
    program = FemProgramConfig(FemProgram.OPENSEES, args.executable)
    label = args.script if args.script else None
    execution = ProcessExecution(program, args.workdir, wait_ms=args.wait_ms, dynamic=True, label=label)
    if not execution.start():
        return 1
    try:
        steps = ["Execute Step {}".format(s) for s in range(1, args.steps + 1)]
        responses = run_dynamic_steps(execution, steps, polls=args.polls, poll_s=args.poll_s)
        for step, rsp in zip(steps, responses):
            print("{} -> {}".format(step, rsp))
        execution.send_exit()
        ok = len(responses) == len(steps) and all(r is not None for r in responses)
    finally:
        execution.abort()
    if execution.statuses.process_errored:
        log.warning("Solver reported errors on stderr")
    return 0 if ok else 1


def cmd_config(args) -> int:
    cfg = load_config(args.path)
    if cfg is None:
        return 1
    print("work.dir: {}".format(cfg.work_dir))
    for ptype, prog in sorted(cfg.fem_program_parameters.items(), key=lambda kv: kv[0].name):
        print("program {}: {} (static: {})".format(ptype.name, prog.executable_path, prog.static_script_path))
    status = 0
    for name in sorted(cfg.substruct_cfgs):
        sub = cfg.substruct_cfgs[name]
        gaps = missing_fields(sub)
        print("{}: nodes={} program={} model={}{}".format(
            name, sub.node_sequence, sub.fem_program.name if sub.fem_program else None,
            sub.model_file_name, " MISSING " + ", ".join(gaps) if gaps else ""))
        if gaps:
            status = 1
    return status


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="femexec", description="Run FEM solver substructures.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p = sub.add_parser("static", help="one-shot run through the static state machine")
    p.add_argument("command", nargs="?", default=None)
    p.add_argument("filename", nargs="?", default=None)
    p.add_argument("--workdir", default=None)
    p.add_argument("--wait-ms", type=int, default=500)
    p.add_argument("--timeout", type=float, default=60.0)
    p.add_argument("--parse-outputs", action="store_true", help="parse tmp_disp.out / tmp_forc.out")
    p.add_argument("--plots", action="store_true", help="save quick-look PNGs of parsed results")
    p.set_defaults(func=cmd_static)

    p = sub.add_parser("dynamic", help="interactive step-by-step run")
    p.add_argument("executable")
    p.add_argument("script", nargs="?", default=None)
    p.add_argument("--workdir", default=os.curdir)
    p.add_argument("--steps", type=int, default=10)
    p.add_argument("--polls", type=int, default=6)
    p.add_argument("--poll-s", type=float, default=1.0)
    p.add_argument("--wait-ms", type=int, default=200)
    p.set_defaults(func=cmd_dynamic)

    p = sub.add_parser("config", help="load a configuration file and report gaps")
    p.add_argument("path")
    p.set_defaults(func=cmd_config)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s:%(name)s:%(message)s")
    if not getattr(args, "func", None):
        parser.print_help()
        return 1
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
