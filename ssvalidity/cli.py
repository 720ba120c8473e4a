"""
Command-line entry point.

Usage:
    ssvalidity [--config FILE.json] [--labeled 20,50,100] [--unlabeled 0,200]
               [--validities 0.2,0.4] [--replications 500] [--seed 2137] ...

Every ``StudyConfig`` field can come from the JSON file; flags given on the
command line take precedence.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .core import StudyConfig
from .errors import ConfigurationError


def _int_list(text: str) -> List[int]:
    try:
        return [int(part) for part in text.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {text!r}") from None


def _float_list(text: str) -> List[float]:
    try:
        return [float(part) for part in text.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated numbers, got {text!r}") from None


def load_config_file(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p.resolve()}")
    with p.open("r", encoding="utf-8") as f:
        options = json.load(f)
    if not isinstance(options, dict):
        raise ConfigurationError("Config file must contain a JSON object")
    return options


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssvalidity",
        description="Monte Carlo comparison of supervised and semi-supervised (score-matching) validity estimates",
    )
    parser.add_argument("--config", help="JSON file with StudyConfig fields")
    parser.add_argument("--labeled", type=_int_list, dest="labeled_sizes", help="labeled sample sizes, e.g. 20,50,100")
    parser.add_argument("--unlabeled", type=_int_list, dest="unlabeled_sizes", help="unlabeled sample sizes, e.g. 0,100,1000")
    parser.add_argument("--validities", type=_float_list, dest="population_validities", help="population validities, e.g. 0,0.4,0.8")
    parser.add_argument("--replications", type=int, help="replications per condition")
    parser.add_argument("--test-length", type=int, dest="test_length", help="number of test items")
    parser.add_argument("--criterion-reliability", type=float, dest="criterion_reliability")
    parser.add_argument("--test-reliability", type=float, dest="test_reliability")
    parser.add_argument("--nmatch", type=int, help="minimum donor-pool size")
    parser.add_argument("--seed", type=int, default=2137, help="random seed (default: 2137)")
    parser.add_argument("--random-seed", action="store_true", help="ignore --seed and use fresh entropy")
    parser.add_argument("--parallel", action="store_true", help="run replications in parallel (joblib)")
    parser.add_argument("--n-cores", type=int, dest="n_cores", help="worker processes for --parallel")
    parser.add_argument("--on-failure", choices=("raise", "skip"), default="raise", dest="on_failure")
    parser.add_argument("--max-failed", type=float, default=0.05, dest="max_failed", help="tolerated failure proportion with --on-failure skip")
    parser.add_argument("--cumulative-report", action="store_true", help="accumulate replications across conditions in the summary")
    parser.add_argument("--progress-bar", action="store_true", help="show a progress bar on stderr")
    parser.add_argument("--show-options", action="store_true", help="print each condition's options before its replications")
    parser.add_argument("--quiet", action="store_true", help="suppress per-replication lines")
    return parser


_CONFIG_FIELDS = (
    "labeled_sizes",
    "unlabeled_sizes",
    "population_validities",
    "replications",
    "test_length",
    "criterion_reliability",
    "test_reliability",
    "nmatch",
)


def config_from_args(args: argparse.Namespace) -> StudyConfig:
    options: Dict[str, Any] = load_config_file(args.config) if args.config else {}
    for name in _CONFIG_FIELDS:
        value = getattr(args, name)
        if value is not None:
            options[name] = value
    return StudyConfig.from_dict(options)


def main(argv: Optional[List[str]] = None) -> int:
    from .model import ValidityStudy
    from .progress import PrintReporter

    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        study = ValidityStudy(config_from_args(args))
        study.set_seed(None if args.random_seed else args.seed)
        study.set_verbose(0 if args.quiet else (2 if args.show_options else 1))
        study.set_failure_policy(args.on_failure, args.max_failed)
        study.set_cumulative_report(args.cumulative_report)
        if args.parallel:
            study.set_parallel(True, args.n_cores)
        study.run(progress_callback=PrintReporter() if args.progress_bar else None)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
