import argparse
import logging
import sys

from colorama import Fore, Style, init

from . import __version__
from .auth import redact
from .config import detect_format, dump_document, load_config, load_document, load_or_init, write_template
from .errors import ConfigError, MissingKeysError
from .reporting import ConsoleReporter, build_results_document, default_results_path, write_results
from .runlog import RunLog
from .runner import Runner
from .settings import get_settings

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_TESTS_FAILED = 2


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def report_config_error(e: ConfigError):
    print(f"{Fore.RED}[-] {e}{Style.RESET_ALL}")
    if isinstance(e, MissingKeysError):
        for key in e.missing:
            print(f"      {Fore.YELLOW}- {key}{Style.RESET_ALL}")


def cmd_init(args) -> int:
    try:
        path = write_template(args.path, fmt=args.format, overwrite=args.force)
    except FileExistsError as e:
        print(f"{Fore.RED}[-] {e}{Style.RESET_ALL}")
        return EXIT_CONFIG_ERROR
    except ConfigError as e:
        report_config_error(e)
        return EXIT_CONFIG_ERROR
    print(f"{Fore.GREEN}[+] Template written to {path}{Style.RESET_ALL}")
    print("    Fill in the client details and credentials, then run: clientcheck run " + path)
    return EXIT_OK


def cmd_validate(args) -> int:
    try:
        config = load_config(args.path)
    except ConfigError as e:
        report_config_error(e)
        return EXIT_CONFIG_ERROR

    print(f"{Fore.GREEN}[+] {args.path} is valid{Style.RESET_ALL}")
    print(f"    Client:   {config.client}")
    print(f"    Base URL: {config.base_url}")
    print(f"    Auth:     {redact(config.authentication)}")
    print(f"    Tests:    {', '.join(config.tests) or '(none, connectivity only)'}")
    print(f"    Records:  {len(config.test_data)}")
    if config.notes:
        print(f"    Notes:    {config.notes}")
    return EXIT_OK


def cmd_show(args) -> int:
    try:
        data = load_document(args.path)
        fmt = args.as_format or detect_format(args.path)
    except ConfigError as e:
        report_config_error(e)
        return EXIT_CONFIG_ERROR
    sys.stdout.write(dump_document(data, fmt))
    return EXIT_OK


def cmd_run(args) -> int:
    try:
        config = load_or_init(args.path)
    except ConfigError as e:
        report_config_error(e)
        return EXIT_CONFIG_ERROR

    if config is None:
        print(f"{Fore.YELLOW}[!] {args.path} did not exist. A template was written there.{Style.RESET_ALL}")
        print("    Edit it with the client's details and run again.")
        return EXIT_CONFIG_ERROR

    settings = get_settings()
    results_path = args.results or default_results_path(args.path, settings["results_dir"])
    try:
        detect_format(results_path)
    except ConfigError as e:
        report_config_error(e)
        return EXIT_CONFIG_ERROR

    try:
        run_log = RunLog(log_file=args.log_file)
    except OSError as e:
        print(f"{Fore.RED}[-] Cannot write run log {args.log_file}: {e}{Style.RESET_ALL}")
        return EXIT_CONFIG_ERROR
    if args.log_file:
        print(f"[*] Run log: {args.log_file}")

    runner = Runner(config, run_log=run_log, verbose=args.verbose)
    try:
        report = runner.run()
    finally:
        runner.client.close()

    ConsoleReporter().print_summary(report)

    run_info = run_log.close()
    write_results(build_results_document(report, run_info), results_path)
    print(f"\n[*] Results written to: {results_path}")

    return EXIT_OK if report.failed == 0 else EXIT_TESTS_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clientcheck",
        description="Run a client's API test list from a YAML or JSON configuration file.",
    )
    parser.add_argument("-V", "--version", action="version", version=f"clientcheck {__version__}")
    sub = parser.add_subparsers(dest="command")

    p_init = sub.add_parser("init", help="Write a template configuration file")
    p_init.add_argument("path")
    p_init.add_argument("--format", choices=["yaml", "json"], default=None)
    p_init.add_argument("--force", action="store_true", help="Overwrite an existing file")
    p_init.set_defaults(func=cmd_init)

    p_val = sub.add_parser("validate", help="Check a configuration file for required keys")
    p_val.add_argument("path")
    p_val.set_defaults(func=cmd_validate)

    p_show = sub.add_parser("show", help="Print a configuration file as YAML or JSON")
    p_show.add_argument("path")
    p_show.add_argument("--as", dest="as_format", choices=["yaml", "json"], default=None)
    p_show.set_defaults(func=cmd_show)

    p_run = sub.add_parser("run", help="Run the configured tests and write a results file")
    p_run.add_argument("path")
    p_run.add_argument("--results", help="Path to YAML/JSON results output")
    p_run.add_argument("--log-file", help="Append a JSON-lines run log to this file")
    p_run.add_argument("--verbose", action="store_true")
    p_run.set_defaults(func=cmd_run)

    return parser


def main(argv=None) -> int:
    init(autoreset=True)
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_CONFIG_ERROR

    setup_logging(getattr(args, "verbose", False))
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
