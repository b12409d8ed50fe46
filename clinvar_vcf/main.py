import logging
import sys
from argparse import Namespace

import coloredlogs

from clinvar_vcf.cli import parse_args
from clinvar_vcf.config import get_env
from clinvar_vcf.errors import ClinvarVcfError
from clinvar_vcf.parse import parse_and_write_vcf

_logger = logging.getLogger("clinvar_vcf")


def run_convert(args: Namespace):
    output_path = parse_and_write_vcf(
        args.input,
        args.reference,
        args.assembly,
        output=args.output,
        debug=args.debug,
        force=args.force,
        ignore_errors=args.ignore_error,
        limit=args.limit,
    )
    print(output_path)
    return output_path


def run_cli(argv: list[str]):
    """
    Primary entrypoint function for CLI args. Takes argv vector excluding program name.
    """
    args = parse_args(argv)
    return run_convert(args)


def main(argv=sys.argv[1:]):
    """
    Used when executing main as a script.
    Initializes default configs.
    """
    coloredlogs.install(level=get_env().log_level)
    try:
        return run_cli(argv)
    except (ClinvarVcfError, OSError) as e:
        _logger.critical(f"{type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
