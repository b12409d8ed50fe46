import dataclasses
import logging
import tempfile
from collections import Counter
from pathlib import Path
from typing import IO

from clinvar_vcf.config import ConvertEnv, get_env
from clinvar_vcf.errors import ClinvarVcfError, ValidationSkip
from clinvar_vcf.fs import BinaryOpenMode, fs_open
from clinvar_vcf.normalize import check_reference, normalize_vcf
from clinvar_vcf.project import ASSEMBLIES, project_variation_archive
from clinvar_vcf.reader import read_variation_archives
from clinvar_vcf.tokenizer import DEFAULT_CHUNK_SIZE, XmlEventStream
from clinvar_vcf.utils import make_progress_logger
from clinvar_vcf.vcf import VcfWriter

_logger = logging.getLogger("clinvar_vcf")

EXTENSION_DEBUG_OUTPUT = ".vcf"
EXTENSION_OUTPUT = ".vcf.gz"
FILE_NAME_TEMP_OUTPUT = "output.vcf"


@dataclasses.dataclass
class ConversionSummary:
    entries_read: int = 0
    records_written: int = 0
    errors: int = 0
    skipped: Counter = dataclasses.field(default_factory=Counter)


def write_vcf(
    f_in: IO[bytes],
    f_out: IO[bytes],
    assembly: str,
    ignore_errors: bool = False,
    limit: int | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_interval: int = 60,
    logger: logging.Logger = _logger,
) -> ConversionSummary:
    """
    Reads ClinVar Variation XML from `f_in` and writes a VCF of the variants on
    `assembly` to `f_out`. Both are binary file objects.

    Diagnostics go to `logger`. Returns counts of what was read, written and skipped.
    """
    if assembly not in ASSEMBLIES:
        raise ValueError(f"Unknown assembly: {assembly}, must be one of {ASSEMBLIES}")

    summary = ConversionSummary()
    writer = VcfWriter(f_out)
    events = XmlEventStream(f_in, chunk_size=chunk_size)

    def count_error(_e: ClinvarVcfError):
        summary.errors += 1

    byte_log_progress = make_progress_logger(
        logger=logger,
        fmt="Read {elapsed_value} bytes in {elapsed:.2f}s. Total bytes read: {current_value}.",
        interval=progress_interval,
    )
    object_log_progress = make_progress_logger(
        logger=logger,
        fmt="Read {elapsed_value} variation_archive in {elapsed:.2f}s. Total: {current_value}.",
        interval=progress_interval,
    )
    byte_log_progress(0)  # initialize
    object_log_progress(0)  # initialize

    for offset, archive in read_variation_archives(
        events, ignore_errors=ignore_errors, on_error=count_error, logger=logger
    ):
        summary.entries_read += 1
        try:
            record = project_variation_archive(archive, assembly)
        except ValidationSkip as skip:
            summary.skipped[skip.reason] += 1
            logger.log(
                logging.DEBUG if skip.quiet else logging.WARNING,
                f"{skip.message} (entry at byte offset {offset})",
            )
        else:
            writer.write(record)

        byte_log_progress(events.bytes_read)
        object_log_progress(summary.entries_read)

        if limit and summary.entries_read >= limit:
            logger.info("Hard limit reached: %d", limit)
            break

    writer.flush()
    summary.records_written = writer.records_written

    byte_log_progress(events.bytes_read, force=True)
    object_log_progress(summary.entries_read, force=True)
    logger.info(
        f"Wrote {summary.records_written} records from {summary.entries_read}"
        f" variation_archive ({summary.errors} errors, skipped: {dict(summary.skipped)})"
    )
    return summary


def derive_output_path(
    input_filename: str | Path, output: str | Path | None = None, debug=False
) -> Path:
    """
    Where to write the output for `input_filename`.

    With no `output`, the input file name with its last extension replaced by
    .vcf (debug) or .vcf.gz, in the working directory. X.xml.gz gives X.xml.vcf.gz.
    If `output` is a directory, that same name inside it. Otherwise `output` itself.
    """
    extension = EXTENSION_DEBUG_OUTPUT if debug else EXTENSION_OUTPUT
    file_name = Path(input_filename).stem + extension
    if output is None:
        return Path(file_name)
    output = Path(output)
    if output.is_dir():
        return output / file_name
    return output


def parse_and_write_vcf(
    input_filename: str | Path,
    reference: str | Path,
    assembly: str,
    output: str | Path | None = None,
    debug=False,
    force=False,
    ignore_errors=False,
    limit: int | None = None,
    env: ConvertEnv | None = None,
) -> Path:
    """
    Converts `input_filename` to VCF, then sorts, normalizes and indexes it
    with bcftools, unless `debug` is set in which case the unsorted VCF is the
    output.

    Returns the path of the output file.
    """
    if env is None:
        env = get_env()
    input_path = Path(input_filename)
    if not input_path.exists():
        raise FileNotFoundError(str(input_path))
    check_reference(reference)

    output_path = derive_output_path(input_path, output, debug=debug)
    if output_path.exists() and not force:
        raise FileExistsError(str(output_path))

    def convert(vcf_path: Path) -> ConversionSummary:
        with fs_open(input_path) as f_in, fs_open(
            vcf_path, make_parents=True, mode=BinaryOpenMode.WRITE
        ) as f_out:
            return write_vcf(
                f_in,
                f_out,
                assembly,
                ignore_errors=ignore_errors,
                limit=limit,
                chunk_size=env.read_chunk_size,
                progress_interval=env.progress_interval,
            )

    if debug:
        convert(output_path)
    else:
        with tempfile.TemporaryDirectory() as temp_dir:
            work_dir = Path(temp_dir)
            vcf_path = work_dir / FILE_NAME_TEMP_OUTPUT
            convert(vcf_path)
            normalize_vcf(
                vcf_path,
                work_dir,
                Path(reference),
                output_path,
                bcftools=env.bcftools,
            )

    _logger.info(f"Output to: {output_path}")
    return output_path
