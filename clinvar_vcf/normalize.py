"""
Sorting, normalization and indexing of a VCF with bcftools.

NOTE: a `bcftools` executable must be available in the system PATH, or
configured with CLINVAR_VCF_BCFTOOLS.
"""

import logging
import shutil
import subprocess
from pathlib import Path

from clinvar_vcf.errors import NormalizationError

_logger = logging.getLogger("clinvar_vcf")

EXTENSION_FAI = ".gz.fai"
EXTENSION_GZI = ".gz.gzi"
FILE_NAME_TEMP_SORTED = "sorted.vcf.gz"
FILE_NAME_TEMP_NORMALIZED = "normalized.vcf.gz"


def reference_index_paths(reference: str | Path) -> list[Path]:
    """
    The index files expected next to a bgzip compressed reference fasta.

    Example:
        >>> [str(p) for p in reference_index_paths("GRCh38.fa.gz")]
        ['GRCh38.fa.gz.fai', 'GRCh38.fa.gz.gzi']
    """
    reference = Path(reference)
    return [reference.with_suffix(EXTENSION_FAI), reference.with_suffix(EXTENSION_GZI)]


def check_reference(reference: str | Path):
    """
    Raises FileNotFoundError if the reference fasta or one of its indexes is missing.
    """
    for path in [Path(reference), *reference_index_paths(reference)]:
        if not path.exists():
            raise FileNotFoundError(str(path))


def run_bcftools(args: list[str], bcftools: str = "bcftools"):
    command = [bcftools, *args]
    _logger.info(f"Running: {' '.join(command)}")
    result = subprocess.run(command, capture_output=True, text=True)
    if result.stdout:
        _logger.info(result.stdout.rstrip())
    if result.returncode != 0:
        raise NormalizationError(command, result.returncode, result.stderr)
    if result.stderr:
        _logger.info(result.stderr.rstrip())


def vcf_sort(input_path: Path, output_path: Path, bcftools: str = "bcftools"):
    run_bcftools(
        ["sort", "--output-type", "z", "--output", str(output_path), str(input_path)],
        bcftools=bcftools,
    )


def vcf_normalize(
    input_path: Path, output_path: Path, reference: Path, bcftools: str = "bcftools"
):
    """
    Left-aligns and normalizes indels against `reference`. Records whose REF does
    not match the reference are excluded, duplicates are kept.
    """
    run_bcftools(
        [
            "norm",
            "--no-version",
            "--output-type",
            "z",
            "--output",
            str(output_path),
            "--rm-dup",
            "none",
            "--check-ref",
            "x",
            "--fasta-ref",
            str(reference),
            str(input_path),
        ],
        bcftools=bcftools,
    )


def vcf_index(path: Path, bcftools: str = "bcftools"):
    run_bcftools(["index", "--force", "--tbi", str(path)], bcftools=bcftools)


def normalize_vcf(
    vcf_path: Path,
    work_dir: Path,
    reference: Path,
    output_path: Path,
    bcftools: str = "bcftools",
) -> Path:
    """
    Sorts and normalizes the plain VCF `vcf_path` into `output_path` (bgzip
    compressed) and writes its tabix index. Intermediates go in `work_dir`.

    If sorting or normalizing fails, the last intermediate that was produced is
    copied to `output_path` before the error is re-raised.
    """
    sorted_path = work_dir / FILE_NAME_TEMP_SORTED
    normalized_path = work_dir / FILE_NAME_TEMP_NORMALIZED

    try:
        vcf_sort(vcf_path, sorted_path, bcftools=bcftools)
    except NormalizationError:
        shutil.copyfile(vcf_path, output_path)
        _logger.error(f"Output temp file to: {output_path}")
        raise

    try:
        vcf_normalize(sorted_path, normalized_path, reference, bcftools=bcftools)
    except NormalizationError:
        shutil.copyfile(sorted_path, output_path)
        _logger.error(f"Output temp file to: {output_path}")
        raise

    shutil.copyfile(normalized_path, output_path)
    vcf_index(output_path, bcftools=bcftools)
    return output_path
