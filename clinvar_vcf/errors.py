"""
Exceptions raised while converting a ClinVar Variation XML release to VCF.
"""

from enum import StrEnum


class ClinvarVcfError(Exception):
    """Base class for conversion errors."""


class StreamDecodeError(ClinvarVcfError):
    """
    Malformed low-level XML structure. `offset` is the byte position
    in the (decompressed) input where the parser gave up.
    """

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self):
        if self.offset is None:
            return self.message
        return f"{self.message} (at byte offset {self.offset})"


class ExtractionError(StreamDecodeError):
    """
    The input ended before the VariationArchive being extracted was closed.
    """


class DecodeError(ClinvarVcfError):
    """
    A well-formed VariationArchive whose content does not match the expected schema.
    """

    def __init__(self, message: str, offset: int | None = None):
        super().__init__(message)
        self.message = message
        self.offset = offset

    def __str__(self):
        if self.offset is None:
            return self.message
        return f"{self.message} (entry at byte offset {self.offset})"


class NormalizationError(ClinvarVcfError):
    """
    A bcftools step exited unsuccessfully.
    """

    def __init__(self, command: list[str], returncode: int, stderr: str):
        super().__init__(
            f"{' '.join(command)} exited with status {returncode}: {stderr.strip()}"
        )
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class SkipReason(StrEnum):
    MISSING_CLASSIFIED_RECORD = "missing_classified_record"
    MISSING_SIMPLE_ALLELE = "missing_simple_allele"
    NO_ASSEMBLY_LOCATION = "no_assembly_location"
    INCOMPLETE_LOCATION = "incomplete_location"
    INVALID_CHROMOSOME = "invalid_chromosome"
    INVALID_REFERENCE = "invalid_reference"
    INVALID_ALTERNATE = "invalid_alternate"
    REF_EQUALS_ALT = "ref_equals_alt"
    NO_CONDITIONS = "no_conditions"


# Reasons which are expected for most entries and are not worth a warning
QUIET_SKIP_REASONS = frozenset(
    {SkipReason.NO_ASSEMBLY_LOCATION, SkipReason.INCOMPLETE_LOCATION}
)


class ValidationSkip(ClinvarVcfError):
    """
    A VariationArchive which produces no VCF record. Not a failure.
    """

    def __init__(self, reason: SkipReason, message: str):
        super().__init__(message)
        self.reason = reason
        self.message = message

    @property
    def quiet(self) -> bool:
        return self.reason in QUIET_SKIP_REASONS
