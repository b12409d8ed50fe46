import logging.config

import pytest

from clinvar_vcf import config
from clinvar_vcf.log_conf import log_conf as _log_conf


@pytest.fixture
def log_conf():
    logging.config.dictConfig(_log_conf)


@pytest.fixture(scope="session", autouse=True)
def env_config() -> config.ConvertEnv:
    """
    Overrides clinvar_vcf.config values so tests do not depend on the
    environment or a local dotenv file.

    Runs before anything calls config.get_env(), so the overridden values are
    the ones cached for the session.
    """
    config._dotenv_values = {
        "CLINVAR_VCF_BCFTOOLS": "bcftools-not-a-real-executable",
        "CLINVAR_VCF_READ_CHUNK_SIZE": "4096",
        "CLINVAR_VCF_PROGRESS_INTERVAL": "60",
        "CLINVAR_VCF_LOG_LEVEL": "DEBUG",
    }

    return config.get_convert_env()


@pytest.fixture
def make_release():
    """
    Returns a function wrapping VariationArchive element strings in a
    ClinVarVariationRelease document, as bytes.
    """

    def _make_release(*entries: str, release_date="2024-02-01") -> bytes:
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            f'<ClinVarVariationRelease ReleaseDate="{release_date}">\n'
            + "\n".join(entries)
            + "\n</ClinVarVariationRelease>\n"
        ).encode("utf-8")

    return _make_release


@pytest.fixture
def make_archive():
    """
    Returns a function building a VariationArchive element string with a single
    SimpleAllele, SequenceLocation and RCVAccession.
    """

    def _make_archive(
        variation_id=1,
        allele_id=10,
        assembly="GRCh38",
        chromosome="1",
        position="100",
        reference="A",
        alternate="G",
        condition_db="MedGen",
        condition_id="C1",
        description="Pathogenic",
        submission_count="1",
    ) -> str:
        return f"""
  <VariationArchive VariationID="{variation_id}" Accession="VCV{variation_id:09d}">
    <ClassifiedRecord>
      <SimpleAllele AlleleID="{allele_id}" VariationID="{variation_id}">
        <Location>
          <SequenceLocation Assembly="{assembly}" Chr="{chromosome}" positionVCF="{position}" referenceAlleleVCF="{reference}" alternateAlleleVCF="{alternate}"/>
        </Location>
      </SimpleAllele>
      <RCVList>
        <RCVAccession Accession="RCV{variation_id:09d}" Version="1">
          <ClassifiedConditionList>
            <ClassifiedCondition DB="{condition_db}" ID="{condition_id}">Disease {variation_id}</ClassifiedCondition>
          </ClassifiedConditionList>
          <RCVClassifications>
            <GermlineClassification>
              <Description SubmissionCount="{submission_count}">{description}</Description>
            </GermlineClassification>
          </RCVClassifications>
        </RCVAccession>
      </RCVList>
    </ClassifiedRecord>
  </VariationArchive>"""

    return _make_archive
