import argparse

from clinvar_vcf.project import ASSEMBLIES


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog="clinvar-vcf",
        description="Convert a ClinVar Variation XML release to VCF",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Just output VCF (do not sort and normalize)",
    )
    parser.add_argument(
        "--force", action="store_true", help="Overwrite existing file"
    )
    parser.add_argument(
        "--ignore-error",
        action="store_true",
        help="Continue processing even if an error occurs",
    )
    parser.add_argument("--assembly", required=True, choices=ASSEMBLIES)
    parser.add_argument(
        "--reference",
        required=True,
        type=str,
        help="Reference fasta (bgzip compressed, with .fai and .gzi indexes)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Path to output file or directory",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Stop after this many VariationArchive elements",
    )
    parser.add_argument("input", type=str, help="Path to input [*.xml | *.xml.gz]")

    return parser.parse_args(argv)
