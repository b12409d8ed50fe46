import re
from abc import ABCMeta, abstractmethod
from typing import Any

from clinvar_vcf.errors import DecodeError
from clinvar_vcf.utils import extract


class Model(object, metaclass=ABCMeta):
    @staticmethod
    @abstractmethod
    def from_xml(inp: dict):
        """
        Constructs an instance of this class using the XML structure parsed into a dict.

        Attributes are keys prefixed with "@" and inner text is under "$". Fields
        read from the input are removed from it, so whatever is left over was not
        used by the model.
        """
        raise NotImplementedError()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.__dict__.__repr__()})"


REGEX_UNSIGNED_INT = re.compile(r"[0-9]+")


def int_or_none(s: str | None, field: str = "value") -> int | None:
    """
    Reads an unsigned decimal attribute. Signs, whitespace and digit
    separators are rejected.
    """
    if s is None:
        return None
    if not isinstance(s, str) or not REGEX_UNSIGNED_INT.fullmatch(s):
        raise DecodeError(f"Expected an unsigned integer for {field}, got {s!r}")
    return int(s)


def required(inp: dict, key: str, element: str) -> Any:
    """
    Extracts `key` from `inp`, raising DecodeError naming `element` if it is absent.
    """
    val = extract(inp, key)
    if val is None:
        raise DecodeError(f"{element} is missing required {key}")
    return val


def required_int(inp: dict, key: str, element: str) -> int:
    return int_or_none(required(inp, key, element), field=f"{element} {key}")


def single(node: Any, element: str) -> dict:
    """
    Returns the dict for an element expected at most once. Empty elements
    parse to None and are returned as {}.
    """
    if isinstance(node, list):
        raise DecodeError(f"Expected a single {element}, found {len(node)}")
    if node is None:
        return {}
    if not isinstance(node, dict):
        raise DecodeError(f"Unexpected content for {element}: {node!r}")
    return node
