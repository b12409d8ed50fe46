import time
from typing import Any, Callable


def _parent_of(d: dict, keys: tuple) -> dict | None:
    """
    The dict holding the last of `keys`, or None if the path is broken.
    """
    for k in keys[:-1]:
        if not d or k not in d:
            return None
        d = d[k]
    if not d or keys[-1] not in d:
        return None
    return d


def extract(d: dict, *keys: Any) -> Any:
    """
    Pops the value at the path `keys` from a parsed XML node, leaving the
    rest of the node in place. None if any step of the path is missing.
    """
    parent = _parent_of(d, keys)
    return None if parent is None else parent.pop(keys[-1])


def get(d: dict, *keys: Any) -> Any:
    """
    Like `extract`, without removing anything.
    """
    parent = _parent_of(d, keys)
    return None if parent is None else parent[keys[-1]]


def ensure_list(obj: Any) -> list:
    """
    xmltodict gives a bare value for an element seen once and a list when it
    repeats. Normalizes both to a list.

    Example:
        >>> ensure_list({"@ID": "C1"})
        [{'@ID': 'C1'}]
        >>> ensure_list([1, 2])
        [1, 2]
    """
    return obj if isinstance(obj, list) else [obj]


def text_of(node: Any) -> str | None:
    """
    Inner text of an element, for nodes with or without attributes.

    Example:
        >>> text_of({"@DB": "MedGen", "$": "Cancer"})
        'Cancer'
        >>> text_of("Cancer")
        'Cancer'
        >>> text_of({"@DB": "MedGen"}) is None
        True
    """
    if node is None or isinstance(node, str):
        return node
    return node.get("$")


def make_progress_logger(logger, fmt: str, interval: int = 60) -> Callable:
    """
    Returns `log_progress(current_value, force=False)`, which logs `fmt` at most
    once per `interval` seconds unless forced. The first call only starts the clock.

    `fmt` may use {current_value}, {elapsed_value} (change since the last line)
    and {elapsed} (seconds since the last line).
    """
    state = {}

    def log_progress(current_value, force=False):
        now = time.time()
        if not state:
            state.update(time=now, value=0)
            return
        if not force and now - state["time"] <= interval:
            return
        logger.info(
            fmt.format(
                current_value=current_value,
                elapsed=now - state["time"],
                elapsed_value=current_value - state["value"],
            )
        )
        state.update(time=now, value=current_value)

    return log_progress
