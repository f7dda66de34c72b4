"""YAML load / dump helpers and whole-file atomic writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

# Prefer the C-accelerated YAML loader when available (~10x faster).
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)

_INT_TAG = "tag:yaml.org,2002:int"
_FLOAT_TAG = "tag:yaml.org,2002:float"


class PlainScalar(str):
    """A number-like scalar kept exactly as written, e.g. ``1.10``.

    ``tag`` is the tag the scalar resolved to, so that it is dumped back
    unquoted.
    """

    tag = _FLOAT_TAG


class _TextLoader(_YamlLoader):
    """Safe loader that reads ints and floats as their source text.

    ``version: 1.10`` stays ``"1.10"`` instead of becoming the float 1.1.
    """


def _construct_plain_scalar(loader: _TextLoader, node: yaml.ScalarNode) -> PlainScalar:
    scalar = PlainScalar(loader.construct_scalar(node))
    scalar.tag = node.tag
    return scalar


_TextLoader.add_constructor(_INT_TAG, _construct_plain_scalar)
_TextLoader.add_constructor(_FLOAT_TAG, _construct_plain_scalar)


class _IndentedDumper(yaml.SafeDumper):
    """SafeDumper that indents block sequences under their parent key.

    PyYAML writes ``key:\\n- item`` by default; helm and most editors
    expect ``key:\\n    - item``. Collections nested in a sequence item start
    right after the ``- `` so that wide indents do not render as ``-   name``.
    """

    def increase_indent(self, flow: bool = False, indentless: bool = False) -> None:
        in_sequence_item = bool(self.states) and self.states[-1] == self.expect_block_sequence_item
        super().increase_indent(flow, False)
        if in_sequence_item and not flow and self.indents and self.indents[-1] is not None:
            self.indent = self.indents[-1] + 2


def _represent_plain_scalar(dumper: _IndentedDumper, data: PlainScalar) -> yaml.ScalarNode:
    return dumper.represent_scalar(data.tag, str(data))


_IndentedDumper.add_representer(PlainScalar, _represent_plain_scalar)


def load_yaml(text: str | bytes) -> Any:
    return yaml.load(text, Loader=_TextLoader)


def load_yaml_file(path: Path) -> Any:
    return load_yaml(path.read_text(encoding="utf-8"))


def dump_yaml(data: Any, indent: int = 2) -> str:
    """Serialize ``data`` in block style, keeping mapping key order.

    PyYAML only honours indents between 2 and 9; anything else falls back
    to 2.
    """
    if not 2 <= indent <= 9:
        indent = 2
    return yaml.dump(
        data,
        Dumper=_IndentedDumper,
        indent=indent,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=4096,
    )


def write_atomic(path: Path, data: str | bytes) -> None:
    """Replace ``path`` with ``data`` via a temp file in the same directory.

    The target either keeps its old content or gets the new content in full.
    File mode of an existing target is kept.
    """
    payload = data.encode("utf-8") if isinstance(data, str) else data
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(payload)
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        else:
            os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
