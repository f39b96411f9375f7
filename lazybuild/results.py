"""
Result normalization.

Turns whatever a transform returned into an explicit {output path: bytes} map:

    None                → no output
    bytes | str         → {build_path: value}
    dict[str, bytes|str] → as given
    anything else       → InvalidResultTypeError

Output paths are checked (relative, inside the output tree), normalized, and
claimed pass-wide so two build paths can never write the same file.
"""

from typing import Any

from lazybuild.errors import (
    InvalidOutputPathError,
    InvalidOutputValueError,
    InvalidResultTypeError,
    OutputCollisionError,
)
from lazybuild.relations import RelationTable
from lazybuild.snapshot import ensure_bytes, is_rooted_path, normalize_path


class OutputClaims:
    """Scratch map {output path: build path}; one instance per pass."""

    def __init__(self) -> None:
        self._claims: dict[str, str] = {}

    def claim(self, output_path: str, build_path: str) -> None:
        other = self._claims.get(output_path)
        if other is not None and other != build_path:
            raise OutputCollisionError(
                f'when building "{build_path}" the transform tried to output to "{output_path}", '
                f'but this has already been output by "{other}"',
                build_path=build_path,
                output_path=output_path,
                other_build_path=other,
            )
        self._claims[output_path] = build_path

    def owner(self, output_path: str) -> str | None:
        return self._claims.get(output_path)

    def __len__(self) -> int:
        return len(self._claims)


def _as_output_map(build_path: str, result: Any) -> dict | None:
    if result is None:
        return None
    if isinstance(result, (bytes, str)):
        return {build_path: result}
    if isinstance(result, dict):
        return result
    raise InvalidResultTypeError(
        f"transform return value is of invalid type ({type(result).__name__}) "
        f'when building "{build_path}"',
        build_path=build_path,
        value_type=type(result).__name__,
    )


def _check_output_path(build_path: str, output_path: Any) -> str:
    if not isinstance(output_path, str):
        raise InvalidOutputPathError(
            f"expected output paths to be str, got {type(output_path).__name__} "
            f'when building "{build_path}"',
            build_path=build_path,
            output_path=output_path,
        )
    if not output_path or is_rooted_path(output_path):
        raise InvalidOutputPathError(
            f'expected a relative path, got: "{output_path}" when building "{build_path}"',
            build_path=build_path,
            output_path=output_path,
        )

    normal = normalize_path(output_path)
    if normal in (".", "..") or normal.startswith("../"):
        raise InvalidOutputPathError(
            f'output path "{output_path}" escapes the output tree when building "{build_path}"',
            build_path=build_path,
            output_path=output_path,
        )
    return normal


def normalize_result(
    build_path: str,
    result: Any,
    claims: OutputClaims,
    causations: RelationTable,
    writes: dict[str, bytes],
    encoding: str = "utf-8",
) -> tuple[str, ...]:
    """
    Validate one transform result and stage its outputs.

    On success every output path is claimed in `claims`, recorded as a
    (build_path, output_path) edge in `causations`, and its bytes are put in
    `writes`. Returns the normalized output paths in result order.
    """
    outputs = _as_output_map(build_path, result)
    if outputs is None:
        return ()

    written: list[str] = []
    for raw_path, value in outputs.items():
        if not isinstance(value, (bytes, str)):
            raise InvalidOutputValueError(
                f'expected value for output file "{raw_path}" to be str or bytes; '
                f'got {type(value).__name__} when building "{build_path}"',
                build_path=build_path,
                output_path=raw_path,
                value_type=type(value).__name__,
            )

        output_path = _check_output_path(build_path, raw_path)
        claims.claim(output_path, build_path)

        causations.add(build_path, output_path)
        writes[output_path] = ensure_bytes(value, encoding)
        if output_path not in written:
            written.append(output_path)

    return tuple(written)
