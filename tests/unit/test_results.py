"""
Unit Tests: result normalization

Test Coverage:
- None / bytes / str / dict results
- invalid result types and output values
- output path checks and normalization
- pass-wide output claims
"""

import pytest

from lazybuild import (
    InvalidOutputPathError,
    InvalidOutputValueError,
    InvalidResultTypeError,
    OutputClaims,
    OutputCollisionError,
    causations_table,
    normalize_result,
)


@pytest.fixture
def staging():
    return OutputClaims(), causations_table(), {}


def _normalize(staging, build_path, result, **kwargs):
    claims, causations, writes = staging
    return normalize_result(build_path, result, claims, causations, writes, **kwargs)


class TestResultShapes:
    def test_none_produces_nothing(self, staging):
        assert _normalize(staging, "banner.txt", None) == ()
        assert staging[2] == {}
        assert len(staging[1]) == 0

    def test_bytes_outputs_to_same_path(self, staging):
        content = b"copied"

        assert _normalize(staging, "a.txt", content) == ("a.txt",)
        assert staging[2]["a.txt"] is content
        assert list(staging[1]) == [("a.txt", "a.txt")]

    def test_str_is_encoded(self, staging):
        _normalize(staging, "a.txt", "héllo")

        assert staging[2]["a.txt"] == "héllo".encode("utf-8")

    def test_str_uses_configured_encoding(self, staging):
        _normalize(staging, "a.txt", "é", encoding="latin-1")

        assert staging[2]["a.txt"] == b"\xe9"

    def test_empty_bytes_is_an_empty_file(self, staging):
        assert _normalize(staging, "a.txt", b"") == ("a.txt",)
        assert staging[2]["a.txt"] == b""

    def test_dict_with_several_outputs(self, staging):
        outputs = _normalize(staging, "a.js", {"a.js": "code", "a.js.map": b"map"})

        assert outputs == ("a.js", "a.js.map")
        assert staging[2] == {"a.js": b"code", "a.js.map": b"map"}
        assert staging[1].rights_for("a.js") == ("a.js", "a.js.map")

    def test_empty_dict_produces_nothing(self, staging):
        assert _normalize(staging, "a.js", {}) == ()

    @pytest.mark.parametrize("result", [42, ["a"], ("a", b"x"), bytearray(b"x"), object()])
    def test_invalid_result_type(self, staging, result):
        with pytest.raises(InvalidResultTypeError) as exc_info:
            _normalize(staging, "a.js", result)

        assert exc_info.value.context["build_path"] == "a.js"
        assert exc_info.value.context["value_type"] == type(result).__name__
        assert '"a.js"' in str(exc_info.value)

    @pytest.mark.parametrize("value", [None, 1, ["x"], bytearray(b"x")])
    def test_invalid_output_value(self, staging, value):
        with pytest.raises(InvalidOutputValueError) as exc_info:
            _normalize(staging, "a.js", {"out.js": value})

        assert exc_info.value.context["output_path"] == "out.js"
        assert isinstance(exc_info.value, TypeError)


class TestOutputPaths:
    @pytest.mark.parametrize("path", ["/abs/out.js", "C:\\out.js", "\\out.js", ""])
    def test_rooted_or_empty_paths_rejected(self, staging, path):
        with pytest.raises(InvalidOutputPathError):
            _normalize(staging, "a.js", {path: b"x"})

    @pytest.mark.parametrize("path", ["../outside.js", "a/../../outside.js", ".", "a/.."])
    def test_escaping_paths_rejected(self, staging, path):
        with pytest.raises(InvalidOutputPathError):
            _normalize(staging, "a.js", {path: b"x"})

    def test_non_str_key_rejected(self, staging):
        with pytest.raises(InvalidOutputPathError):
            _normalize(staging, "a.js", {1: b"x"})

    def test_paths_are_normalized(self, staging):
        outputs = _normalize(staging, "a.js", {"./dist//a.js": b"x", "dist/x/../b.js": b"y"})

        assert outputs == ("dist/a.js", "dist/b.js")
        assert set(staging[2]) == {"dist/a.js", "dist/b.js"}

    def test_colon_in_name_is_not_a_drive(self, staging):
        outputs = _normalize(staging, "a.js", {"a:b.js": b"x"})

        assert outputs == ("a:b.js",)


class TestOutputClaims:
    def test_collision_between_build_paths(self, staging):
        _normalize(staging, "a.js", {"bundle.js": b"a"})

        with pytest.raises(OutputCollisionError) as exc_info:
            _normalize(staging, "b.js", {"bundle.js": b"b"})

        assert "already been output by" in str(exc_info.value)
        assert exc_info.value.context["other_build_path"] == "a.js"

    def test_collision_detected_after_normalization(self, staging):
        _normalize(staging, "a.js", {"out/bundle.js": b"a"})

        with pytest.raises(OutputCollisionError):
            _normalize(staging, "b.js", {"./out/./bundle.js": b"b"})

    def test_implicit_output_collides_with_explicit(self, staging):
        _normalize(staging, "a.js", {"b.js": b"from a"})

        with pytest.raises(OutputCollisionError):
            _normalize(staging, "b.js", b"from b")

    def test_claims_track_owner(self):
        claims = OutputClaims()
        claims.claim("out.js", "a.js")
        claims.claim("out.js", "a.js")

        assert claims.owner("out.js") == "a.js"
        assert claims.owner("other.js") is None
        assert len(claims) == 1
