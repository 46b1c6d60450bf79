import base64

import pytest

from careers.errors import KeyFormatError
from careers.utils.credentials import (
    BEGIN_MARKER,
    END_MARKER,
    key_candidates,
    normalize_private_key,
)

BODY = base64.b64encode(bytes(range(256)) * 2).decode()
LINES = [BODY[i:i + 64] for i in range(0, len(BODY), 64)]
EXPECTED = "\n".join([BEGIN_MARKER, *LINES, END_MARKER])


class TestNormalizePrivateKey:
    def test_pem_with_real_newlines(self):
        raw = EXPECTED + "\n"
        assert normalize_private_key(raw) == EXPECTED

    def test_escaped_newlines(self):
        raw = "\\n".join([BEGIN_MARKER, *LINES, END_MARKER]) + "\\n"
        assert normalize_private_key(raw) == EXPECTED

    def test_single_line_without_separators(self):
        raw = BEGIN_MARKER + BODY + END_MARKER
        assert normalize_private_key(raw) == EXPECTED

    def test_surrounding_quotes_from_json(self):
        raw = '"' + "\\n".join([BEGIN_MARKER, *LINES, END_MARKER]) + '\\n"'
        assert normalize_private_key(raw) == EXPECTED

    def test_windows_line_endings(self):
        raw = "\r\n".join([BEGIN_MARKER, *LINES, END_MARKER])
        assert normalize_private_key(raw) == EXPECTED

    def test_body_wrapped_at_other_width(self):
        lines = [BODY[i:i + 76] for i in range(0, len(BODY), 76)]
        raw = "\n".join([BEGIN_MARKER, *lines, END_MARKER])
        assert normalize_private_key(raw) == EXPECTED

    def test_idempotent(self):
        once = normalize_private_key("\\n".join([BEGIN_MARKER, BODY, END_MARKER]))
        assert normalize_private_key(once) == once

    def test_output_shape(self):
        lines = normalize_private_key(BEGIN_MARKER + BODY + END_MARKER).split("\n")
        assert lines[0] == BEGIN_MARKER
        assert lines[-1] == END_MARKER
        assert all(len(line) <= 64 for line in lines[1:-1])

    @pytest.mark.parametrize("raw", [None, "", "   \n"])
    def test_empty(self, raw):
        with pytest.raises(KeyFormatError):
            normalize_private_key(raw)

    def test_missing_begin_marker(self):
        with pytest.raises(KeyFormatError, match="BEGIN"):
            normalize_private_key(BODY + END_MARKER)

    def test_missing_end_marker(self):
        with pytest.raises(KeyFormatError, match="END"):
            normalize_private_key(BEGIN_MARKER + BODY)

    def test_truncated_body(self):
        with pytest.raises(KeyFormatError, match="too short"):
            normalize_private_key(BEGIN_MARKER + BODY[:40] + END_MARKER)

    def test_body_not_base64(self):
        with pytest.raises(KeyFormatError, match="base64"):
            normalize_private_key(BEGIN_MARKER + "!@#$" * 40 + END_MARKER)

    def test_error_carries_remediation_hint(self):
        with pytest.raises(KeyFormatError) as exc_info:
            normalize_private_key("not a key")
        assert "GOOGLE_PRIVATE_KEY" in exc_info.value.hint

    def test_error_does_not_echo_key(self):
        with pytest.raises(KeyFormatError) as exc_info:
            normalize_private_key(BEGIN_MARKER + BODY[:40] + END_MARKER)
        assert BODY[:40] not in str(exc_info.value)


class TestKeyCandidates:
    def test_normalized_first_and_unique(self):
        raw = "\\n".join([BEGIN_MARKER, *LINES, END_MARKER])
        normalized = normalize_private_key(raw)
        candidates = key_candidates(raw, normalized)
        assert candidates[0] == normalized
        assert candidates[1] == normalized + "\n"
        assert len(candidates) == len(set(candidates))

    def test_already_clean_key_collapses(self):
        candidates = key_candidates(EXPECTED, EXPECTED)
        assert candidates == [EXPECTED, EXPECTED + "\n"]
