import re
from unittest.mock import patch

from services.storage_keys import current_timestamp, derive_storage_key

KEY_PATTERN = re.compile(r"^[a-z_]+/[A-Za-z0-9_]+_[A-Za-z0-9_]+_\d{10}$")


class TestDeriveStorageKey:
    def test_example_key(self) -> None:
        key = derive_storage_key("rules_upload_pdf", "Q3.pdf", "jane.doe@x.com", 1700000000)
        assert key == "rules_upload_pdf/jane_doe_Q3_1700000000"

    def test_strips_pdf_suffix_case_insensitively(self) -> None:
        key = derive_storage_key("keyword_research_pdf", "Report.PDF", "bob@x.com", 1700000000)
        assert key == "keyword_research_pdf/bob_Report_1700000000"

    def test_only_trailing_suffix_is_stripped(self) -> None:
        key = derive_storage_key("keyword_research_pdf", "a.pdf.backup", "bob@x.com", 1700000000)
        assert key == "keyword_research_pdf/bob_a_pdf_backup_1700000000"

    def test_sanitizes_unsafe_characters(self) -> None:
        key = derive_storage_key(
            "contact_enrichment_pdf",
            "my report (final) #2.pdf",
            "o'brien+test@example.org",
            1700000000,
        )
        assert key == "contact_enrichment_pdf/o_brien_test_my_report__final___2_1700000000"
        assert re.fullmatch(r"[A-Za-z0-9_/]+", key)

    def test_matches_key_pattern(self) -> None:
        for filename in ("Q3.pdf", "ünïcödé.pdf", "a b c", "x.y.z.pdf"):
            key = derive_storage_key("rules_upload_pdf", filename, "jane.doe@x.com", 1700000000)
            assert KEY_PATTERN.match(key), key

    def test_uses_current_time_by_default(self) -> None:
        with patch("services.storage_keys.time.time", return_value=1712345678.4):
            key = derive_storage_key("rules_upload_pdf", "Q3.pdf", "jane@x.com")
        assert key.endswith("_1712345678")

    def test_same_second_same_inputs_collide(self) -> None:
        first = derive_storage_key("rules_upload_pdf", "Q3.pdf", "jane@x.com", 1700000000)
        second = derive_storage_key("rules_upload_pdf", "Q3.pdf", "jane@x.com", 1700000000)
        assert first == second


class TestCurrentTimestamp:
    def test_rounds_to_whole_seconds(self) -> None:
        with patch("services.storage_keys.time.time", return_value=1700000000.6):
            assert current_timestamp() == 1700000001
