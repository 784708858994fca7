import asyncio
from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from errors import ClearFailure, DatastoreError, SigningFault, ValidationError
from services.credential_issuer import CredentialBundle, issue_credentials
from services.signing import build_signature_params, sign_params
from settings import load_settings


def _settings():
    return replace(
        load_settings(),
        cloudinary_cloud_name="demo-cloud",
        cloudinary_api_key="123456789",
        cloudinary_api_secret="test-secret",
        cloudinary_upload_preset="pdf-upload-signed",
        upload_folder="pdf-uploads",
    )


def _issue(repo=None, store=None, settings=None, **overrides) -> CredentialBundle:
    fields = {
        "filename": "Q3.pdf",
        "category": "rules_upload_pdf",
        "user_id": "u-1",
        "user_email": "jane.doe@x.com",
        "action": None,
    }
    fields.update(overrides)
    if repo is None:
        repo = MagicMock()
        repo.list_for_category.return_value = []
    with patch("services.credential_issuer.current_timestamp", return_value=1700000000):
        return asyncio.run(issue_credentials(repo, store or MagicMock(), settings or _settings(), **fields))


class TestBundle:
    def test_builds_signed_bundle(self) -> None:
        bundle = _issue()

        expected_signature = sign_params(
            build_signature_params(
                folder="pdf-uploads",
                public_id="rules_upload_pdf/jane_doe_Q3_1700000000",
                timestamp=1700000000,
                upload_preset="pdf-upload-signed",
            ),
            "test-secret",
        )
        assert bundle.to_response() == {
            "cloudName": "demo-cloud",
            "apiKey": "123456789",
            "timestamp": 1700000000,
            "signature": expected_signature,
            "upload_preset": "pdf-upload-signed",
            "public_id": "rules_upload_pdf/jane_doe_Q3_1700000000",
            "folder": "pdf-uploads",
        }

    def test_missing_secret_raises_signing_fault(self) -> None:
        settings = replace(_settings(), cloudinary_api_secret="")
        with pytest.raises(SigningFault):
            _issue(settings=settings)

    def test_missing_secret_skips_clear(self) -> None:
        settings = replace(_settings(), cloudinary_api_secret="")
        repo = MagicMock()
        repo.list_for_category.return_value = []
        store = MagicMock()

        with pytest.raises(SigningFault):
            _issue(repo=repo, store=store, settings=settings, action="clear")

        repo.list_for_category.assert_not_called()
        repo.clear_rules.assert_not_called()
        repo.clear_rag_rules.assert_not_called()
        store.destroy.assert_not_called()


class TestValidation:
    @pytest.mark.parametrize("field", ["filename", "category", "user_id", "user_email"])
    def test_missing_field_raises(self, field: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            _issue(**{field: None})
        assert "Missing required fields" in exc_info.value.message

    def test_empty_string_counts_as_missing(self) -> None:
        with pytest.raises(ValidationError):
            _issue(filename="")


class TestClearTrigger:
    def test_clear_runs_for_rules_category(self) -> None:
        repo = MagicMock()
        repo.list_for_category.return_value = []

        _issue(repo=repo, action="clear")

        repo.list_for_category.assert_called_once_with("u-1", "rules_upload_pdf")
        repo.clear_rules.assert_called_once_with()
        repo.clear_rag_rules.assert_called_once_with()

    def test_update_action_does_not_clear(self) -> None:
        repo = MagicMock()

        _issue(repo=repo, action="update")

        repo.list_for_category.assert_not_called()
        repo.clear_rules.assert_not_called()

    def test_clear_ignored_for_other_categories(self) -> None:
        repo = MagicMock()

        bundle = _issue(repo=repo, category="keyword_research_pdf", action="clear")

        repo.list_for_category.assert_not_called()
        assert bundle.public_id.startswith("keyword_research_pdf/")

    def test_fatal_clear_raises_and_issues_nothing(self) -> None:
        repo = MagicMock()
        repo.list_for_category.return_value = []
        repo.clear_rag_rules.side_effect = DatastoreError("db down")

        with patch("services.credential_issuer.sign_params") as mock_sign:
            with pytest.raises(ClearFailure):
                _issue(repo=repo, action="clear")
            mock_sign.assert_not_called()
