"""Tests for ordered-candidate resolution."""

from fusioncaller.core.resolvers import first_non_empty, secrets_match
from fusioncaller.models import FormSubmission


class TestFirstNonEmpty:
    """first_non_empty picks by argument order."""

    def test_first_value_wins(self):
        assert first_non_empty("query-org", "header-org", "body-org") == "query-org"

    def test_skips_none_and_blank(self):
        assert first_non_empty(None, "  ", "", "body-org") == "body-org"

    def test_strips_whitespace(self):
        assert first_non_empty("  org-1 ") == "org-1"

    def test_all_empty(self):
        assert first_non_empty(None, "", "   ") is None
        assert first_non_empty() is None


class TestFreeText:
    """Free-text resolution on a form submission."""

    def test_message_before_description_and_comments(self):
        submission = FormSubmission(message="wash my deck", description="other", comments="more")
        assert submission.free_text == "wash my deck"

    def test_description_when_message_blank(self):
        submission = FormSubmission(message="", description="roof moss", comments="x")
        assert submission.free_text == "roof moss"

    def test_comments_last(self):
        submission = FormSubmission(comments="fence")
        assert submission.free_text == "fence"

    def test_detection_text_falls_back_to_service_and_address(self):
        submission = FormSubmission(serviceType="Soft Washing", address="12 Elm St")
        assert submission.detection_text == "Soft Washing 12 Elm St"


class TestFormSubmissionDefaults:
    """Defaults applied at the validation boundary."""

    def test_auto_call_defaults_on(self):
        assert FormSubmission().should_auto_call is True
        assert FormSubmission(autoCall=None).should_auto_call is True
        assert FormSubmission(autoCall=True).should_auto_call is True

    def test_auto_call_explicitly_off(self):
        assert FormSubmission(autoCall=False).should_auto_call is False

    def test_source_defaults_to_form(self):
        assert FormSubmission().source_tag == "form"
        assert FormSubmission(source=None).source_tag == "form"
        assert FormSubmission(source="google").source_tag == "google"

    def test_numeric_phone_is_accepted(self):
        submission = FormSubmission.model_validate({"name": "Al", "phone": 5551234567})
        assert submission.phone == "5551234567"


class TestSecretsMatch:
    def test_match(self):
        assert secrets_match("s3cret", "s3cret") is True

    def test_mismatch_and_missing(self):
        assert secrets_match("wrong", "s3cret") is False
        assert secrets_match(None, "s3cret") is False
