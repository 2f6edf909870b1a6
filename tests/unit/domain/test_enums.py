"""Tests for domain enums."""

from triage.domain.value_objects.enums import (
    DEFAULT_LANGUAGE,
    REQUEST_TYPE_LABELS,
    TONE_LABELS,
    Language,
    RequestType,
    Tone,
)


def test_request_type_values():
    assert [t.value for t in RequestType] == [
        "Complaint", "DataChange", "Consultation", "Claim",
        "AppFailure", "FraudulentActivity", "Spam",
    ]


def test_request_type_from_name_case_insensitive():
    assert RequestType.from_name("appfailure") == RequestType.APP_FAILURE
    assert RequestType.from_name(" DataChange ") == RequestType.DATA_CHANGE
    assert RequestType.from_name("unknown") is None
    assert RequestType.from_name("") is None


def test_language_order_is_tie_break_order():
    assert list(Language) == [Language.RU, Language.KZ, Language.ENG]
    assert DEFAULT_LANGUAGE == Language.RU


def test_tone_values():
    assert {t.value for t in Tone} == {"Positive", "Neutral", "Negative"}


def test_labels_cover_every_member():
    for lang in (Language.RU, Language.KZ):
        assert set(REQUEST_TYPE_LABELS[lang]) == set(RequestType)
        assert set(TONE_LABELS[lang]) == set(Tone)


def test_str_enum_comparison():
    assert RequestType.SPAM == "Spam"
    assert Language.ENG == "ENG"
