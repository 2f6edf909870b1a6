"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class RequestType(str, Enum):
    COMPLAINT = "Complaint"
    DATA_CHANGE = "DataChange"
    CONSULTATION = "Consultation"
    CLAIM = "Claim"
    APP_FAILURE = "AppFailure"
    FRAUDULENT_ACTIVITY = "FraudulentActivity"
    SPAM = "Spam"

    @classmethod
    def from_name(cls, name: str) -> "RequestType | None":
        """Case-insensitive lookup by canonical value ("appfailure" → APP_FAILURE)."""
        key = (name or "").strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


class Tone(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


class Language(str, Enum):
    # Declaration order is the tie-break order for language detection.
    RU = "RU"
    KZ = "KZ"
    ENG = "ENG"


DEFAULT_LANGUAGE = Language.RU


# Localized labels used by summaries.
REQUEST_TYPE_LABELS: dict[Language, dict[RequestType, str]] = {
    Language.RU: {
        RequestType.COMPLAINT: "Жалоба",
        RequestType.DATA_CHANGE: "Смена данных",
        RequestType.CONSULTATION: "Консультация",
        RequestType.CLAIM: "Претензия",
        RequestType.APP_FAILURE: "Неработоспособность приложения",
        RequestType.FRAUDULENT_ACTIVITY: "Мошеннические действия",
        RequestType.SPAM: "Спам",
    },
    Language.KZ: {
        RequestType.COMPLAINT: "Шағым",
        RequestType.DATA_CHANGE: "Дерек өзгерту",
        RequestType.CONSULTATION: "Кеңес",
        RequestType.CLAIM: "Талап/Претензия",
        RequestType.APP_FAILURE: "Қосымша істемейді",
        RequestType.FRAUDULENT_ACTIVITY: "Алаяқтық әрекеттер",
        RequestType.SPAM: "Спам",
    },
}

TONE_LABELS: dict[Language, dict[Tone, str]] = {
    Language.RU: {
        Tone.POSITIVE: "Позитивный",
        Tone.NEUTRAL: "Нейтральный",
        Tone.NEGATIVE: "Негативный",
    },
    Language.KZ: {
        Tone.POSITIVE: "Позитивті",
        Tone.NEUTRAL: "Бейтарап",
        Tone.NEGATIVE: "Негативті",
    },
}
