"""User-facing text in the languages the API answers in."""

DEFAULT_LANGUAGE = "en"

MESSAGES = {
    "en": {
        "request_too_large": "Request size exceeds the allowed limit",
        "validation_error": "Request data validation failed",
        "internal_error": "An internal error occurred during the analysis. Please try again later.",
        "body.invalid": "Request body must be a JSON object",
        "startup_idea.required": "The startup idea is required",
        "startup_idea.string": "The startup idea must be a string",
        "startup_idea.min": "The startup idea is too short (minimum 10 characters)",
        "startup_idea.max": "The startup idea is too long (maximum 1000 characters)",
        "startup_idea.regex": "The startup idea contains disallowed characters",
        "description.required": "A detailed business description is required",
        "description.string": "The description must be a string",
        "description.min": "The description is too short (minimum 50 characters)",
        "description.max": "The description is too long (maximum 2000 characters)",
        "description.regex": "The description contains disallowed characters",
        "additional_info.string": "Additional information must be a string",
        "additional_info.max": "Additional information is too long (maximum 500 characters)",
        "additional_info.regex": "Additional information contains disallowed characters",
        "disclaimer": (
            "These calculations are indicative and based on publicly available information "
            "and industry benchmarks. The results are not financial advice. Always consult "
            "professional financial experts and do your own due diligence before making "
            "investment decisions. The analysis was produced by AI and may contain inaccuracies."
        ),
    },
    "ru": {
        "request_too_large": "Размер запроса превышает допустимый лимит",
        "validation_error": "Ошибка валидации данных",
        "internal_error": "Произошла внутренняя ошибка при анализе. Пожалуйста, попробуйте позже.",
        "body.invalid": "Тело запроса должно быть JSON-объектом",
        "startup_idea.required": "Необходимо указать идею стартапа",
        "startup_idea.string": "Идея стартапа должна быть строкой",
        "startup_idea.min": "Идея стартапа слишком короткая (минимум 10 символов)",
        "startup_idea.max": "Идея стартапа слишком длинная (максимум 1000 символов)",
        "startup_idea.regex": "Идея содержит недопустимые символы",
        "description.required": "Необходимо подробное описание бизнеса",
        "description.string": "Описание должно быть строкой",
        "description.min": "Описание слишком короткое (минимум 50 символов)",
        "description.max": "Описание слишком длинное (максимум 2000 символов)",
        "description.regex": "Описание содержит недопустимые символы",
        "additional_info.string": "Дополнительная информация должна быть строкой",
        "additional_info.max": "Дополнительная информация слишком длинная (максимум 500 символов)",
        "additional_info.regex": "Дополнительная информация содержит недопустимые символы",
        "disclaimer": (
            "Данные расчеты носят ориентировочный характер и основаны на общедоступной информации "
            "и отраслевых бенчмарках. Результаты не являются финансовой консультацией. Обязательно "
            "консультируйтесь с профессиональными финансовыми экспертами и проводите собственную "
            "due diligence перед принятием инвестиционных решений. Анализ выполнен с помощью AI "
            "и может содержать неточности."
        ),
    },
}


def resolve_language(accept_language: str | None) -> str:
    """Pick the first supported language from an Accept-Language header."""
    if not accept_language:
        return DEFAULT_LANGUAGE
    for part in accept_language.split(","):
        tag = part.split(";")[0].strip().lower()
        primary = tag.split("-")[0]
        if primary in MESSAGES:
            return primary
    return DEFAULT_LANGUAGE


def message(key: str, language: str = DEFAULT_LANGUAGE) -> str:
    table = MESSAGES.get(language, MESSAGES[DEFAULT_LANGUAGE])
    return table.get(key) or MESSAGES[DEFAULT_LANGUAGE][key]
