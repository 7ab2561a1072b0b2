from typing import Optional

LEVELS: tuple[str, ...] = (
    "Elementary",
    "Pre-Intermediate",
    "Intermediate",
    "Upper-Intermediate",
    "Advanced",
)
FALLBACK_LEVEL = "Intermediate"

WORD_COUNT_RANGES: dict[str, str] = {
    "Elementary": "150-200",
    "Pre-Intermediate": "200-250",
    "Intermediate": "250-300",
    "Upper-Intermediate": "300-400",
    "Advanced": "400-500",
}
# Anything outside the table is treated like the top tier.
DEFAULT_WORD_COUNT_RANGE = "400-500"

SYSTEM_PROMPTS: dict[str, str] = {
    "Elementary": (
        "You are an English teacher creating simple, engaging content for "
        "elementary level students. Use basic vocabulary and simple sentence "
        "structures."
    ),
    "Pre-Intermediate": (
        "You are an English teacher creating content for pre-intermediate "
        "students. Use moderately complex vocabulary and varied sentence "
        "structures."
    ),
    "Intermediate": (
        "You are an English teacher creating content for intermediate level "
        "students. Use a good variety of vocabulary and complex sentence "
        "structures."
    ),
    "Upper-Intermediate": (
        "You are an English teacher creating advanced content for "
        "upper-intermediate students. Use sophisticated vocabulary and complex "
        "grammatical structures."
    ),
    "Advanced": (
        "You are an English teacher creating challenging content for advanced "
        "students. Use complex vocabulary, idiomatic expressions, and "
        "sophisticated grammatical structures."
    ),
}

CUSTOM_PROMPT_MAX_TOKENS = 200
ADVANCED_MAX_TOKENS = 700
DEFAULT_MAX_TOKENS = 500
TRANSLATION_MAX_TOKENS = 50
TRANSLATION_LEVEL = "Elementary"

READING_TEXT_TEMPLATE = """Generate a high-quality, engaging reading comprehension text for {level} level English learners.

Requirements:
- Text should be approximately {word_count} words.
- Use appropriate vocabulary and grammar complexity for the specified level.
- Ensure the text is engaging, educational, coherent, and flows naturally.

Level: {level}
Please generate a completely new and unique text now:"""

TRANSLATION_TEMPLATE = """Translate the English word "{word}" to {target_language}.
Provide only the direct translation without any additional text, explanation, or formatting.
Just the single word translation in {target_language}.
Word to translate: {word}
Target language: {target_language}"""


def get_word_count_range(level: str) -> str:
    return WORD_COUNT_RANGES.get(level, DEFAULT_WORD_COUNT_RANGE)


def get_system_prompt(level: str) -> str:
    """Returns the teacher persona for a level, falling back to Intermediate."""
    return SYSTEM_PROMPTS.get(level, SYSTEM_PROMPTS[FALLBACK_LEVEL])


def build_prompt(level: str, custom_prompt: Optional[str] = None) -> str:
    """
    Builds the user prompt for a reading passage.

    A custom prompt is sent as-is; otherwise the reading template is filled
    with the level name and its target word count.
    """
    if custom_prompt:
        return custom_prompt
    return READING_TEXT_TEMPLATE.format(
        level=level, word_count=get_word_count_range(level)
    )


def get_max_tokens(level: str, custom_prompt: Optional[str] = None) -> int:
    if custom_prompt:
        return CUSTOM_PROMPT_MAX_TOKENS
    if level == "Advanced":
        return ADVANCED_MAX_TOKENS
    return DEFAULT_MAX_TOKENS


def build_translation_prompt(word: str, target_language: str) -> str:
    return TRANSLATION_TEMPLATE.format(word=word, target_language=target_language)
