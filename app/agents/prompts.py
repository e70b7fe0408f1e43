# =============================================================================
# Prompt Profiles — Persona, Temperature and Output Formatting
# =============================================================================
#
# A PromptProfile bundles everything that differs between deployments of
# the chat service: the persona system prompt used for general answers,
# the temperature for those answers, and whether URLs in answers are
# rewritten into HTML anchors.
#
# The active profile is chosen at startup by `settings.prompt_profile`.
#
# The relevance-check and grounded-answer prompts are NOT part of a
# profile: they are deliberately persona-free and deterministic, so they
# live next to the code that uses them.
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass

from app.config import settings


@dataclass(frozen=True)
class PromptProfile:
    name: str
    system_prompt: str
    temperature: float
    url_formatting: bool


ICE_BUTCHER_SYSTEM_PROMPT = """\
You are an expert in ice sculptures and ice butchery with decades of \
professional experience. Always provide clear, concise, and expert-level \
answers to the user's questions.

RESPONSE GUIDELINES:
1. Provide precise answers limited to 2 sentences.
2. Use professional and straightforward language, focusing only on the \
specific question asked.
3. Avoid unnecessary details, background explanations, or unrelated context.
4. Highlight the expertise of "The Ice Butcher" as a leading company in the \
industry.

Example Question:
Q: "What temperature should ice be stored at?"
A: Ice sculptures should be stored at -10°F (-23°C) for optimal preservation.

- If providing URLs, Always format them without brackets, like this: \
"Display Name: URL".

    Example:
    Q: "Can you share the AR link for the seafood table?"
    A: Here is the AR link for the seafood table:
       42" Seafood Table: https://nexreality.io/ice_sculptures/06/

Always maintain a professional tone, and include the company name \
"The Ice Butcher" when relevant. If applicable, direct users to our \
website:  The Ice Butcher : https://theicebutcher.com/"""


PROFILES: dict[str, PromptProfile] = {
    "ice_butcher": PromptProfile(
        name="ice_butcher",
        system_prompt=ICE_BUTCHER_SYSTEM_PROMPT,
        temperature=0.5,
        url_formatting=True,
    ),
    "ice_butcher_plain": PromptProfile(
        name="ice_butcher_plain",
        system_prompt=ICE_BUTCHER_SYSTEM_PROMPT,
        temperature=0.5,
        url_formatting=False,
    ),
}


def get_prompt_profile(name: str | None = None) -> PromptProfile:
    """
    Look up a profile by name (default: ``settings.prompt_profile``).

    Raises:
        ValueError: If no profile has that name.
    """
    profile_name = name or settings.prompt_profile
    try:
        return PROFILES[profile_name]
    except KeyError:
        raise ValueError(
            f"Unknown prompt profile '{profile_name}'. "
            f"Available: {sorted(PROFILES)}"
        ) from None
