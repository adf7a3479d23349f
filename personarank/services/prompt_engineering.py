"""
Prompt Engineering Module

Handles custom prompt logic including:
- Ranking prompt construction (persona simulation + scoring)
- Language instructions based on the user's input language
- Transcription prompt
"""

import os
from typing import Dict, Optional, Sequence

from ..models.ranking import PersonaSpec
from .history import BEGINNING_OF_CONVERSATION


SUPPORTED_LANGUAGES: Dict[str, str] = {
    "en-US": "English (United States)",
    "en-GB": "English (United Kingdom)",
    "hi-IN": "Hindi",
    "es-ES": "Spanish",
    "fr-FR": "French",
    "de-DE": "German",
    "ja-JP": "Japanese",
    "zh-CN": "Chinese (Simplified)",
}

RANKING_SYSTEM_TEMPLATE = """You are an AI assistant. Answer the user's query by first simulating how several AI model personas would respond, keeping every simulation consistent with the conversation so far, and then analyzing and ranking those simulated responses.

User's current text query: "{user_text}"
{image_note}
{history_section}

{language_section}

You do not have access to real-time information such as the current date or time. If the user asks for it, say that you cannot provide it.

Simulate responses for these model personas:
{persona_lines}

Instructions:
1. Simulate responses: for each persona, write a concise, helpful and distinct answer to the query. Each answer must read as a logical continuation of the conversation history and must consider the current query{image_clause}. Personas should not talk about their own name unless the conversation makes it natural. {language_reminder}
2. Analyze and rank: evaluate each simulated response and assign an accuracy score between 0.0 and 1.0 (1.0 is most accurate and relevant) based on quality, relevance to the query and history, and helpfulness.
3. Format output: return a single JSON array. Each element describes one persona and has exactly these keys:
   - "modelName": the persona's display name (e.g. "{first_persona}")
   - "responseText": the simulated response text
   - "accuracy": the numeric score from 0.0 to 1.0

Example element:
{{"modelName": "ExampleModel", "responseText": "A simulated answer that continues the conversation.", "accuracy": 0.9}}

The array MUST contain exactly one element for each of: {persona_list}.
"""

TRANSCRIPTION_PROMPT = """You are an audio transcription service. Transcribe the attached audio accurately.
Return ONLY the transcribed text. Do not add greetings, commentary or explanations.
Respond with a JSON object of the form {"transcribedText": "<transcript>"}."""


class PromptEngineer:
    """Handles prompt engineering logic for PersonaRank Chat"""

    def __init__(self):
        self.debug_logging = os.getenv("DEBUG_LOGGING_DEV", "false").lower() == "true" or os.getenv("DEBUG_LOGGING_PROD", "false").lower() == "true"

    def is_english(self, input_language: Optional[str]) -> bool:
        """True when no language is given or the code is an English variant"""
        if not input_language or not input_language.strip():
            return True
        return input_language.strip().lower().startswith("en")

    def get_language_instructions(self, input_language: Optional[str]) -> str:
        """
        Get language specific instructions for the simulated responses

        Args:
            input_language: BCP 47 code such as "en-US" or "hi-IN"

        Returns:
            Instruction paragraph for the prompt
        """
        if not input_language or not input_language.strip():
            return "The user's query is in English. Write the simulated responses in English."

        code = input_language.strip()
        if self.is_english(code):
            return f"The user's query is in English (language code: {code}). Write the simulated responses in English."

        name = SUPPORTED_LANGUAGES.get(code, code)
        return (
            f"The user has indicated their query is primarily in language code {code} ({name}). "
            f"Write the simulated responses in {name} where the persona would naturally do so; "
            "otherwise respond in English."
        )

    def _language_reminder(self, input_language: Optional[str]) -> str:
        if self.is_english(input_language):
            return "Write in English."
        code = input_language.strip()
        return f"Write in the language indicated by '{code}' when appropriate, otherwise English."

    def build_ranking_prompt(self,
                             user_text: str,
                             history_context: Optional[str],
                             personas: Sequence[PersonaSpec],
                             input_language: Optional[str] = None,
                             has_image: bool = False) -> str:
        """
        Build the prompt for the persona simulation and ranking call

        Args:
            user_text: The user's current query
            history_context: Output of the history summarizer
            personas: Personas to simulate, in configuration order
            input_language: Optional language hint
            has_image: Whether an image part accompanies the prompt

        Returns:
            Prompt text
        """
        if history_context and history_context.strip():
            history_section = (
                "Conversation history (use it to understand follow-up questions and stay relevant):\n"
                f"{history_context.strip()}"
            )
        else:
            history_section = BEGINNING_OF_CONVERSATION

        names = [persona.model_display_name for persona in personas]

        prompt = RANKING_SYSTEM_TEMPLATE.format(
            user_text=user_text,
            image_note="The user has also attached the image that follows this prompt." if has_image else "",
            image_clause=" and the attached image" if has_image else "",
            history_section=history_section,
            language_section=self.get_language_instructions(input_language),
            language_reminder=self._language_reminder(input_language),
            persona_lines="\n".join(f"- Model Persona: {name}" for name in names),
            first_persona=names[0] if names else "ExampleModel",
            persona_list=", ".join(f'"{name}"' for name in names),
        )

        if self.debug_logging:
            print(f"[DEBUG] Ranking prompt built for {len(names)} personas ({len(prompt)} characters)")

        return prompt

    def build_transcription_prompt(self) -> str:
        """Prompt that asks for the transcript and nothing else"""
        return TRANSCRIPTION_PROMPT


# Create global instance
prompt_engineer = PromptEngineer()
