"""
Persona configuration

The fixed table of model personas the ranking call is asked to simulate.
Personas are labels for response styles, not separate backends.
"""

from typing import List, Sequence

from .models.ranking import PersonaSpec


DEFAULT_PERSONAS: tuple = (
    PersonaSpec(model_id="deepseek-r1", model_display_name="Deepseek"),
    PersonaSpec(model_id="qwq-32b", model_display_name="Qwen"),
    PersonaSpec(model_id="gemma-2-9b-cpt-sahabatai-instruct", model_display_name="Gemma"),
    PersonaSpec(model_id="llama-3.3-nemotron-super-49b-v1", model_display_name="Llama"),
)


def persona_names(personas: Sequence[PersonaSpec]) -> List[str]:
    """Display names in configuration order"""
    return [persona.model_display_name for persona in personas]
