from dataclasses import dataclass

from app.schemas.batch_job import BatchJobConfiguration

DEFAULT_MODEL_PROMPT = "professional fashion model"
DEFAULT_ENVIRONMENT = "studio"
ENVIRONMENT_PROMPTS = {
    "studio": "Professional studio photography with light grey background.",
    "urban": "Urban street photography in Stockholm, Sweden.",
}
OUTPUT_CONSTRAINTS = "High-quality product photography. MANDATORY: 4:5 aspect ratio, portrait orientation."


@dataclass(slots=True)
class PromptContext:
    """Texts looked up from the persona and brand seed a configuration points at."""

    model_prompt: str | None = None
    brand_style: str | None = None
    brand_character: str | None = None


def model_text(configuration: BatchJobConfiguration, context: PromptContext) -> str:
    if configuration.model_id:
        return context.model_prompt or DEFAULT_MODEL_PROMPT
    if configuration.gender:
        return f"professional {configuration.gender} fashion model"
    return DEFAULT_MODEL_PROMPT


def brand_text(configuration: BatchJobConfiguration, context: PromptContext) -> str:
    if not configuration.brand_seed_id:
        return ""
    if context.brand_style is None and context.brand_character is None:
        return ""
    return f"Style: {context.brand_style or 'unspecified'}. Character: {context.brand_character or 'unspecified'}. "


def environment_text(configuration: BatchJobConfiguration) -> str:
    key = configuration.environment or DEFAULT_ENVIRONMENT
    return ENVIRONMENT_PROMPTS.get(key, ENVIRONMENT_PROMPTS[DEFAULT_ENVIRONMENT])


def build_generation_prompt(configuration: BatchJobConfiguration, context: PromptContext | None = None) -> str:
    context = context or PromptContext()
    return (
        f"{model_text(configuration, context)} wearing the garment. "
        f"{brand_text(configuration, context)}"
        f"{environment_text(configuration)} "
        f"{OUTPUT_CONSTRAINTS}"
    )
