from app.schemas.batch_job import BatchJobConfiguration
from app.services.batch.prompts import OUTPUT_CONSTRAINTS, PromptContext, build_generation_prompt
from app.services.batch.store import load_prompt_context
from app.models.brand_seed import BrandSeed
from app.models.fashion_model import FashionModel


def test_default_prompt_uses_every_fallback():
    prompt = build_generation_prompt(BatchJobConfiguration())
    assert prompt == (
        "professional fashion model wearing the garment. "
        "Professional studio photography with light grey background. "
        f"{OUTPUT_CONSTRAINTS}"
    )


def test_gender_and_environment():
    prompt = build_generation_prompt(BatchJobConfiguration(gender="female", environment="urban"))
    assert prompt.startswith("professional female fashion model wearing the garment. ")
    assert "Urban street photography in Stockholm, Sweden." in prompt


def test_unknown_environment_falls_back_to_studio():
    prompt = build_generation_prompt(BatchJobConfiguration(environment="moon"))
    assert "Professional studio photography" in prompt


def test_persona_prompt_wins_over_gender():
    configuration = BatchJobConfiguration(model_id="m1", gender="male")
    prompt = build_generation_prompt(configuration, PromptContext(model_prompt="tall model with red hair"))
    assert prompt.startswith("tall model with red hair wearing the garment.")


def test_missing_persona_uses_default_model_text():
    prompt = build_generation_prompt(BatchJobConfiguration(model_id="gone", gender="male"), PromptContext())
    assert prompt.startswith("professional fashion model wearing the garment.")


def test_brand_seed_text():
    configuration = BatchJobConfiguration(brand_seed_id="b1")
    prompt = build_generation_prompt(configuration, PromptContext(brand_style="clean scandi", brand_character="minimalist"))
    assert "Style: clean scandi. Character: minimalist. Professional studio" in prompt


def test_configuration_keeps_unknown_keys():
    configuration = BatchJobConfiguration.model_validate({"environment": "urban", "lighting": "soft"})
    assert configuration.model_dump()["lighting"] == "soft"


def test_load_prompt_context_reads_persona_and_seed(db):
    db.add_all(
        [
            FashionModel(id="m1", name="Ava", gender="female", prompt="athletic female model"),
            BrandSeed(id="b1", name="Acme", brand_style="bold colours", character="sporty"),
        ]
    )
    db.commit()

    context = load_prompt_context(db, BatchJobConfiguration(model_id="m1", brand_seed_id="b1"))
    assert context.model_prompt == "athletic female model"
    assert context.brand_style == "bold colours"
    assert context.brand_character == "sporty"

    empty = load_prompt_context(db, BatchJobConfiguration(model_id="missing"))
    assert empty.model_prompt is None
