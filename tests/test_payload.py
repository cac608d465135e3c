from genstudio.session.payload import ChatRequest, InitialRequest, SectionRequest, SectionTuning, build_payload
from genstudio.types import GenerationOptions


def test_initial_payload_matches_backend_contract() -> None:
    inputs = {"productName": "Acme", "additionalInstructions": "Keep it punchy"}

    body = build_payload(InitialRequest(inputs, GenerationOptions()))

    assert body == {
        "userInputs": {"productName": "Acme", "additionalInstructions": "Keep it punchy"},
        "userSelections": {"tone": "professional", "length": "medium", "audience": "business"},
        "userPrompt": "Keep it punchy",
        "businessContext": True,
        "generationOptions": {"temperature": 0.7, "maxTokens": 2000, "topP": 0.9, "saveDocument": True},
    }


def test_initial_payload_defaults_prompt_to_empty_string() -> None:
    options = GenerationOptions(include_business_context=False, save_document=False)

    body = build_payload(InitialRequest({"productName": "Acme"}, options))

    assert body["userPrompt"] == ""
    assert body["businessContext"] is False
    assert body["generationOptions"]["saveDocument"] is False


def test_section_payload_scopes_generation_to_fragment() -> None:
    inputs = {"productName": "Acme"}

    body = build_payload(SectionRequest(inputs, fragment="old hook", options=GenerationOptions(length="long")))

    assert body["userInputs"] == {"productName": "Acme", "regenerationFocus": "old hook"}
    assert body["userSelections"]["length"] == "short"
    assert body["generationOptions"]["temperature"] > 0.7
    assert body["generationOptions"]["maxTokens"] < 2000
    assert body["generationOptions"]["saveDocument"] is False
    assert "regenerationFocus" not in inputs


def test_section_payload_uses_configured_tuning() -> None:
    body = build_payload(
        SectionRequest({}, fragment="x"),
        section=SectionTuning(temperature=0.95, max_tokens=300),
    )

    assert body["generationOptions"]["temperature"] == 0.95
    assert body["generationOptions"]["maxTokens"] == 300


def test_chat_payload_has_no_prompt_or_focus() -> None:
    inputs = {"productName": "Acme", "additionalInstructions": "ignored here"}

    body = build_payload(ChatRequest(inputs, message="Make it shorter", document_id="doc-9"))

    assert body["userMessage"] == "Make it shorter"
    assert body["documentId"] == "doc-9"
    assert body["businessContext"] is True
    assert body["includeHistory"] is True
    assert body["userInputs"] == inputs
    assert body["userInputs"] is not inputs
    assert "userPrompt" not in body
    assert "regenerationFocus" not in body["userInputs"]
    assert body["generationOptions"]["topP"] == 0.9


def test_build_payload_does_not_mutate_inputs() -> None:
    inputs = {"productName": "Acme"}
    options = GenerationOptions()

    build_payload(SectionRequest(inputs, fragment="a", options=options))
    build_payload(ChatRequest(inputs, message="b", options=options))

    assert inputs == {"productName": "Acme"}
    assert options == GenerationOptions()


def test_section_temperature_stays_above_a_high_user_temperature() -> None:
    body = build_payload(SectionRequest({}, fragment="x", options=GenerationOptions(temperature=0.9)))

    assert body["generationOptions"]["temperature"] == 1.0


def test_section_temperature_is_capped() -> None:
    body = build_payload(SectionRequest({}, fragment="x", options=GenerationOptions(temperature=2.0)))

    assert body["generationOptions"]["temperature"] == 2.0
