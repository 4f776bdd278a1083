from sylva.extractor import QueryExtractor, parse_llm_json
from sylva.models import Extracted, ExtractionResponse, FellBack
from sylva.prompts import EXTRACTION_SYSTEM_PROMPT

from .fakes import FakeLLM


def test_llm_reply_is_normalized():
    llm = FakeLLM(reply={
        "species": "Uncaria",
        "ecosystemService": "medicine",
        "partUsed": "Leaf",
        "only": False,
        "and": None,
    })
    result = QueryExtractor(llm).extract("medicinal leaves of Uncaria")

    assert isinstance(result, Extracted)
    assert result.used_primary is True
    assert result.query.species == "Uncaria"
    assert result.query.ecosystem_service == "Medicinal"
    assert result.query.part_used == "leaves"
    assert result.query.only is False


def test_two_message_exchange():
    llm = FakeLLM(reply={"species": None})
    QueryExtractor(llm).extract("Which trees give food?")

    assert len(llm.calls) == 1
    system, user = llm.calls[0]
    assert system == EXTRACTION_SYSTEM_PROMPT
    assert "Which trees give food?" in user
    assert "Output only the JSON object" in user
    assert "Medicinal, Food, Raw Material" in user


def test_and_clause_is_kept_raw():
    llm = FakeLLM(reply={
        "ecosystemService": "Medicinal",
        "only": True,
        "and": {"partUsed": "Bark"},
    })
    result = QueryExtractor(llm).extract("medicinal and bark")

    assert isinstance(result, Extracted)
    assert result.query.only is True
    assert result.query.and_.part_used == "Bark"
    assert result.query.and_.ecosystem_service is None


def test_unknown_values_pass_through():
    llm = FakeLLM(reply={"ecosystemService": "Shade", "partUsed": "thorns"})
    result = QueryExtractor(llm).extract("shade trees with thorns")
    assert result.query.ecosystem_service == "Shade"
    assert result.query.part_used == "thorns"


def test_fenced_json_reply():
    llm = FakeLLM(reply='```json\n{"ecosystemService": "food"}\n```')
    result = QueryExtractor(llm).extract("food trees")
    assert isinstance(result, Extracted)
    assert result.query.ecosystem_service == "Food"


def test_malformed_reply_falls_back_to_heuristic():
    llm = FakeLLM(reply="Sorry, I cannot help with that.")
    result = QueryExtractor(llm).extract("Show me trees that only the leaves are used.")

    assert isinstance(result, FellBack)
    assert result.used_primary is False
    assert result.query.only is True
    assert result.query.part_used == "leaves"


def test_provider_error_falls_back_to_heuristic():
    llm = FakeLLM(error=RuntimeError("connection reset"))
    result = QueryExtractor(llm).extract("Which trees give food?")

    assert isinstance(result, FellBack)
    assert "connection reset" in result.reason
    assert result.query.ecosystem_service == "Food"


def test_wrong_field_types_fall_back():
    llm = FakeLLM(reply={"species": ["a", "b"]})
    result = QueryExtractor(llm).extract("Which trees give food?")
    assert isinstance(result, FellBack)


def test_disabled_extraction_uses_heuristic():
    result = QueryExtractor(None).extract("Which species use the seeds?")
    assert isinstance(result, FellBack)
    assert result.reason == "extraction disabled"
    assert result.query.part_used == "seed"


def test_parse_llm_json_coerces_modifiers():
    parsed = parse_llm_json('{"only": "true", "and": "bark"}', ExtractionResponse)
    assert parsed.only is True
    # Non-object "and" values are dropped
    assert parsed.and_ is None
    assert parse_llm_json('{"only": "false"}', ExtractionResponse).only is False
    assert parse_llm_json('{"only": 0}', ExtractionResponse).only is False
    assert parse_llm_json("no json here", ExtractionResponse) is None
