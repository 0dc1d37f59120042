import importlib
import json

import pytest

from content_scoring.models.parser_output import (
    ParserCounts,
    ParserOutput,
    Snippets,
    StatisticSnippet,
)
from content_scoring.models.validated_counts import VALIDATED_CATEGORIES
from content_scoring.tools.score_tool import score_tool
from content_scoring.tools.validate_tool import (
    InvalidValidationResponse,
    build_validation_prompt,
    extract_json_object,
    parse_validation_response,
    validate_tool,
)


def _five_statistics():
    return ParserOutput(
        url="https://example.com/report",
        counts=ParserCounts(statistics=5),
        snippets=Snippets(
            statistics=[
                StatisticSnippet(text=f"Figure {i}: {10 * i}% of readers agree.", value=f"{10 * i}%")
                for i in range(1, 6)
            ]
        ),
    )


def _response(**overrides):
    body = {cat: {"validated": 0, "rejected": []} for cat in VALIDATED_CATEGORIES}
    body.update(overrides)
    return json.dumps(body)


REJECT_THREE = {
    "validated": 2,
    "rejected": [
        {"index": 0, "reason": "no source"},
        {"index": 1, "reason": "no date"},
        {"index": 2, "reason": "marketing claim"},
    ],
}


def test_rejecting_three_of_five_statistics(config, fake_client):
    parsed = _five_statistics()
    client = fake_client(content=_response(statistics=REJECT_THREE))

    validated = validate_tool(parsed, config, client=client)

    assert validated.fallback is False
    assert validated.statistics == 2
    assert [r.index for r in validated.rejections["statistics"]] == [0, 1, 2]
    assert set(validated.rejections) == set(VALIDATED_CATEGORIES)

    result = score_tool(validated, parsed.counts)
    assert result.graaf.credibility == 1
    assert result.graaf.accuracy == 1


def test_request_uses_configured_model_and_temperature(config, fake_client):
    client = fake_client(content=_response(statistics=REJECT_THREE))
    validate_tool(_five_statistics(), config, client=client)

    (call,) = client.completions.calls
    assert call["model"] == "test-model"
    assert call["temperature"] == 0.0
    assert call["messages"][0]["role"] == "system"
    assert "[4] Figure 5" in call["messages"][1]["content"]


def test_fenced_json_is_accepted(config, fake_client):
    content = "```json\n" + _response(statistics={"validated": 5, "rejected": []}) + "\n```"
    validated = validate_tool(_five_statistics(), config, client=fake_client(content=content))
    assert validated.fallback is False
    assert validated.statistics == 5


@pytest.mark.parametrize(
    "content",
    [
        None,
        "",
        "not json at all",
        json.dumps({"statistics": {"validated": 2, "rejected": []}}),
        _response(statistics={"validated": 3, "rejected": [{"index": 0, "reason": "x"}]}),
        _response(statistics={"validated": 6, "rejected": []}),
        _response(
            statistics={
                "validated": 3,
                "rejected": [{"index": 1, "reason": "x"}, {"index": 1, "reason": "y"}],
            }
        ),
        _response(
            statistics={
                "validated": 3,
                "rejected": [{"index": 1, "reason": "x"}, {"index": 7, "reason": "y"}],
            }
        ),
    ],
    ids=[
        "none",
        "empty",
        "prose",
        "missing-categories",
        "not-conserving",
        "more-than-detected",
        "duplicate-index",
        "index-out-of-range",
    ],
)
def test_untrustworthy_response_falls_back(config, fake_client, content):
    parsed = _five_statistics()
    validated = validate_tool(parsed, config, client=fake_client(content=content))

    assert validated.fallback is True
    assert validated.fallback_reason
    assert validated.statistics == parsed.counts.statistics
    assert all(v == [] for v in validated.rejections.values())


def test_api_error_falls_back(config, fake_client):
    client = fake_client(error=TimeoutError("read timed out"))
    validated = validate_tool(_five_statistics(), config, client=client)
    assert validated.fallback is True
    assert "TimeoutError" in validated.fallback_reason
    assert validated.statistics == 5


def test_disabled_validator_falls_back_without_calling(config, fake_client):
    config.validator.enabled = False
    client = fake_client(content=_response())
    validated = validate_tool(_five_statistics(), config, client=client)
    assert validated.fallback is True
    assert validated.fallback_reason == "Validation disabled"
    assert client.completions.calls == []


def test_missing_api_key_falls_back(config, monkeypatch):
    monkeypatch.delenv(config.validator.api_key_env, raising=False)
    validated = validate_tool(_five_statistics(), config)
    assert validated.fallback is True
    assert validated.fallback_reason == "No validator API key configured"


def test_client_built_for_a_call_is_closed(config, fake_client, monkeypatch):
    module = importlib.import_module("content_scoring.tools.validate_tool")
    built = []

    def build(cfg, api_key):
        built.append(fake_client(content=_response(statistics=REJECT_THREE)))
        return built[-1]

    monkeypatch.setenv(config.validator.api_key_env, "sk-test")
    monkeypatch.setattr(module, "_build_client", build)

    validated = validate_tool(_five_statistics(), config)

    assert validated.statistics == 2
    (client,) = built
    assert len(client.completions.calls) == 1
    assert client.closed is True


def test_injected_client_is_left_open(config, fake_client):
    client = fake_client(content=_response(statistics=REJECT_THREE))
    validate_tool(_five_statistics(), config, client=client)
    assert client.closed is False


def test_failed_parse_falls_back(config, fake_client):
    failed = ParserOutput.failed("https://example.com/", "Empty or invalid HTML document")
    validated = validate_tool(failed, config, client=fake_client(content=_response()))
    assert validated.fallback is True
    assert validated.statistics == 0


def test_nothing_detected_needs_no_call(config, fake_client):
    client = fake_client(content=_response())
    validated = validate_tool(ParserOutput(url="https://example.com/"), config, client=client)
    assert validated.fallback is False
    assert all(getattr(validated, cat) == 0 for cat in VALIDATED_CATEGORIES)
    assert client.completions.calls == []


def test_items_beyond_the_sample_count_as_validated():
    parsed = ParserOutput(
        url="https://example.com/",
        counts=ParserCounts(statistics=30),
        snippets=Snippets(
            statistics=[StatisticSnippet(text=f"Line {i} has {i}%") for i in range(25)]
        ),
    )
    validated = parse_validation_response(
        _response(statistics={"validated": 29, "rejected": [{"index": 24, "reason": "vague"}]}),
        parsed,
    )
    assert validated.statistics == 29

    with pytest.raises(InvalidValidationResponse):
        parse_validation_response(
            _response(statistics={"validated": 29, "rejected": [{"index": 25, "reason": "x"}]}),
            parsed,
        )


def test_prompt_lists_counts_and_indexes():
    prompt = build_validation_prompt(_five_statistics())
    assert "## statistics (5 detected, 5 shown)" in prompt
    assert "## faq (0 detected, 0 shown)" in prompt
    assert "[0] Figure 1" in prompt


def test_extract_json_object_ignores_surrounding_text():
    assert extract_json_object('Here you go: {"a": {"b": 1}} thanks') == '{"a": {"b": 1}}'
