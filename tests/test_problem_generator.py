import pytest

from prepdeck.errors import InternalError
from prepdeck.services.problem_generator import (
    BUSY_MESSAGE,
    ProblemGenerator,
    call_gemini_with_retry,
    extract_first_json_object,
)
from tests.factories import FakeClient


def test_extract_first_json_object():
    assert extract_first_json_object('```json\n{"a": {"b": 1}}\n```') == {"a": {"b": 1}}
    with pytest.raises(ValueError):
        extract_first_json_object("no json here")


def test_retries_on_unavailable_then_succeeds():
    client = FakeClient(Exception("503 UNAVAILABLE"), '{"ok": true}')
    delays = []
    response = call_gemini_with_retry(client, "m", "prompt", sleep=delays.append)
    assert response.text == '{"ok": true}'
    assert delays == [1]


def test_rate_limit_backs_off_longer_and_gives_up():
    client = FakeClient(*[Exception("429 RESOURCE_EXHAUSTED")] * 4)
    delays = []
    with pytest.raises(InternalError) as info:
        call_gemini_with_retry(client, "m", "prompt", sleep=delays.append)
    assert info.value.message == BUSY_MESSAGE
    assert delays == [2, 4, 8]
    assert client.models.calls == 4


def test_other_errors_are_not_retried():
    client = FakeClient(ValueError("bad request"))
    with pytest.raises(ValueError):
        call_gemini_with_retry(client, "m", "prompt", sleep=lambda _: None)
    assert client.models.calls == 1


def test_generate_fills_in_kind():
    generator = ProblemGenerator(client=FakeClient('Here: {"title": "LRU", "content": {}}'))
    assert generator.generate("machine_coding", role="Frontend") == {
        "title": "LRU", "content": {}, "kind": "machine_coding",
    }


def test_generate_without_json():
    generator = ProblemGenerator(client=FakeClient("sorry"))
    with pytest.raises(InternalError):
        generator.generate("dsa")


def test_unconfigured_generator():
    generator = ProblemGenerator(api_key="")
    assert not generator.configured
    with pytest.raises(InternalError):
        generator.generate("dsa")
