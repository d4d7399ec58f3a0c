import pytest
from pydantic import ValidationError

from envelope import failure, normalize
from models import ChatAnswer, EnvelopeMessage


class TestNormalize:
    def test_success_keeps_data_and_has_no_messages(self):
        envelope = normalize(True, {"answer": "42"}, 200, "")
        assert envelope.success is True
        assert envelope.data == {"answer": "42"}
        assert envelope.messages == []

    def test_success_dumps_pydantic_data(self):
        envelope = normalize(True, ChatAnswer(answer="hi"), 200, "")
        assert envelope.data == {"answer": "hi"}

    def test_failure_has_single_error_message(self):
        envelope = normalize(False, None, 429, '{"error": "rate limited"}')
        assert envelope.success is False
        assert envelope.data is None
        assert len(envelope.messages) == 1
        message = envelope.messages[0]
        assert message.code == 429
        assert message.type == "error"
        assert message.message == '{"error": "rate limited"}'

    def test_failure_drops_data(self):
        envelope = normalize(False, {"answer": "ignored"}, 500, "boom")
        assert envelope.data is None

    def test_failure_shorthand(self):
        assert failure(400, "bad") == normalize(False, None, 400, "bad")

    def test_serialized_shape(self):
        dumped = normalize(False, None, 401, "nope").model_dump()
        assert dumped == {
            "success": False,
            "data": None,
            "messages": [{"code": 401, "type": "error", "message": "nope"}],
        }

    def test_message_type_is_always_error(self):
        with pytest.raises(ValidationError):
            EnvelopeMessage(code=200, type="info", message="not produced")
