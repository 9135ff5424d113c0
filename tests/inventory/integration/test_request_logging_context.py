"""Request-scoped structlog context bound around HTTP handlers."""

import structlog
from inventory.utils.logging import add_context, request_context


class TestRequestContext:
    def test_fields_are_bound_inside_the_block(self):
        with request_context(request_id="req-1", method="POST", path="/inventory/validate"):
            bound = structlog.contextvars.get_contextvars()

        assert bound == {"request_id": "req-1", "method": "POST", "path": "/inventory/validate"}

    def test_context_is_cleared_on_exit(self):
        with request_context(request_id="req-1"):
            pass

        assert structlog.contextvars.get_contextvars() == {}

    def test_leftover_context_does_not_leak_into_the_next_request(self):
        add_context(request_id="stale")

        with request_context(request_id="req-2"):
            assert structlog.contextvars.get_contextvars() == {"request_id": "req-2"}

    def test_context_is_cleared_when_the_handler_raises(self):
        try:
            with request_context(request_id="req-3"):
                raise RuntimeError("handler failed")
        except RuntimeError:
            pass

        assert structlog.contextvars.get_contextvars() == {}
