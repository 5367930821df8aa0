"""Tests for the echo and hello routes."""

import logging
from typing import List

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request
from starlette.types import Message

from muxserver.api import Router
from muxserver.app import create_app
from muxserver.handlers import EchoHandler, HelloHandler
from muxserver.handlers.hello import INTERNAL_ERROR_TEXT

log = logging.getLogger('tests.handlers')


def _request(messages: List[Message], path: str = '/') -> Request:
    """Build a request whose body arrives as `messages`, in order."""
    pending = list(messages)

    async def receive() -> Message:
        return pending.pop(0)

    scope = {
        'type': 'http',
        'method': 'POST',
        'path': path,
        'headers': [],
        'query_string': b'',
    }
    return Request(scope, receive)


def _disconnect_after(*chunks: bytes) -> List[Message]:
    messages: List[Message] = [
        {'type': 'http.request', 'body': chunk, 'more_body': True} for chunk in chunks
    ]
    messages.append({'type': 'http.disconnect'})
    return messages


@pytest.fixture
def client() -> TestClient:
    routes = [EchoHandler(log), HelloHandler(log)]
    return TestClient(create_app(Router(routes)))


class TestEcho:
    def test_pattern(self) -> None:
        assert EchoHandler(log).pattern == 'echo'

    @pytest.mark.parametrize(
        'body',
        [
            b'',
            b'ping',
            bytes(range(256)),
            b'\x00\r\n\r\n\x00',
            'héllo wörld'.encode('utf-8'),
            b'x' * (1 << 20),
        ],
    )
    def test_response_body_equals_request_body(self, client: TestClient, body: bytes) -> None:
        response = client.post('/echo', content=body)
        assert response.status_code == 200
        assert response.content == body

    def test_any_method(self, client: TestClient) -> None:
        response = client.put('/echo', content=b'put-body')
        assert response.status_code == 200
        assert response.content == b'put-body'

    @pytest.mark.asyncio
    async def test_multiple_chunks_preserve_order(self) -> None:
        messages = [
            {'type': 'http.request', 'body': b'one,', 'more_body': True},
            {'type': 'http.request', 'body': b'two,', 'more_body': True},
            {'type': 'http.request', 'body': b'three', 'more_body': False},
        ]
        response = await EchoHandler(log).handle(_request(messages))
        assert response.status_code == 200
        assert response.body == b'one,two,three'

    @pytest.mark.asyncio
    async def test_read_failure_logged_and_partial_body_kept(self, caplog) -> None:
        caplog.set_level(logging.WARNING, logger='tests.handlers')

        response = await EchoHandler(log).handle(_request(_disconnect_after(b'par', b'tial')))

        assert response.status_code == 200
        assert response.body == b'partial'
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert 'Failed to handle request' in warnings[0].getMessage()


class TestHello:
    def test_pattern(self) -> None:
        assert HelloHandler(log).pattern == 'hello'

    @pytest.mark.parametrize('text', ['world', '', 'Gopher', 'multi\nline', 'привет', '  spaced  '])
    def test_greets_body(self, client: TestClient, text: str) -> None:
        response = client.post('/hello', content=text.encode('utf-8'))
        assert response.status_code == 200
        assert response.text == f'Hello, {text}\n'
        assert response.headers['content-type'] == 'text/plain; charset=utf-8'

    def test_body_bytes_passed_through(self, client: TestClient) -> None:
        response = client.post('/hello', content=b'\xff\xfe')
        assert response.content == b'Hello, \xff\xfe\n'

    @pytest.mark.asyncio
    async def test_read_failure_answers_500(self, caplog) -> None:
        caplog.set_level(logging.ERROR, logger='tests.handlers')

        response = await HelloHandler(log).handle(_request(_disconnect_after(b'wor')))

        assert response.status_code == 500
        assert response.body == INTERNAL_ERROR_TEXT.encode()
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert 'Failed to read request' in errors[0].getMessage()
