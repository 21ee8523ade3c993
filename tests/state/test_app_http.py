import json
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from conftest import wait_for_terminal
from donations_app.models import app as app_models
from donations_app.models.events import EventState
from donations_app.services.config import ClientSettings
from donations_app.state.app import create_controller

TOKEN = "abc"
USER = {"id": 7, "name": "Ana", "email": "ana@test.com", "image_url": None}
DONATIONS = [
    {"id": 1, "title": "Coats", "description": "Warm", "images": [{"url": "https://img/1"}]},
    {"id": 2, "title": "Books"},
]


class DonationsHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_POST(self):
        self.server.peers.append(self.client_address)
        length = int(self.headers.get("Content-Length") or 0)
        body = json.loads(self.rfile.read(length) or b"{}")
        if self.path == "/login" and body.get("password") == "qwertyuiop":
            self._reply(200, {"token": TOKEN, "user": USER})
        else:
            self._reply(401, {"message": "Invalid credentials"})

    def do_GET(self):
        self.server.peers.append(self.client_address)
        if self.path == "/donations" and self.headers.get("Authorization") == f"Bearer {TOKEN}":
            self._reply(200, {"donations": DONATIONS})
        else:
            self._reply(401, {"message": "Missing token"})

    def _reply(self, status, payload):
        data = json.dumps(payload).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def api_server():
    server = ThreadingHTTPServer(("127.0.0.1", 0), DonationsHandler)
    server.peers = []
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def test_retry_login_and_feed_reuse_one_connection(logger, api_server, monkeypatch):
    for name in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)
    host, port = api_server.server_address[:2]
    settings = ClientSettings(api_base_url=f"http://{host}:{port}", use_fake_gateway=False)
    app = create_controller(settings, logger=logger)
    try:
        app.login.set_email("ana@test.com")
        app.login.set_password("wrong-password")
        assert app.login.submit().accepted
        failed = wait_for_terminal(app.login.session.stream)
        assert failed.state is EventState.ERROR
        assert failed.cause.status_code == 401

        app.login.set_password("qwertyuiop")
        assert app.login.submit().accepted
        done = wait_for_terminal(app.login.session.stream)
        assert done.state is EventState.DONE, done.cause
        assert app.state.value.route == app_models.HOME_PATH

        app.home.load()
        feed = wait_for_terminal(app.home.stream)
        assert feed.state is EventState.DONE, feed.cause
        assert [donation.title for donation in app.home.state.value.donations] == ["Coats", "Books"]
    finally:
        app.dispose()

    assert len(api_server.peers) == 3
    assert len(set(api_server.peers)) == 1
    assert app.api_client.closed
    assert app.loop.stopped
