import pytest

from conftest import ScriptedDonationGateway, ScriptedLoginGateway, wait_for_terminal
from donations_app.core.loop import BackgroundLoop
from donations_app.models import app as app_models
from donations_app.models.events import EventState
from donations_app.services import gateway as gateway_service
from donations_app.services.config import ClientSettings
from donations_app.state.app import AppController, create_controller


@pytest.fixture
def make_app(logger):
    apps = []

    def build(**settings):
        login_gateway = ScriptedLoginGateway()
        donation_gateway = ScriptedDonationGateway()
        controller = AppController(
            settings=ClientSettings(**settings),
            logger=logger,
            login_gateway=login_gateway,
            donation_gateway=donation_gateway,
        )
        apps.append(controller)
        return controller, login_gateway, donation_gateway

    yield build
    for controller in apps:
        controller.dispose()


def log_in(app, email="test@test.com", password="qwertyuiop"):
    app.login.set_email(email)
    app.login.set_password(password)
    outcome = app.login.submit()
    if outcome.accepted:
        wait_for_terminal(app.login.session.stream)
    return outcome


def test_login_navigates_home_and_feed_uses_token(logger, make_app):
    app, _, donations = make_app()
    log_in(app)
    app.home.ensure_loaded()
    assert wait_for_terminal(app.home.stream).state is EventState.DONE

    state = app.state.value
    assert state.route == app_models.HOME_PATH
    assert state.is_authenticated
    assert state.login.user.email == "test@test.com"
    assert donations.tokens == ["token"]
    assert any(record.get("user_id") == state.login.user.id for record in logger.records)


def test_both_screens_share_one_background_loop(make_app):
    app, _, _ = make_app()
    log_in(app)
    app.home.load()
    wait_for_terminal(app.home.stream)

    assert app.loop.running
    app.dispose()
    assert app.loop.stopped
    assert not app.loop.running


def test_home_route_requires_login(make_app):
    app, _, _ = make_app()
    app.navigate(app_models.HOME_PATH)
    assert app.state.value.route == app_models.LOGIN_PATH


def test_logout_returns_to_login(logger, make_app):
    app, _, _ = make_app()
    log_in(app)
    assert app.state.value.route == app_models.HOME_PATH

    app.logout()
    assert app.state.value == app_models.AppState()
    assert app.login.state.value.email == "test@test.com"
    assert "session.logout" in logger.events()


def test_password_rule_follows_settings(make_app):
    app, login_gateway, _ = make_app(password_min_length=4)
    outcome = log_in(app, password="1234")
    assert outcome.accepted
    assert login_gateway.calls == [("test@test.com", "1234")]


def test_injected_loop_is_left_running(logger):
    loop = BackgroundLoop(name="shared-test-loop")
    app = AppController(
        settings=ClientSettings(),
        logger=logger,
        login_gateway=ScriptedLoginGateway(),
        donation_gateway=ScriptedDonationGateway(),
        loop=loop,
    )
    log_in(app)
    app.dispose()
    app.dispose()
    assert loop.running
    assert logger.events("app.disposed") == ["app.disposed"]
    loop.stop()


def test_create_controller_uses_fake_gateways_without_base_url(logger):
    app = create_controller(ClientSettings(fake_latency_seconds=0), logger=logger)
    assert isinstance(app.home._gateway, gateway_service.FakeDonationGateway)
    assert app.api_client is None
    assert "app.bootstrap" in logger.events()
    app.dispose()
    assert app.login.session.disposed
