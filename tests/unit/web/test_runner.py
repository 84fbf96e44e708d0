"""Tests for the uvicorn runner options."""

from sessionapi.app import App
from sessionapi.web import runner


def test_options_follow_config(make_config):
    options = runner.uvicorn_options(make_config(host="0.0.0.0", port=9000, debug=True))
    assert options["host"] == "0.0.0.0"
    assert options["port"] == 9000
    assert options["log_level"] == "debug"
    assert options["access_log"] is True
    assert "proxy_headers" not in options
    assert options["log_config"]["formatters"]["access"]["fmt"] == '%(asctime)s - "%(request_line)s" %(status_code)s'


def test_secure_cookies_trust_proxy(make_config):
    options = runner.uvicorn_options(make_config(cookie_secure=True, forwarded_allow_ips="10.0.0.1"))
    assert options["log_level"] == "info"
    assert options["proxy_headers"] is True
    assert options["forwarded_allow_ips"] == "10.0.0.1"


def test_run_server(make_config, monkeypatch):
    """Test that run_server hands the FastAPI app and options to uvicorn."""
    captured = {}
    monkeypatch.setattr(runner.uvicorn, "run", lambda fastapi_app, **kwargs: captured.update(app=fastapi_app, **kwargs))
    config = make_config(port=9001)

    runner.run_server(App(config), config)

    assert captured["port"] == 9001
    assert captured["app"].title == "Session API"
