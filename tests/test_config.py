from nu_result_proxy.config import DEFAULT_USER_AGENT, Settings


def test_defaults():
    settings = Settings(environ={})

    assert settings.port == 3000
    assert settings.host == "0.0.0.0"
    assert settings.results_base_url == "http://results.nu.ac.bd"
    assert settings.navigation_timeout_ms == 30000
    assert settings.submit_timeout == 30.0
    assert settings.user_agent == DEFAULT_USER_AGENT
    assert settings.headless is True
    assert settings.log_level == "INFO"


def test_environment_overrides():
    settings = Settings(
        environ={
            "PORT": "8080",
            "HEADLESS": "false",
            "SUBMIT_TIMEOUT": "12.5",
            "LOG_LEVEL": "debug",
            "RESULTS_BASE_URL": "http://localhost:9000",
        }
    )

    assert settings.port == 8080
    assert settings.headless is False
    assert settings.submit_timeout == 12.5
    assert settings.log_level == "DEBUG"
    assert settings.results_base_url == "http://localhost:9000"


def test_blank_port_falls_back_to_default():
    assert Settings(environ={"PORT": ""}).port == 3000


def test_explicit_overrides_win():
    settings = Settings(overrides={"port": 5000}, environ={"PORT": "8080"})

    assert settings.port == 5000
