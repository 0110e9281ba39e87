"""Test configuration loading and the command-line interface."""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ordhook.cli import cli
from ordhook.core.logging import StructuredFormatter, set_request_id, setup_logging
from ordhook.core.settings import LoggingSettings, Settings, load_settings
from ordhook.exceptions import ConfigurationException
from ordhook.webhook.security import compute_signature


class TestSettings:
    """Test settings sources."""
    
    def test_defaults(self):
        settings = Settings(_env_file=None)
        
        assert settings.webhook.port == 3010
        assert settings.webhook.path == "/webhook"
        assert settings.webhook.signature_header == "ordinals-sig"
        assert settings.wallet.ord_binary == "~/bin/ord"
        assert settings.download.download_dir == Path("image-folder")
    
    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ORDHOOK_WEBHOOK_SECRET_KEY", "from-env")
        monkeypatch.setenv("ORDHOOK_WALLET_WALLET_NAME", "ops")
        monkeypatch.setenv("ORDHOOK_DOWNLOAD_TIMEOUT_SECONDS", "15")
        
        settings = Settings(_env_file=None)
        
        assert settings.webhook.secret_key.get_secret_value() == "from-env"
        assert settings.wallet.wallet_name == "ops"
        assert settings.download.timeout_seconds == 15
    
    def test_secret_not_leaked_in_repr(self, monkeypatch):
        monkeypatch.setenv("ORDHOOK_WEBHOOK_SECRET_KEY", "hunter2")
        assert "hunter2" not in repr(Settings(_env_file=None))
    
    def test_from_yaml_file(self, tmp_path):
        config = tmp_path / "ordhook.yaml"
        config.write_text(
            "webhook:\n"
            "  port: 4000\n"
            "  secret_key: from-file\n"
            "wallet:\n"
            "  wallet_name: yaml-wallet\n"
        )
        
        settings = load_settings(config)
        
        assert settings.webhook.port == 4000
        assert settings.webhook.secret_key.get_secret_value() == "from-file"
        assert settings.wallet.wallet_name == "yaml-wallet"
    
    def test_from_json_file(self, tmp_path):
        config = tmp_path / "ordhook.json"
        config.write_text(json.dumps({"download": {"download_dir": "/srv/files"}}))
        
        assert load_settings(config).download.download_dir == Path("/srv/files")
    
    def test_unsupported_file_format(self, tmp_path):
        config = tmp_path / "ordhook.ini"
        config.write_text("[webhook]")
        
        with pytest.raises(ConfigurationException):
            load_settings(config)


class TestLogging:
    """Test logging setup."""
    
    def test_structured_formatter_includes_request_id(self):
        set_request_id("req-42")
        record = logging.LogRecord("ordhook.test", logging.INFO, __file__, 1, "hello", None, None)
        record.exit_code = 3
        
        data = json.loads(StructuredFormatter().format(record))
        
        assert data["message"] == "hello"
        assert data["request_id"] == "req-42"
        assert data["exit_code"] == 3
    
    def test_file_handler_optional(self, tmp_path):
        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            setup_logging(LoggingSettings(log_dir=None))
            assert len(root.handlers) == 1
            
            setup_logging(LoggingSettings(log_dir=tmp_path / "logs", log_format="json"))
            assert len(root.handlers) == 2
            assert (tmp_path / "logs" / "ordhook.log").exists()
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])


class TestCli:
    """Test click commands."""
    
    def test_sign(self, tmp_path):
        body = b'{"fileUrl":"https://x/y/img.png","feeRate":10,"address":"bc1q"}'
        body_file = tmp_path / "body.json"
        body_file.write_bytes(body)
        
        result = CliRunner().invoke(cli, ["sign", str(body_file), "--secret", "s3cret"])
        
        assert result.exit_code == 0
        assert result.output.strip() == compute_signature("s3cret", body)
    
    def test_sign_from_stdin_with_env_secret(self):
        result = CliRunner().invoke(
            cli, ["sign", "-"],
            input="{}",
            env={"ORDHOOK_WEBHOOK_SECRET_KEY": "env-secret"}
        )
        
        assert result.exit_code == 0
        assert result.output.strip() == compute_signature("env-secret", b"{}")
    
    def test_serve_uses_cli_overrides(self, tmp_path):
        config = tmp_path / "ordhook.yaml"
        config.write_text("webhook:\n  secret_key: abc\n")
        
        root = logging.getLogger()
        saved = list(root.handlers), root.level
        try:
            with patch("ordhook.webhook.server.uvicorn.run") as uvicorn_run:
                result = CliRunner().invoke(
                    cli, ["serve", "--config", str(config), "--host", "127.0.0.1", "--port", "9999"]
                )
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])
        
        assert result.exit_code == 0, result.output
        _, kwargs = uvicorn_run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 9999
    
    def test_init_writes_loadable_config(self, tmp_path):
        output = tmp_path / ".ordhook.yaml"
        
        result = CliRunner().invoke(cli, ["init", "--output", str(output)])
        
        assert result.exit_code == 0
        settings = load_settings(output)
        assert settings.webhook.port == 3010
        assert settings.wallet.wallet_name == "ilyaFriends"
        
        again = CliRunner().invoke(cli, ["init", "--output", str(output)])
        assert again.exit_code == 1
