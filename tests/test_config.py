import importlib
import logging
from pathlib import Path

from dms_core.core import config as config_module
from dms_core.core import logging_config
from dms_core.core.config import BackendConfig
from dms_core.core.logging_config import get_logger, reset_handlers, setup_logging


def test_download_dir_defaults_under_storage(tmp_path):
    config = BackendConfig(storage_dir=str(tmp_path))
    assert config.storage_dir == tmp_path
    assert config.download_dir == tmp_path / "Downloads"


def test_from_env_snapshots_module_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(config_module, "API_BASE_URL", "https://dms.example/api")
    monkeypatch.setattr(config_module, "MOCK_API_ENABLED", False)
    monkeypatch.setattr(config_module, "STORAGE_DIR", tmp_path)
    monkeypatch.setattr(config_module, "DOWNLOAD_DIR", tmp_path / "dl")

    config = BackendConfig.from_env()

    assert config.base_url == "https://dms.example/api"
    assert config.mock_enabled is False
    assert config.download_dir == tmp_path / "dl"
    assert config.static_otp == config_module.MOCK_STATIC_OTP


def test_file_logging(tmp_path):
    log_file = tmp_path / "logs" / "dms.log"
    setup_logging("DEBUG", str(log_file), enable_file_logging=True)
    try:
        get_logger("dms_core.tests").info("hello from tests")
        for handler in logging.getLogger("dms_core").handlers:
            handler.flush()
        assert "hello from tests" in Path(log_file).read_text(encoding="utf-8")
    finally:
        reset_handlers()


def test_import_installs_only_a_null_handler():
    package_logger = logging.getLogger("dms_core")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    importlib.reload(logging_config)

    handlers = logging.getLogger("dms_core").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.NullHandler)


def test_setup_logging_leaves_root_logger_alone():
    root_handlers = list(logging.getLogger().handlers)
    setup_logging("WARNING")
    try:
        assert logging.getLogger().handlers == root_handlers
        package_handlers = logging.getLogger("dms_core").handlers
        assert [type(h) for h in package_handlers] == [logging.StreamHandler]
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        reset_handlers()
