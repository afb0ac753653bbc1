from __future__ import annotations

# pyright: reportAny=false
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from reconcile.config import (
    CheckoutConfig,
    Config,
    ConfigSourceName,
    LogFormat,
    LogLevel,
    PROJECT_CONFIG_NAME,
)
from reconcile.enums import DiscardPolicy
from reconcile.exceptions import ConfigLoadError, ConfigValidationError

if TYPE_CHECKING:
    from pyfakefs.fake_filesystem import FakeFilesystem


class TestDefaults:
    def test_empty_dict_gives_defaults(self) -> None:
        config = Config.from_dict({})

        assert config.discard_changes is DiscardPolicy.NEVER
        assert config.interactive is None
        assert config.checkout == CheckoutConfig(remote="composer", preview_limit=10)
        assert config.logging.level is LogLevel.INFO
        assert config.logging.format is LogFormat.JSON
        assert config.logging.file == ""

    def test_unknown_keys_are_ignored(self) -> None:
        config = Config.from_dict({"future_option": 1, "checkout": {"depth": 3}})

        assert config.checkout.remote == "composer"

    def test_frozen(self) -> None:
        config = Config.from_dict({})

        with pytest.raises(ValueError, match="frozen"):
            config.interactive = True  # pyright: ignore[reportAttributeAccessIssue]


class TestDiscardChanges:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, DiscardPolicy.ALWAYS),
            (False, DiscardPolicy.NEVER),
            ("true", DiscardPolicy.ALWAYS),
            ("false", DiscardPolicy.NEVER),
            ("stash", DiscardPolicy.STASH),
            (" Stash ", DiscardPolicy.STASH),
        ],
    )
    def test_accepted_values(self, value: object, expected: DiscardPolicy) -> None:
        assert Config.from_dict({"discard_changes": value}).discard_changes is expected

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"discard_changes": "sometimes"}, source="test.toml")

        error = exc_info.value
        assert error.key == "discard_changes"
        assert error.value == "sometimes"
        assert error.source == "test.toml"
        assert "(in test.toml)" in str(error)


class TestCheckoutValidation:
    @pytest.mark.parametrize("remote", ["", "with/slash", "with space"])
    def test_invalid_remote(self, remote: str) -> None:
        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_dict({"checkout": {"remote": remote}})

        assert exc_info.value.key == "checkout.remote"

    def test_preview_limit_must_be_positive(self) -> None:
        with pytest.raises(ConfigValidationError, match=r"checkout\.preview_limit"):
            _ = Config.from_dict({"checkout": {"preview_limit": 0}})

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ConfigValidationError, match=r"logging\.level"):
            _ = Config.from_dict({"logging": {"level": "chatty"}})


class TestFromFile:
    def test_loads_file(self, fs: "FakeFilesystem") -> None:
        path = Path("/project/.reconcile.toml")
        fs.create_file(path, contents='discard_changes = true\n[checkout]\nremote = "upstream"\n')

        config = Config.from_file(path)

        assert config.discard_changes is DiscardPolicy.ALWAYS
        assert config.checkout.remote == "upstream"
        assert config.sources[0].path == path

    def test_invalid_toml(self, fs: "FakeFilesystem") -> None:
        path = Path("/project/.reconcile.toml")
        fs.create_file(path, contents="discard_changes = \n")

        with pytest.raises(ConfigLoadError):
            _ = Config.from_file(path)

    def test_validation_error_names_the_file(self, fs: "FakeFilesystem") -> None:
        path = Path("/project/.reconcile.toml")
        fs.create_file(path, contents="[checkout]\npreview_limit = -1\n")

        with pytest.raises(ConfigValidationError) as exc_info:
            _ = Config.from_file(path)

        assert exc_info.value.source == str(path)


class TestLoad:
    def test_precedence(self, fs: "FakeFilesystem", monkeypatch: pytest.MonkeyPatch) -> None:
        project = Path("/project")
        fs.create_file(
            project / PROJECT_CONFIG_NAME,
            contents=(
                'discard_changes = "stash"\n[checkout]\nremote = "project"\npreview_limit = 3\n'
            ),
        )
        monkeypatch.setenv("RECONCILE_CHECKOUT__REMOTE", "fromenv")

        config = Config.load(project_root=project, overrides={"checkout": {"preview_limit": 7}})

        assert config.discard_changes is DiscardPolicy.STASH
        assert config.checkout.remote == "fromenv"
        assert config.checkout.preview_limit == 7

    def test_user_config_is_read(
        self, fs: "FakeFilesystem", monkeypatch: pytest.MonkeyPatch
    ) -> None:
        user_config = Path("/home/user/.config/reconcile/config.toml")
        fs.create_file(user_config, contents='[logging]\nlevel = "debug"\n')
        monkeypatch.setattr(
            "reconcile.config._discovery.get_user_config_path", lambda: user_config
        )

        config = Config.load(project_root=Path("/nowhere"))

        assert config.logging.level is LogLevel.DEBUG

    def test_env_can_be_excluded(
        self, fs: "FakeFilesystem", monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RECONCILE_CHECKOUT__REMOTE", "fromenv")

        config = Config.load(project_root=Path("/nowhere"), include_env=False)

        assert config.checkout.remote == "composer"

    def test_sources_are_reported_highest_first(
        self, fs: "FakeFilesystem", monkeypatch: pytest.MonkeyPatch
    ) -> None:
        fs.create_file(Path("/project") / PROJECT_CONFIG_NAME, contents="")

        config = Config.load(project_root=Path("/project"), overrides={"interactive": False})

        names = [source.name for source in config.sources]
        assert names == [
            ConfigSourceName.OVERRIDE,
            ConfigSourceName.ENV,
            ConfigSourceName.PROJECT,
            ConfigSourceName.USER,
            ConfigSourceName.DEFAULT,
        ]
        assert config.interactive is False
