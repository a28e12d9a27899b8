"""Tests for logging configuration."""

from __future__ import annotations

import json
from collections.abc import Generator
from typing import Any

import pytest
import structlog

from dungeon_engine.core.config import Settings
from dungeon_engine.core.logging import (
    ENGINE_NAME,
    add_engine_name,
    build_processors,
    configure_from_settings,
    session_context,
)
from dungeon_engine.engine.loop import PlayerIntent
from dungeon_engine.engine.session import GameSession
from dungeon_engine.models.enums import GameMode


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore structlog defaults around each test."""
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


class TestProcessors:
    """Tests for the processor chain."""

    def test_engine_name_added(self) -> None:
        """Test entries are tagged with the engine name."""
        event = add_engine_name(None, "info", {"event": "Turn applied"})

        assert event["app"] == ENGINE_NAME

    def test_engine_name_not_overwritten(self) -> None:
        """Test an explicit app value is kept."""
        event = add_engine_name(None, "info", {"event": "x", "app": "renderer"})

        assert event["app"] == "renderer"

    def test_json_renderer_last(self) -> None:
        """Test JSON output ends with the JSON renderer."""
        processors = build_processors(json_format=True)

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert processors[0] is structlog.contextvars.merge_contextvars

    def test_console_renderer_last(self) -> None:
        """Test development output ends with the console renderer."""
        processors = build_processors(json_format=False)

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestSessionContext:
    """Tests for session-scoped log context."""

    def test_context_bound_and_restored(self) -> None:
        """Test the session identity is visible only inside the block."""
        with session_context("abc123", mode="survival"):
            bound = structlog.contextvars.get_contextvars()

        assert bound == {"session_id": "abc123", "mode": "survival"}
        assert structlog.contextvars.get_contextvars() == {}

    def test_nested_sessions(self) -> None:
        """Test an inner session does not leak into the outer one."""
        with session_context("outer"):
            with session_context("inner"):
                assert structlog.contextvars.get_contextvars()["session_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["session_id"] == "outer"

    def test_turns_log_with_session_identity(self, settings: Any) -> None:
        """Test turn callbacks run with their session's context bound."""
        session = GameSession.create(GameMode.SURVIVAL, turn_limit=5, seed=1, settings=settings)
        seen: list[dict[str, Any]] = []
        session.add_turn_callback(lambda _: seen.append(structlog.contextvars.get_contextvars()))

        session.submit(PlayerIntent.wait())

        assert seen == [{"session_id": session.session_id, "mode": "survival"}]
        assert structlog.contextvars.get_contextvars() == {}


class TestConfigureFromSettings:
    """Tests for settings-driven configuration."""

    def test_debug_forces_debug_level(
        self,
        settings: Any,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test debug mode lets debug entries through."""
        configure_from_settings(settings.model_copy(update={"debug": True, "log_json": True}))

        structlog.get_logger("test").debug("NPC acted", npc_id="orc-1")

        entry = json.loads(capsys.readouterr().out.strip())
        assert entry["event"] == "NPC acted"
        assert entry["level"] == "debug"
        assert entry["app"] == ENGINE_NAME

    def test_level_from_settings(
        self,
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test the configured level filters lower entries."""
        monkeypatch.chdir(tmp_path)
        configure_from_settings(Settings(log_level="WARNING", log_json=True))
        logger = structlog.get_logger("test")

        logger.info("Turn applied", turn=1)
        logger.warning("Turn callback failed", turn=2)

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["turn"] == 2
