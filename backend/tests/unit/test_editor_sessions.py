"""Unit tests for the editor session registry."""

from datetime import datetime, timedelta, timezone

import pytest

from app.application.services import ClientDialog, EditorSessionRegistry, PreviewRegistry
from app.domain.entities import PendingFile
from app.domain.exceptions import EntityNotFoundError
from app.infrastructure.dependencies import build_editor_sessions
from app.infrastructure.notifications import SessionNotifier


@pytest.fixture
def registry(uploads) -> EditorSessionRegistry:
    return build_editor_sessions(uploads)


def test_open_creates_independent_dialogs(registry: EditorSessionRegistry):
    first = registry.open()
    second = registry.open()

    assert first.id != second.id
    assert first.dialog is not second.dialog
    assert first.dialog.notifier is not second.dialog.notifier
    assert len(registry) == 2


def test_preview_urls_are_routable_per_session(registry: EditorSessionRegistry):
    session = registry.open()
    url = session.dialog.change_profile_image(PendingFile("logo.png", b"png"))
    assert url.startswith(f"/api/v1/client-editor/sessions/{session.id}/previews/")


def test_close_releases_previews(registry: EditorSessionRegistry):
    session = registry.open()
    session.dialog.change_profile_image(PendingFile("logo.png", b"png"))

    registry.close(session.id)

    assert session.dialog.previews.live_count == 0
    assert session.dialog.is_open is False
    with pytest.raises(EntityNotFoundError):
        registry.get(session.id)


def test_close_unknown_session_raises(registry: EditorSessionRegistry):
    with pytest.raises(EntityNotFoundError):
        registry.close("nope")


def test_close_all(registry: EditorSessionRegistry):
    registry.open()
    registry.open()
    assert registry.close_all() == 2
    assert len(registry) == 0


class _Clock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now += timedelta(minutes=minutes)


@pytest.fixture
def clock() -> _Clock:
    return _Clock()


def _bounded(uploads, clock: _Clock, **limits) -> EditorSessionRegistry:
    return EditorSessionRegistry(
        lambda session_id: ClientDialog(uploads, SessionNotifier(session_id), PreviewRegistry()),
        clock=clock,
        **limits,
    )


def test_idle_sessions_are_evicted(uploads, clock: _Clock):
    sessions = _bounded(uploads, clock, idle_timeout=timedelta(minutes=30))
    stale = sessions.open()
    stale.dialog.change_profile_image(PendingFile("logo.png", b"png"))
    clock.advance(20)
    fresh = sessions.open()
    clock.advance(15)

    with pytest.raises(EntityNotFoundError):
        sessions.get(stale.id)

    assert sessions.get(fresh.id) is fresh
    assert stale.dialog.is_open is False
    assert stale.dialog.previews.live_count == 0
    assert len(sessions) == 1


def test_use_keeps_a_session_alive(uploads, clock: _Clock):
    sessions = _bounded(uploads, clock, idle_timeout=timedelta(minutes=30))
    session = sessions.open()
    for _ in range(3):
        clock.advance(20)
        sessions.get(session.id)

    assert session.dialog.is_open is True


def test_capacity_evicts_least_recently_used(uploads, clock: _Clock):
    sessions = _bounded(uploads, clock, max_sessions=2)
    first = sessions.open()
    clock.advance(1)
    second = sessions.open()
    clock.advance(1)
    sessions.get(first.id)

    third = sessions.open()

    assert len(sessions) == 2
    assert second.dialog.is_open is False
    assert sessions.get(first.id) is first
    assert sessions.get(third.id) is third


def test_sessions_with_a_save_in_flight_are_kept(uploads, clock: _Clock):
    sessions = _bounded(uploads, clock, idle_timeout=timedelta(minutes=30), max_sessions=1)
    busy = sessions.open()
    busy.dialog.is_submitting = True
    clock.advance(60)

    other = sessions.open()

    assert busy.dialog.is_open is True
    assert len(sessions) == 2
    assert sessions.get(other.id) is other


def test_discard_tolerates_closed_sessions(registry: EditorSessionRegistry):
    session = registry.open()
    assert registry.discard(session.id) is True
    assert registry.discard(session.id) is False
