import pytest

from turnrelay.constants import CODE_ALPHABET, ErrorCode
from turnrelay.errors import ForbiddenError, NameCollisionError, NotFoundError, RegistryFullError
from turnrelay.registry import SessionRegistry, display_name


def test_display_name_possessive() -> None:
    assert display_name("Jack") == "Jack's Game"
    assert display_name("Chris") == "Chris' Game"


def test_create_registers_session_with_derived_name(registry: SessionRegistry) -> None:
    s = registry.create("Jack", 2, b"\x00\x01", "conn-a")
    assert s.code in registry
    assert s.name == "Jack's Game"
    assert s.difficulty == 2
    assert s.turn_data == b"\x00\x01"
    assert s.initiator_endpoint == "conn-a"
    assert s.joiner_name is None
    assert s.created_at.tzinfo is not None


def test_codes_are_unique_and_long_enough(registry: SessionRegistry) -> None:
    codes = [registry.create(f"p{i}", 1, b"", f"c{i}").code for i in range(500)]
    assert len(set(codes)) == 500
    assert all(len(c) >= 8 and set(c) <= set(CODE_ALPHABET) for c in codes)


def test_generate_code_retries_on_collision(registry: SessionRegistry, monkeypatch: pytest.MonkeyPatch) -> None:
    existing = registry.create("Ann", 1, b"", "c1")
    # Первая попытка даёт существующий код, вторая — новый
    chars = iter(list(existing.code) + list("zzzzzzzz"))
    monkeypatch.setattr("turnrelay.registry.secrets.choice", lambda _alphabet: next(chars))
    second = registry.create("Bob", 1, b"", "c2")
    assert second.code == "zzzzzzzz"
    assert len(registry) == 2


def test_generate_code_gives_up_when_space_exhausted(registry: SessionRegistry, monkeypatch: pytest.MonkeyPatch) -> None:
    registry.create("Ann", 1, b"", "c1")
    monkeypatch.setattr("turnrelay.registry.secrets.choice", lambda _alphabet: "a")
    registry.create("Bob", 1, b"", "c2")
    with pytest.raises(RegistryFullError) as exc:
        registry.create("Cid", 1, b"", "c3")
    assert exc.value.code is ErrorCode.UNAVAILABLE
    assert len(registry) == 2


def test_joinable_lists_only_sessions_without_joiner(registry: SessionRegistry) -> None:
    open_game = registry.create("Ann", 1, b"", "c1")
    full_game = registry.create("Bob", 3, b"", "c2")
    registry.join(full_game.code, "Cid", "c3")
    assert [s.code for s in registry.joinable()] == [open_game.code]


def test_join_unknown_code(registry: SessionRegistry) -> None:
    with pytest.raises(NotFoundError) as exc:
        registry.join("nope0000", "Bob", "c2")
    assert exc.value.code is ErrorCode.NOT_FOUND


def test_join_with_initiator_name_collides(registry: SessionRegistry) -> None:
    s = registry.create("Ann", 1, b"", "c1")
    with pytest.raises(NameCollisionError):
        registry.join(s.code, "Ann", "c2")
    assert s.joiner_name is None
    assert s.joiner_endpoint is None
    assert s.joinable


def test_join_full_session_is_forbidden(registry: SessionRegistry) -> None:
    s = registry.create("Ann", 1, b"", "c1")
    registry.join(s.code, "Bob", "c2")
    with pytest.raises(ForbiddenError):
        registry.join(s.code, "Cid", "c3")
    assert s.joiner_name == "Bob"
    assert s.joiner_endpoint == "c2"


def test_remove_is_idempotent(registry: SessionRegistry) -> None:
    s = registry.create("Ann", 1, b"", "c1")
    assert registry.remove(s.code) is True
    assert registry.remove(s.code) is False
    assert registry.get(s.code) is None
    with pytest.raises(NotFoundError):
        registry.join(s.code, "Bob", "c2")
