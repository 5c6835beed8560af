"""Tests for the FavoriteService."""

from __future__ import annotations

import pytest

from pdir.schemas.user import Identity
from pdir.services.exceptions import AuthenticationRequired, DuplicateKey, NotFound
from pdir.services.favorite_service import FavoriteService


@pytest.fixture()
def favorites(session) -> FavoriteService:
    return FavoriteService(session)


class TestFavorites:
    def test_add_and_list(self, favorites: FavoriteService, alice: Identity, make_prompt) -> None:
        first = make_prompt(title="First")
        second = make_prompt(title="Second")
        favorites.add_favorite(alice, first.id)
        favorites.add_favorite(alice, second.id)
        ids = favorites.list_favorite_ids(alice)
        assert set(ids) == {first.id, second.id}
        summaries = favorites.list_favorite_prompts(alice)
        assert [s.id for s in summaries] == ids

    def test_pair_is_unique(self, favorites: FavoriteService, alice: Identity, make_prompt) -> None:
        p = make_prompt()
        favorites.add_favorite(alice, p.id)
        with pytest.raises(DuplicateKey):
            favorites.add_favorite(alice, p.id)
        assert favorites.list_favorite_ids(alice) == [p.id]

    def test_other_users_are_separate(
        self, favorites: FavoriteService, alice: Identity, make_prompt
    ) -> None:
        p = make_prompt()
        bob = Identity(subject="user_bob")
        favorites.add_favorite(alice, p.id)
        favorites.add_favorite(bob, p.id)
        assert favorites.list_favorite_ids(bob) == [p.id]

    def test_unknown_prompt(self, favorites: FavoriteService, alice: Identity) -> None:
        with pytest.raises(NotFound):
            favorites.add_favorite(alice, "missing")

    def test_remove(self, favorites: FavoriteService, alice: Identity, make_prompt) -> None:
        p = make_prompt()
        favorites.add_favorite(alice, p.id)
        assert favorites.remove_favorite(alice, p.id) is True
        assert favorites.remove_favorite(alice, p.id) is False
        assert favorites.list_favorite_ids(alice) == []

    def test_toggle(self, favorites: FavoriteService, alice: Identity, make_prompt) -> None:
        p = make_prompt()
        assert favorites.toggle_favorite(alice, p.id) is True
        assert favorites.toggle_favorite(alice, p.id) is False
        assert favorites.list_favorite_ids(alice) == []

    def test_requires_identity(self, favorites: FavoriteService, make_prompt) -> None:
        p = make_prompt()
        with pytest.raises(AuthenticationRequired):
            favorites.add_favorite(None, p.id)
        with pytest.raises(AuthenticationRequired):
            favorites.list_favorite_prompts(None)
